"""Zync options resolution.

This module provides the ZyncOptionsProvider, which merges the APIManager
resource, the zync secret and computed defaults into validated ZyncOptions.
"""

import copy

from icecream import ic
from kubernetes import client

from apimanager_options import product
from apimanager_options.component import defaults
from apimanager_options.component.zync import (
    ZYNC_SECRET_AUTHENTICATION_TOKEN_FIELD_NAME,
    ZYNC_SECRET_DATABASE_PASSWORD_FIELD_NAME,
    ZYNC_SECRET_DATABASE_URL_FIELD_NAME,
    ZYNC_SECRET_KEY_BASE_FIELD_NAME,
    ZYNC_SECRET_NAME,
    ZyncOptions,
)
from apimanager_options.exceptions import OptionsError
from apimanager_options.helpers import merge_labels, pod_template_labels
from apimanager_options.models import APIManager
from apimanager_options.operator.images_provider import AmpImagesOptionsProvider
from apimanager_options.secrets.consistency import validate_database_url_password_consistency
from apimanager_options.secrets.policy import SecretFieldPolicy, resolve_secret_fields
from apimanager_options.secrets.source import SecretSource

# The password row comes first: the default database URL embeds whichever
# password was resolved, stored or generated.
ZYNC_SECRET_FIELDS: tuple[SecretFieldPolicy, ...] = (
    SecretFieldPolicy(
        option="database_password",
        secret_name=ZYNC_SECRET_NAME,
        field_name=ZYNC_SECRET_DATABASE_PASSWORD_FIELD_NAME,
        default=lambda resolved: defaults.default_zync_database_password(),
        required_if=APIManager.is_zync_external_database_enabled,
    ),
    SecretFieldPolicy(
        option="secret_key_base",
        secret_name=ZYNC_SECRET_NAME,
        field_name=ZYNC_SECRET_KEY_BASE_FIELD_NAME,
        default=lambda resolved: defaults.default_zync_secret_key_base(),
    ),
    SecretFieldPolicy(
        option="authentication_token",
        secret_name=ZYNC_SECRET_NAME,
        field_name=ZYNC_SECRET_AUTHENTICATION_TOKEN_FIELD_NAME,
        default=lambda resolved: defaults.default_zync_authentication_token(),
    ),
    SecretFieldPolicy(
        option="database_url",
        secret_name=ZYNC_SECRET_NAME,
        field_name=ZYNC_SECRET_DATABASE_URL_FIELD_NAME,
        default=lambda resolved: defaults.default_zync_database_url(resolved["database_password"]),
        required_if=APIManager.is_zync_external_database_enabled,
    ),
)


class ZyncOptionsProvider:
    """Resolves ZyncOptions for one APIManager.

    Attributes:
        apimanager: The desired state, never modified.
        namespace: Namespace the options target.
        secret_source: Store holding the zync secret.

    """

    def __init__(self, apimanager: APIManager, namespace: str, secret_source: SecretSource) -> None:
        self.apimanager = apimanager
        self.namespace = namespace
        self.secret_source = secret_source
        self.options = ZyncOptions()

    def get_zync_options(self) -> ZyncOptions:
        """Run the resolution pipeline.

        Returns:
            Validated zync options.

        Raises:
            SecretNotFoundError: If a required secret field is absent.
            SecretParseError: If the stored database URL is malformed.
            InconsistencyError: If the database URL and password disagree.
            OptionsValidationError: If a required option ends up empty.

        """
        self.options = ZyncOptions()
        self.options.image_tag = product.THREESCALE_RELEASE
        self.options.database_image_tag = product.THREESCALE_RELEASE

        try:
            self._set_secret_based_options()
        except OptionsError as err:
            raise err.with_context("get_zync_options reading secret options") from err

        self._set_resource_requirements_options()
        self._set_affinity_and_tolerations_options()
        self._set_replicas()

        try:
            image_options = AmpImagesOptionsProvider(self.apimanager).get_amp_images_options()
        except OptionsError as err:
            raise err.with_context("get_zync_options reading image options") from err

        self.options.common_labels = self._common_labels()
        self.options.common_zync_labels = self._common_zync_labels()
        self.options.common_zync_que_labels = self._common_zync_que_labels()
        self.options.common_zync_database_labels = self._common_zync_database_labels()
        self.options.zync_pod_template_labels = pod_template_labels(
            "zync", image_options.zync_image, self.options.common_zync_labels
        )
        self.options.zync_que_pod_template_labels = pod_template_labels(
            "zync-que", image_options.zync_image, self.options.common_zync_que_labels
        )
        self.options.zync_database_pod_template_labels = pod_template_labels(
            "zync-database", image_options.zync_database_postgresql_image, self.options.common_zync_database_labels
        )

        self.options.zync_metrics = True

        self.options.zync_que_service_account_image_pull_secrets = self._zync_que_service_account_image_pull_secrets()

        self.options.namespace = self.namespace

        try:
            self.options.validate()
        except OptionsError as err:
            raise err.with_context("get_zync_options validating") from err
        return self.options

    def _set_secret_based_options(self) -> None:
        resolved = resolve_secret_fields(ZYNC_SECRET_FIELDS, self.apimanager, self.secret_source)
        for option, value in resolved.items():
            setattr(self.options, option, value)

        validate_database_url_password_consistency(
            self.options.database_url,
            self.options.database_password,
            secret_name=ZYNC_SECRET_NAME,
            url_field=ZYNC_SECRET_DATABASE_URL_FIELD_NAME,
            password_field=ZYNC_SECRET_DATABASE_PASSWORD_FIELD_NAME,
        )

    def _set_resource_requirements_options(self) -> None:
        if self.apimanager.spec.resource_requirements_enabled:
            self.options.container_resource_requirements = defaults.default_zync_container_resource_requirements()
            self.options.que_container_resource_requirements = (
                defaults.default_zync_que_container_resource_requirements()
            )
            self.options.database_container_resource_requirements = (
                defaults.default_zync_database_container_resource_requirements()
            )
        else:
            self.options.container_resource_requirements = client.V1ResourceRequirements()
            self.options.que_container_resource_requirements = client.V1ResourceRequirements()
            self.options.database_container_resource_requirements = client.V1ResourceRequirements()

        # Per-container resources in the APIManager win over the global toggle
        zync = self.apimanager.spec.zync
        if zync.app_spec.resources is not None:
            self.options.container_resource_requirements = copy.deepcopy(zync.app_spec.resources)
        if zync.que_spec.resources is not None:
            self.options.que_container_resource_requirements = copy.deepcopy(zync.que_spec.resources)
        if zync.database_resources is not None:
            self.options.database_container_resource_requirements = copy.deepcopy(zync.database_resources)

    def _set_affinity_and_tolerations_options(self) -> None:
        zync = self.apimanager.spec.zync
        self.options.zync_affinity = zync.app_spec.affinity
        self.options.zync_tolerations = zync.app_spec.tolerations
        self.options.zync_que_affinity = zync.que_spec.affinity
        self.options.zync_que_tolerations = zync.que_spec.tolerations
        self.options.zync_database_affinity = zync.database_affinity
        self.options.zync_database_tolerations = zync.database_tolerations

    def _set_replicas(self) -> None:
        self.options.zync_replicas = self.apimanager.spec.zync.app_spec.replicas
        self.options.zync_que_replicas = self.apimanager.spec.zync.que_spec.replicas
        ic(self.options.zync_replicas, self.options.zync_que_replicas)

    def _common_labels(self) -> dict[str, str]:
        return {
            "app": self.apimanager.spec.app_label,
            "threescale_component": "zync",
        }

    def _common_zync_labels(self) -> dict[str, str]:
        return merge_labels(self._common_labels(), {"threescale_component_element": "zync"})

    def _common_zync_que_labels(self) -> dict[str, str]:
        return merge_labels(self._common_labels(), {"threescale_component_element": "zync-que"})

    def _common_zync_database_labels(self) -> dict[str, str]:
        return merge_labels(self._common_labels(), {"threescale_component_element": "database"})

    def _zync_que_service_account_image_pull_secrets(self) -> list[client.V1LocalObjectReference]:
        if self.apimanager.spec.image_pull_secrets is not None:
            return copy.deepcopy(self.apimanager.spec.image_pull_secrets)
        return defaults.default_zync_que_service_account_image_pull_secrets()

"""APIcast options resolution."""

import copy

from kubernetes import client

from apimanager_options import product
from apimanager_options.component import defaults
from apimanager_options.component.apicast import ApicastOptions
from apimanager_options.exceptions import OptionsError
from apimanager_options.helpers import merge_labels, pod_template_labels
from apimanager_options.models import APIManager
from apimanager_options.operator.images_provider import AmpImagesOptionsProvider


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


class ApicastOptionsProvider:
    """Resolves ApicastOptions for one APIManager.

    APIcast has no secret-backed options, so no secret store is needed.
    """

    def __init__(self, apimanager: APIManager, namespace: str) -> None:
        self.apimanager = apimanager
        self.namespace = namespace
        self.options = ApicastOptions()

    def get_apicast_options(self) -> ApicastOptions:
        """Run the resolution pipeline.

        Returns:
            Validated APIcast options.

        Raises:
            OptionsValidationError: If a required option ends up empty.

        """
        apicast = self.apimanager.spec.apicast
        self.options = ApicastOptions()
        self.options.image_tag = product.THREESCALE_RELEASE
        self.options.management_api = apicast.management_api
        self.options.openssl_verify = _format_bool(apicast.openssl_verify)
        self.options.response_codes = _format_bool(apicast.response_codes)

        self._set_resource_requirements_options()
        self._set_affinity_and_tolerations_options()
        self.options.staging_replicas = apicast.staging_spec.replicas
        self.options.production_replicas = apicast.production_spec.replicas

        try:
            image_options = AmpImagesOptionsProvider(self.apimanager).get_amp_images_options()
        except OptionsError as err:
            raise err.with_context("get_apicast_options reading image options") from err

        self.options.common_labels = self._common_labels()
        self.options.common_staging_labels = merge_labels(
            self.options.common_labels, {"threescale_component_element": "staging"}
        )
        self.options.common_production_labels = merge_labels(
            self.options.common_labels, {"threescale_component_element": "production"}
        )
        self.options.staging_pod_template_labels = pod_template_labels(
            "apicast-staging", image_options.apicast_image, self.options.common_staging_labels
        )
        self.options.production_pod_template_labels = pod_template_labels(
            "apicast-production", image_options.apicast_image, self.options.common_production_labels
        )

        self.options.extended_metrics = True

        self.options.namespace = self.namespace

        try:
            self.options.validate()
        except OptionsError as err:
            raise err.with_context("get_apicast_options validating") from err
        return self.options

    def _set_resource_requirements_options(self) -> None:
        if self.apimanager.spec.resource_requirements_enabled:
            self.options.staging_resource_requirements = defaults.default_apicast_staging_container_resource_requirements()
            self.options.production_resource_requirements = (
                defaults.default_apicast_production_container_resource_requirements()
            )
        else:
            self.options.staging_resource_requirements = client.V1ResourceRequirements()
            self.options.production_resource_requirements = client.V1ResourceRequirements()

        # Per-container resources in the APIManager win over the global toggle
        apicast = self.apimanager.spec.apicast
        if apicast.staging_spec.resources is not None:
            self.options.staging_resource_requirements = copy.deepcopy(apicast.staging_spec.resources)
        if apicast.production_spec.resources is not None:
            self.options.production_resource_requirements = copy.deepcopy(apicast.production_spec.resources)

    def _set_affinity_and_tolerations_options(self) -> None:
        apicast = self.apimanager.spec.apicast
        self.options.staging_affinity = apicast.staging_spec.affinity
        self.options.staging_tolerations = apicast.staging_spec.tolerations
        self.options.production_affinity = apicast.production_spec.affinity
        self.options.production_tolerations = apicast.production_spec.tolerations

    def _common_labels(self) -> dict[str, str]:
        return {
            "app": self.apimanager.spec.app_label,
            "threescale_component": "apicast",
        }

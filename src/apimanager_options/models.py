"""Desired-state models for apimanager-options.

This module provides type-safe data structures for the APIManager
resource, replacing the loosely-typed dictionaries read from YAML with
proper Python data classes. Defaults are applied on construction, so a
resolver can rely on every defaulted field being present.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kubernetes import client

from apimanager_options.exceptions import SpecParsingError

DEFAULT_APP_LABEL = "3scale-api-management"
DEFAULT_APICAST_MANAGEMENT_API = "status"


class Component(str, Enum):
    """Subsystems whose options can be resolved.

    Inherits from str to allow direct use as a CLI choice.
    """

    ZYNC = "zync"
    APICAST = "apicast"
    IMAGES = "images"


def _mapping(data: Any, path: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise SpecParsingError(f"'{path}' must be a mapping, got {type(data).__name__}")
    return data


def _resources(data: Any, path: str) -> client.V1ResourceRequirements | None:
    if data is None:
        return None
    data = _mapping(data, path)
    return client.V1ResourceRequirements(limits=data.get("limits"), requests=data.get("requests"))


def _replicas(data: Any, path: str) -> int | None:
    if data is None:
        return None
    if isinstance(data, bool) or not isinstance(data, int) or data < 0:
        raise SpecParsingError(f"'{path}' must be a non-negative integer, got {data!r}")
    return data


def _bool(data: Any, path: str) -> bool | None:
    if data is None:
        return None
    if not isinstance(data, bool):
        raise SpecParsingError(f"'{path}' must be a boolean, got {data!r}")
    return data


@dataclass
class WorkloadSpec:
    """Per-workload settings shared by every deployable tier.

    Attributes:
        replicas: Desired replica count.
        resources: Explicit container resource requirements, overriding
            the global resource requirements toggle when set.
        affinity: Pod affinity, copied verbatim into the options.
        tolerations: Pod tolerations, copied verbatim into the options.

    """

    replicas: int | None = None
    resources: client.V1ResourceRequirements | None = None
    affinity: dict[str, Any] | None = None
    tolerations: list[dict[str, Any]] | None = None

    @classmethod
    def from_dict(cls, data: Any, path: str) -> "WorkloadSpec":
        data = _mapping(data, path)
        return cls(
            replicas=_replicas(data.get("replicas"), f"{path}.replicas"),
            resources=_resources(data.get("resources"), f"{path}.resources"),
            affinity=data.get("affinity"),
            tolerations=data.get("tolerations"),
        )

    def set_defaults(self) -> None:
        if self.replicas is None:
            self.replicas = 1


@dataclass
class ZyncSpec:
    """Settings of zync, its que worker and its database."""

    image: str | None = None
    postgresql_image: str | None = None
    app_spec: WorkloadSpec = field(default_factory=WorkloadSpec)
    que_spec: WorkloadSpec = field(default_factory=WorkloadSpec)
    database_resources: client.V1ResourceRequirements | None = None
    database_affinity: dict[str, Any] | None = None
    database_tolerations: list[dict[str, Any]] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ZyncSpec":
        data = _mapping(data, "spec.zync")
        return cls(
            image=data.get("image"),
            postgresql_image=data.get("postgreSQLImage"),
            app_spec=WorkloadSpec.from_dict(data.get("appSpec"), "spec.zync.appSpec"),
            que_spec=WorkloadSpec.from_dict(data.get("queSpec"), "spec.zync.queSpec"),
            database_resources=_resources(data.get("databaseResources"), "spec.zync.databaseResources"),
            database_affinity=data.get("databaseAffinity"),
            database_tolerations=data.get("databaseTolerations"),
        )

    def set_defaults(self) -> None:
        self.app_spec.set_defaults()
        self.que_spec.set_defaults()


@dataclass
class ApicastSpec:
    """Settings of the staging and production API gateways."""

    image: str | None = None
    management_api: str | None = None
    openssl_verify: bool | None = None
    response_codes: bool | None = None
    staging_spec: WorkloadSpec = field(default_factory=WorkloadSpec)
    production_spec: WorkloadSpec = field(default_factory=WorkloadSpec)

    @classmethod
    def from_dict(cls, data: Any) -> "ApicastSpec":
        data = _mapping(data, "spec.apicast")
        return cls(
            image=data.get("image"),
            management_api=data.get("apicastManagementAPI"),
            openssl_verify=_bool(data.get("openSSLVerify"), "spec.apicast.openSSLVerify"),
            response_codes=_bool(data.get("responseCodes"), "spec.apicast.responseCodes"),
            staging_spec=WorkloadSpec.from_dict(data.get("stagingSpec"), "spec.apicast.stagingSpec"),
            production_spec=WorkloadSpec.from_dict(data.get("productionSpec"), "spec.apicast.productionSpec"),
        )

    def set_defaults(self) -> None:
        if self.management_api is None:
            self.management_api = DEFAULT_APICAST_MANAGEMENT_API
        if self.openssl_verify is None:
            self.openssl_verify = False
        if self.response_codes is None:
            self.response_codes = True
        self.staging_spec.set_defaults()
        self.production_spec.set_defaults()


@dataclass
class APIManagerSpec:
    """The desired state of a whole API management deployment."""

    app_label: str | None = None
    resource_requirements_enabled: bool | None = None
    image_pull_secrets: list[client.V1LocalObjectReference] | None = None
    zync_external_database: bool | None = None
    zync: ZyncSpec = field(default_factory=ZyncSpec)
    apicast: ApicastSpec = field(default_factory=ApicastSpec)

    @classmethod
    def from_dict(cls, data: Any) -> "APIManagerSpec":
        data = _mapping(data, "spec")
        pull_secrets = data.get("imagePullSecrets")
        if pull_secrets is not None:
            if not isinstance(pull_secrets, list):
                raise SpecParsingError("'spec.imagePullSecrets' must be a list")
            pull_secrets = [
                client.V1LocalObjectReference(name=_mapping(ref, "spec.imagePullSecrets[]").get("name"))
                for ref in pull_secrets
            ]
        external = _mapping(data.get("externalComponents"), "spec.externalComponents")
        external_zync = _mapping(external.get("zync"), "spec.externalComponents.zync")
        return cls(
            app_label=data.get("appLabel"),
            resource_requirements_enabled=_bool(
                data.get("resourceRequirementsEnabled"), "spec.resourceRequirementsEnabled"
            ),
            image_pull_secrets=pull_secrets,
            zync_external_database=_bool(external_zync.get("database"), "spec.externalComponents.zync.database"),
            zync=ZyncSpec.from_dict(data.get("zync")),
            apicast=ApicastSpec.from_dict(data.get("apicast")),
        )

    def set_defaults(self) -> None:
        if self.app_label is None:
            self.app_label = DEFAULT_APP_LABEL
        if self.resource_requirements_enabled is None:
            self.resource_requirements_enabled = True
        if self.zync_external_database is None:
            self.zync_external_database = False
        self.zync.set_defaults()
        self.apicast.set_defaults()


@dataclass
class APIManager:
    """An APIManager resource.

    Attributes:
        name: The resource name.
        namespace: The namespace the resource lives in.
        spec: The desired state.

    """

    name: str
    namespace: str = ""
    spec: APIManagerSpec = field(default_factory=APIManagerSpec)

    def __post_init__(self) -> None:
        self.spec.set_defaults()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "APIManager":
        """Build an APIManager from a parsed resource document.

        Args:
            data: The document, with 'metadata' and 'spec' sections.

        Returns:
            The APIManager with defaults applied.

        Raises:
            SpecParsingError: If a section has the wrong shape or the
                resource has no name.

        """
        metadata = _mapping(data.get("metadata"), "metadata")
        name = metadata.get("name")
        if not name:
            raise SpecParsingError("'metadata.name' is required")
        return cls(
            name=name,
            namespace=metadata.get("namespace") or "",
            spec=APIManagerSpec.from_dict(data.get("spec")),
        )

    def is_zync_external_database_enabled(self) -> bool:
        return bool(self.spec.zync_external_database)

"""apimanager-options: resolve APIManager subsystem options.

This package turns an APIManager resource, the secrets already stored
in its namespace and computed defaults into validated per-subsystem
options, and builds the static alerting rules of every subsystem.

Example usage:
    from apimanager_options import APIManager, KubernetesSecretSource, ZyncOptionsProvider

    apimanager = APIManager(name="example", namespace="3scale")
    source = KubernetesSecretSource("3scale")
    options = ZyncOptionsProvider(apimanager, "3scale", source).get_zync_options()
"""

__version__ = "0.1.0"

from apimanager_options.cli import cli
from apimanager_options.exceptions import (
    ClusterConnectionError,
    InconsistencyError,
    OptionsError,
    OptionsValidationError,
    RuleFactoryError,
    SecretNotFoundError,
    SecretParseError,
    SecretSourceError,
    SpecParsingError,
)
from apimanager_options.models import APIManager
from apimanager_options.operator import AmpImagesOptionsProvider, ApicastOptionsProvider, ZyncOptionsProvider
from apimanager_options.prometheusrules import RuleFactoryRegistry, build_rule_factory_registry
from apimanager_options.secrets import KubernetesSecretSource, SecretSource

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "APIManager",
    "AmpImagesOptionsProvider",
    "ApicastOptionsProvider",
    "ZyncOptionsProvider",
    "KubernetesSecretSource",
    "SecretSource",
    "RuleFactoryRegistry",
    "build_rule_factory_registry",
    # Exceptions
    "OptionsError",
    "SecretNotFoundError",
    "SecretParseError",
    "InconsistencyError",
    "OptionsValidationError",
    "SecretSourceError",
    "ClusterConnectionError",
    "SpecParsingError",
    "RuleFactoryError",
]

"""PrometheusRule factories for every subsystem.

Each factory fills its options with placeholders for everything the rules
do not depend on. The options still go through the normal structural
validation, so a factory that falls behind its options model fails loudly.
"""

from typing import Any

from apimanager_options.component import defaults
from apimanager_options.component.apicast import Apicast, ApicastOptions
from apimanager_options.component.kube_state_metrics import KubeStateMetrics, KubeStateMetricsOptions
from apimanager_options.component.monitoring import NAMESPACE_PLACEHOLDER, PrometheusRuleBundle
from apimanager_options.component.zync import Zync, ZyncOptions
from apimanager_options.exceptions import OptionsValidationError, RuleFactoryError
from apimanager_options.models import DEFAULT_APP_LABEL
from apimanager_options.prometheusrules.registry import PrometheusRuleFactory, RuleFactoryRegistry

# Value for options that must be set but do not affect the rules
_PLACEHOLDER = "_"


def _validated(options: Any, factory_type: str) -> Any:
    try:
        options.validate()
    except OptionsValidationError as err:
        raise RuleFactoryError(f"'{factory_type}' rule factory built invalid options: {err}") from err
    return options


def _common_labels(component: str) -> dict[str, str]:
    return {"app": DEFAULT_APP_LABEL, "threescale_component": component}


def _zync_options() -> ZyncOptions:
    options = ZyncOptions()

    # Required for generating the rules
    options.common_zync_labels = {**_common_labels("zync"), "threescale_component_element": "zync"}
    options.common_zync_que_labels = {**_common_labels("zync"), "threescale_component_element": "zync-que"}
    options.namespace = NAMESPACE_PLACEHOLDER

    # Required for passing validation only
    options.image_tag = _PLACEHOLDER
    options.database_image_tag = _PLACEHOLDER
    options.zync_replicas = 1
    options.zync_que_replicas = 1
    options.database_url = _PLACEHOLDER
    options.database_password = _PLACEHOLDER
    options.secret_key_base = _PLACEHOLDER
    options.authentication_token = _PLACEHOLDER
    options.common_labels = {}
    options.common_zync_database_labels = {}
    options.zync_pod_template_labels = {}
    options.zync_que_pod_template_labels = {}
    options.zync_database_pod_template_labels = {}
    options.zync_que_service_account_image_pull_secrets = defaults.default_zync_que_service_account_image_pull_secrets()
    return options


class ZyncPrometheusRuleFactory(PrometheusRuleFactory):
    @property
    def type(self) -> str:
        return "zync"

    def prometheus_rule(self) -> PrometheusRuleBundle:
        return Zync(_validated(_zync_options(), self.type)).zync_prometheus_rules()


class ZyncQuePrometheusRuleFactory(PrometheusRuleFactory):
    @property
    def type(self) -> str:
        return "zync-que"

    def prometheus_rule(self) -> PrometheusRuleBundle:
        return Zync(_validated(_zync_options(), self.type)).zync_que_prometheus_rules()


class ApicastPrometheusRuleFactory(PrometheusRuleFactory):
    @property
    def type(self) -> str:
        return "apicast"

    def prometheus_rule(self) -> PrometheusRuleBundle:
        options = ApicastOptions()
        options.common_labels = _common_labels("apicast")
        options.namespace = NAMESPACE_PLACEHOLDER

        options.management_api = _PLACEHOLDER
        options.openssl_verify = _PLACEHOLDER
        options.response_codes = _PLACEHOLDER
        options.image_tag = _PLACEHOLDER
        options.staging_replicas = 1
        options.production_replicas = 1
        options.common_staging_labels = {}
        options.common_production_labels = {}
        options.staging_pod_template_labels = {}
        options.production_pod_template_labels = {}

        return Apicast(_validated(options, self.type)).apicast_prometheus_rules()


class KubeStateMetricsPrometheusRuleFactory(PrometheusRuleFactory):
    @property
    def type(self) -> str:
        return "threescale-kube-state-metrics"

    def prometheus_rule(self) -> PrometheusRuleBundle:
        options = KubeStateMetricsOptions(common_labels={"app": DEFAULT_APP_LABEL}, namespace=NAMESPACE_PLACEHOLDER)
        return KubeStateMetrics(_validated(options, self.type)).prometheus_rules()


def build_rule_factory_registry() -> RuleFactoryRegistry:
    """Build the frozen registry of every known rule factory.

    Returns:
        The registry, in a fixed registration order.

    """
    registry = RuleFactoryRegistry()
    registry.register(ZyncPrometheusRuleFactory)
    registry.register(ZyncQuePrometheusRuleFactory)
    registry.register(ApicastPrometheusRuleFactory)
    registry.register(KubeStateMetricsPrometheusRuleFactory)
    return registry.freeze()

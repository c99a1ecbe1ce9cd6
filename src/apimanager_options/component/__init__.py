"""Options models and the artifacts derived from them.

Each module holds the options record of one subsystem together with the
alerting rules computed from it.
"""

from apimanager_options.component.apicast import Apicast, ApicastOptions
from apimanager_options.component.images import AmpImagesOptions
from apimanager_options.component.kube_state_metrics import KubeStateMetrics, KubeStateMetricsOptions
from apimanager_options.component.monitoring import AlertRule, PrometheusRuleBundle, RuleGroup, Severity
from apimanager_options.component.zync import Zync, ZyncOptions

__all__ = [
    # options
    "AmpImagesOptions",
    "ApicastOptions",
    "KubeStateMetricsOptions",
    "ZyncOptions",
    # components
    "Apicast",
    "KubeStateMetrics",
    "Zync",
    # monitoring
    "AlertRule",
    "PrometheusRuleBundle",
    "RuleGroup",
    "Severity",
]

"""Workload health rules over kube-state-metrics signals.

These cover every pod of the deployment rather than a single subsystem.
"""

from dataclasses import dataclass

from apimanager_options.component.monitoring import (
    MONITORING_LABELS,
    AlertRule,
    PrometheusRuleBundle,
    RuleGroup,
    Severity,
    expr,
)
from apimanager_options.component.options import validate_required
from apimanager_options.helpers import merge_labels

_SOP_BASE_URL = "https://github.com/3scale/3scale-Operations/blob/master/sops/alerts"

# Pods and replication controllers owned by the deployment
_WORKLOADS = "(apicast-.*|backend-.*|system-.*|zync-.*)"


@dataclass
class KubeStateMetricsOptions:
    common_labels: dict[str, str] | None = None
    namespace: str = ""

    def validate(self) -> None:
        validate_required(self, non_empty=("namespace",), present=("common_labels",))


class KubeStateMetrics:
    """Derives the kube-state-metrics rule bundle from validated options."""

    def __init__(self, options: KubeStateMetricsOptions) -> None:
        self.options = options

    def _expr(self, template: str) -> str:
        return expr(template, namespace=self.options.namespace, workloads=_WORKLOADS)

    def prometheus_rules(self) -> PrometheusRuleBundle:
        rules = (
            AlertRule(
                alert="ThreescalePodCrashLooping",
                expr=self._expr(
                    'rate(kube_pod_container_status_restarts_total{namespace="$namespace",pod=~"$workloads"}[15m])'
                    " * 60 * 5 > 0"
                ),
                for_duration="5m",
                severity=Severity.CRITICAL,
                message="Pod {{ $labels.namespace }}/{{ $labels.pod }} ({{ $labels.container }}) is restarting "
                '{{ printf "%.2f" $value }} times / 5 minutes.',
                sop_url=f"{_SOP_BASE_URL}/pod_crash_looping.adoc",
            ),
            AlertRule(
                alert="ThreescalePodNotReady",
                expr=self._expr(
                    "sum by (namespace, pod) (max by(namespace, pod) (kube_pod_status_phase"
                    '{namespace="$namespace",pod=~"$workloads", phase=~"Pending|Unknown"})'
                    " * on(namespace, pod) group_left(owner_kind) max by(namespace, pod, owner_kind)"
                    ' (kube_pod_owner{namespace="$namespace",owner_kind!="Job"})) > 0'
                ),
                for_duration="5m",
                severity=Severity.CRITICAL,
                message="Pod {{ $labels.namespace }}/{{ $labels.pod }} has been in a non-ready state "
                "for longer than 5 minutes.",
                sop_url=f"{_SOP_BASE_URL}/pod_not_ready.adoc",
            ),
            AlertRule(
                alert="ThreescaleReplicationControllerReplicasMismatch",
                expr=self._expr(
                    'kube_replicationcontroller_spec_replicas {namespace="$namespace",replicationcontroller=~"$workloads"}'
                    " != kube_replicationcontroller_status_ready_replicas "
                    '{namespace="$namespace",replicationcontroller=~"$workloads"}'
                ),
                for_duration="5m",
                severity=Severity.CRITICAL,
                message="ReplicationController {{ $labels.namespace }}/{{ $labels.replicationcontroller }} "
                "has not matched the expected number of replicas for longer than 5 minutes.",
                sop_url=f"{_SOP_BASE_URL}/replication_controller_replicas_mismatch.adoc",
            ),
            AlertRule(
                alert="ThreescaleContainerWaiting",
                expr=self._expr(
                    "sum by (namespace, pod, container) (kube_pod_container_status_waiting_reason"
                    '{namespace="$namespace",pod=~"$workloads"}) > 0'
                ),
                for_duration="1h",
                severity=Severity.WARNING,
                message="Pod {{ $labels.namespace }}/{{ $labels.pod }} container {{ $labels.container }} "
                "has been in waiting state for longer than 1 hour.",
                sop_url=f"{_SOP_BASE_URL}/container_waiting.adoc",
            ),
            AlertRule(
                alert="ThreescaleContainerCPUHigh",
                expr=self._expr(
                    "sum(node_namespace_pod_container:container_cpu_usage_seconds_total:sum_irate"
                    '{namespace="$namespace",pod=~"$workloads"}) by (namespace, container, pod)'
                    " / sum(kube_pod_container_resource_limits_cpu_cores"
                    '{namespace="$namespace",pod=~"$workloads"}) by (namespace, container, pod) * 100 > 90'
                ),
                for_duration="15m",
                severity=Severity.WARNING,
                message="Pod {{ $labels.namespace }}/{{ $labels.pod }} container {{ $labels.container }} "
                "has High CPU usage for longer than 15 minutes.",
                sop_url=f"{_SOP_BASE_URL}/container_cpu_high.adoc",
            ),
            AlertRule(
                alert="ThreescaleContainerMemoryHigh",
                expr=self._expr(
                    'sum(container_memory_usage_bytes{namespace="$namespace",container!="",pod=~"$workloads"})'
                    " by(namespace, container, pod) / sum(kube_pod_container_resource_limits_memory_bytes"
                    '{namespace="$namespace",pod=~"$workloads"}) by(namespace, container, pod) * 100 > 90'
                ),
                for_duration="15m",
                severity=Severity.WARNING,
                message="Pod {{ $labels.namespace }}/{{ $labels.pod }} container {{ $labels.container }} "
                "has High Memory usage for longer than 15 minutes.",
                sop_url=f"{_SOP_BASE_URL}/container_memory_high.adoc",
            ),
            AlertRule(
                alert="ThreescaleContainerCPUThrottlingHigh",
                expr=self._expr(
                    "sum(increase(container_cpu_cfs_throttled_periods_total"
                    '{namespace="$namespace",container!="",pod=~"$workloads" }[5m])) by (container, pod, namespace)'
                    " / sum(increase(container_cpu_cfs_periods_total"
                    '{namespace="$namespace",pod=~"$workloads"}[5m])) by (container, pod, namespace) > ( 25 / 100 )'
                ),
                for_duration="15m",
                severity=Severity.WARNING,
                message="{{ $value | humanizePercentage }} throttling of CPU in namespace {{ $labels.namespace }} "
                "for container {{ $labels.container }} in pod {{ $labels.pod }}.",
                sop_url=f"{_SOP_BASE_URL}/container_cpu_throttling_high.adoc",
            ),
        )
        return PrometheusRuleBundle(
            name="threescale-kube-state-metrics",
            labels=merge_labels(self.options.common_labels, MONITORING_LABELS),
            groups=(RuleGroup(name=f"{self.options.namespace}/threescale-kube-state-metrics.rules", rules=rules),),
        )

"""APIcast options and alerting rules.

APIcast is the API gateway. It runs as a staging and a production tier.
"""

from dataclasses import dataclass
from typing import Any

from kubernetes import client

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


@dataclass
class ApicastOptions:
    """Resolved configuration of the staging and production gateways."""

    management_api: str = ""
    openssl_verify: str = ""
    response_codes: str = ""
    image_tag: str = ""
    extended_metrics: bool = False

    staging_resource_requirements: client.V1ResourceRequirements | None = None
    production_resource_requirements: client.V1ResourceRequirements | None = None

    staging_affinity: dict[str, Any] | None = None
    staging_tolerations: list[dict[str, Any]] | None = None
    production_affinity: dict[str, Any] | None = None
    production_tolerations: list[dict[str, Any]] | None = None

    staging_replicas: int | None = None
    production_replicas: int | None = None

    common_labels: dict[str, str] | None = None
    common_staging_labels: dict[str, str] | None = None
    common_production_labels: dict[str, str] | None = None
    staging_pod_template_labels: dict[str, str] | None = None
    production_pod_template_labels: dict[str, str] | None = None

    namespace: str = ""

    def validate(self) -> None:
        validate_required(
            self,
            non_empty=("management_api", "openssl_verify", "response_codes", "image_tag", "namespace"),
            present=(
                "staging_replicas",
                "production_replicas",
                "common_labels",
                "common_staging_labels",
                "common_production_labels",
                "staging_pod_template_labels",
                "production_pod_template_labels",
            ),
        )


class Apicast:
    """Derives APIcast artifacts from validated options."""

    def __init__(self, options: ApicastOptions) -> None:
        self.options = options

    def apicast_prometheus_rules(self) -> PrometheusRuleBundle:
        namespace = self.options.namespace
        return PrometheusRuleBundle(
            name="apicast",
            labels=merge_labels(self.options.common_labels, MONITORING_LABELS),
            groups=(
                RuleGroup(
                    name=f"{namespace}/apicast.rules",
                    rules=(
                        AlertRule(
                            alert="ThreescaleApicastJobDown",
                            expr=expr('up{job=~".*/apicast-production",namespace="$namespace"} == 0', namespace=namespace),
                            for_duration="1m",
                            severity=Severity.CRITICAL,
                            message="Job {{ $labels.job }} on {{ $labels.namespace }} is DOWN",
                        ),
                        AlertRule(
                            alert="ThreescaleApicastRequestTime",
                            expr=expr(
                                "sum(rate(total_response_time_seconds_bucket{namespace='$namespace', "
                                "pod=~'apicast-production-[a-z0-9]+-[a-z0-9]+'}[1m])) by (pod) - "
                                "sum(rate(total_response_time_seconds_bucket{namespace='$namespace', "
                                "pod=~'apicast-production-[a-z0-9]+-[a-z0-9]+', le=\"1.0\"}[1m])) by (pod) > 1",
                                namespace=namespace,
                            ),
                            for_duration="5m",
                            severity=Severity.WARNING,
                            message="High number of request taking more than a second to be processed",
                        ),
                        AlertRule(
                            alert="ThreescaleApicastHttp4xxErrorRate",
                            expr=expr(
                                "sum(rate(apicast_status{namespace='$namespace', status=~\"^4.\"}[1m])) / "
                                "sum(rate(apicast_status{namespace='$namespace'}[1m])) * 100 > 5",
                                namespace=namespace,
                            ),
                            for_duration="5m",
                            severity=Severity.WARNING,
                            message="APIcast high HTTP 4XX error rate",
                        ),
                        AlertRule(
                            alert="ThreescaleApicastLatencyHigh",
                            expr=expr(
                                "histogram_quantile(0.99, sum(rate(total_response_time_seconds_bucket"
                                "{namespace='$namespace',}[30m])) by (le)) > 5",
                                namespace=namespace,
                            ),
                            for_duration="30m",
                            severity=Severity.WARNING,
                            message="APIcast latency high",
                        ),
                        AlertRule(
                            alert="ThreescaleApicastWorkerRestart",
                            expr=expr(
                                "changes(worker_process{namespace='$namespace', "
                                "pod=~'apicast-production.*'}[5m]) > 0",
                                namespace=namespace,
                            ),
                            for_duration="5m",
                            severity=Severity.WARNING,
                            message="A new thread has been started",
                        ),
                    ),
                ),
            ),
        )

"""Zync options and alerting rules.

Zync synchronises API configuration to external systems. It runs as an
application tier, a que worker tier and a PostgreSQL database, all of
which share one options record.
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

ZYNC_SECRET_NAME = "zync"
ZYNC_SECRET_KEY_BASE_FIELD_NAME = "SECRET_KEY_BASE"
ZYNC_SECRET_DATABASE_URL_FIELD_NAME = "DATABASE_URL"
ZYNC_SECRET_DATABASE_PASSWORD_FIELD_NAME = "ZYNC_DATABASE_PASSWORD"
ZYNC_SECRET_AUTHENTICATION_TOKEN_FIELD_NAME = "ZYNC_AUTHENTICATION_TOKEN"

_SOP_BASE_URL = "https://github.com/3scale/3scale-Operations/blob/master/sops/alerts"

# Que job counts above this are reported
_QUE_JOB_COUNT_THRESHOLD = "250"


@dataclass
class ZyncOptions:
    """Resolved configuration of zync, zync-que and the zync database."""

    image_tag: str = ""
    database_image_tag: str = ""

    database_password: str = ""
    database_url: str = ""
    secret_key_base: str = ""
    authentication_token: str = ""

    container_resource_requirements: client.V1ResourceRequirements | None = None
    que_container_resource_requirements: client.V1ResourceRequirements | None = None
    database_container_resource_requirements: client.V1ResourceRequirements | None = None

    zync_affinity: dict[str, Any] | None = None
    zync_tolerations: list[dict[str, Any]] | None = None
    zync_que_affinity: dict[str, Any] | None = None
    zync_que_tolerations: list[dict[str, Any]] | None = None
    zync_database_affinity: dict[str, Any] | None = None
    zync_database_tolerations: list[dict[str, Any]] | None = None

    zync_replicas: int | None = None
    zync_que_replicas: int | None = None

    common_labels: dict[str, str] | None = None
    common_zync_labels: dict[str, str] | None = None
    common_zync_que_labels: dict[str, str] | None = None
    common_zync_database_labels: dict[str, str] | None = None
    zync_pod_template_labels: dict[str, str] | None = None
    zync_que_pod_template_labels: dict[str, str] | None = None
    zync_database_pod_template_labels: dict[str, str] | None = None

    zync_metrics: bool = False

    zync_que_service_account_image_pull_secrets: list[client.V1LocalObjectReference] | None = None

    namespace: str = ""

    def validate(self) -> None:
        """Check structural validity.

        Raises:
            OptionsValidationError: If a required field is empty.

        """
        validate_required(
            self,
            non_empty=(
                "image_tag",
                "database_image_tag",
                "database_password",
                "database_url",
                "secret_key_base",
                "authentication_token",
                "namespace",
            ),
            present=(
                "zync_replicas",
                "zync_que_replicas",
                "common_labels",
                "common_zync_labels",
                "common_zync_que_labels",
                "common_zync_database_labels",
                "zync_pod_template_labels",
                "zync_que_pod_template_labels",
                "zync_database_pod_template_labels",
                "zync_que_service_account_image_pull_secrets",
            ),
        )


class Zync:
    """Derives zync artifacts from validated options."""

    def __init__(self, options: ZyncOptions) -> None:
        self.options = options

    def _target_down_rule(self, job: str) -> AlertRule:
        return AlertRule(
            alert=f"Threescale{''.join(part.capitalize() for part in job.split('-'))}TargetDown",
            expr=expr('up{namespace="$namespace",job=~".*/$job"} == 0', namespace=self.options.namespace, job=job),
            for_duration="1m",
            severity=Severity.CRITICAL,
            message="{{ $labels.job }} on {{ $labels.namespace }} is DOWN",
            sop_url=f"{_SOP_BASE_URL}/prometheus_job_down.adoc",
        )

    def _que_job_count_rule(self, alert: str, job_type: str, description: str) -> AlertRule:
        return AlertRule(
            alert=alert,
            expr=expr(
                "max(que_jobs_scheduled_total{namespace=\"$namespace\",pod=~'zync-que.*',type='$job_type'})"
                " by (namespace,job,exported_job) > $threshold",
                namespace=self.options.namespace,
                job_type=job_type,
                threshold=_QUE_JOB_COUNT_THRESHOLD,
            ),
            for_duration="1m",
            severity=Severity.WARNING,
            message=f"Zync-que {{{{ $labels.exported_job }}}} has a high number of {description} jobs",
            sop_url=f"{_SOP_BASE_URL}/zync.adoc",
        )

    def zync_prometheus_rules(self) -> PrometheusRuleBundle:
        return PrometheusRuleBundle(
            name="zync",
            labels=merge_labels(self.options.common_zync_labels, MONITORING_LABELS),
            groups=(
                RuleGroup(
                    name=f"{self.options.namespace}/zync.rules",
                    rules=(
                        self._target_down_rule("zync"),
                        AlertRule(
                            alert="ThreescaleZync5XXRequestsHigh",
                            expr=expr(
                                'sum(rate(rails_requests_total{namespace="$namespace",'
                                'pod=~"zync-[a-z0-9]+-[a-z0-9]+",status=~"5[0-9]{2}"}[1m])) by (namespace,job) > 50',
                                namespace=self.options.namespace,
                            ),
                            for_duration="1m",
                            severity=Severity.WARNING,
                            message="Job {{ $labels.job }} on {{ $labels.namespace }} has more than 50 HTTP 5xx requests per minute",
                            sop_url=f"{_SOP_BASE_URL}/zync_5xx_requests_high.adoc",
                        ),
                    ),
                ),
            ),
        )

    def zync_que_prometheus_rules(self) -> PrometheusRuleBundle:
        return PrometheusRuleBundle(
            name="zync-que",
            labels=merge_labels(self.options.common_zync_que_labels, MONITORING_LABELS),
            groups=(
                RuleGroup(
                    name=f"{self.options.namespace}/zync-que.rules",
                    rules=(
                        self._target_down_rule("zync-que"),
                        self._que_job_count_rule("ThreescaleZyncQueScheduledJobCountHigh", "scheduled", "scheduled"),
                        self._que_job_count_rule("ThreescaleZyncQueFailedJobCountHigh", "failed", "failed"),
                        self._que_job_count_rule("ThreescaleZyncQueReadyJobCountHigh", "ready", "ready"),
                    ),
                ),
            ),
        )

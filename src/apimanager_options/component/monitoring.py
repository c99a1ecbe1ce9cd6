"""Alerting rule bundles.

A bundle is the data behind a monitoring.coreos.com/v1 PrometheusRule:
an ordered list of rule groups, each an ordered list of alerts. Bundles
are plain values; turning them into YAML is left to the caller.
"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from string import Template
from typing import Any

NAMESPACE_PLACEHOLDER = "__NAMESPACE__"

# Labels selecting the rule for the application monitoring stack
MONITORING_LABELS = {
    "prometheus": "application-monitoring",
    "role": "alert-rules",
}


class Severity(str, Enum):
    """Alert severity levels."""

    CRITICAL = "critical"
    WARNING = "warning"


def expr(template: str, **values: str) -> str:
    """Fill a PromQL template using $name placeholders.

    PromQL uses braces for label matchers, so str.format is not usable.
    """
    return Template(template).substitute(**values)


@dataclass(frozen=True, slots=True)
class AlertRule:
    """A single alerting rule.

    Attributes:
        alert: Alert name.
        expr: PromQL condition.
        for_duration: How long the condition must hold before firing.
        severity: Severity label value.
        message: Human readable message template.
        sop_url: Link to the standard operating procedure, if any.

    """

    alert: str
    expr: str
    for_duration: str
    severity: Severity
    message: str
    sop_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        annotations = {"message": self.message}
        if self.sop_url:
            annotations["sop_url"] = self.sop_url
        return {
            "alert": self.alert,
            "annotations": annotations,
            "expr": self.expr,
            "for": self.for_duration,
            "labels": {"severity": self.severity.value},
        }


@dataclass(frozen=True, slots=True)
class RuleGroup:
    name: str
    rules: tuple[AlertRule, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "rules": [rule.to_dict() for rule in self.rules]}


@dataclass(frozen=True)
class PrometheusRuleBundle:
    """The rules of one subsystem.

    Attributes:
        name: Subsystem name, also the PrometheusRule name.
        labels: Labels of the PrometheusRule object.
        groups: Rule groups in evaluation order.

    """

    name: str
    labels: Mapping[str, str]
    groups: tuple[RuleGroup, ...]

    @property
    def rules(self) -> tuple[AlertRule, ...]:
        return tuple(rule for group in self.groups for rule in group.rules)

    def with_namespace(self, namespace: str) -> "PrometheusRuleBundle":
        """Return a copy targeting a concrete namespace.

        Args:
            namespace: Replacement for the namespace placeholder in group
                names and expressions.

        Returns:
            A new bundle.

        """
        groups = tuple(
            RuleGroup(
                name=group.name.replace(NAMESPACE_PLACEHOLDER, namespace),
                rules=tuple(
                    dataclasses.replace(rule, expr=rule.expr.replace(NAMESPACE_PLACEHOLDER, namespace))
                    for rule in group.rules
                ),
            )
            for group in self.groups
        )
        return dataclasses.replace(self, groups=groups)

    def to_manifest(self) -> dict[str, Any]:
        return {
            "apiVersion": "monitoring.coreos.com/v1",
            "kind": "PrometheusRule",
            "metadata": {"name": self.name, "labels": dict(self.labels)},
            "spec": {"groups": [group.to_dict() for group in self.groups]},
        }

"""PrometheusRule factories and their registry."""

from apimanager_options.prometheusrules.factories import build_rule_factory_registry
from apimanager_options.prometheusrules.registry import PrometheusRuleFactory, RuleFactoryRegistry

__all__ = [
    "PrometheusRuleFactory",
    "RuleFactoryRegistry",
    "build_rule_factory_registry",
]

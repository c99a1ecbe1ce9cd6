#!/usr/bin/env python
"""Command-line interface for apimanager-options.

This module provides the CLI entry point, resolving subsystem options
from an APIManager file and printing PrometheusRule bundles.
"""

import sys
from typing import Any

import click
import yaml
from icecream import ic
from kubernetes import client

from apimanager_options import __version__, console
from apimanager_options.cluster import Cluster
from apimanager_options.component.apicast import ApicastOptions
from apimanager_options.component.images import AmpImagesOptions
from apimanager_options.component.monitoring import NAMESPACE_PLACEHOLDER
from apimanager_options.component.zync import ZyncOptions
from apimanager_options.exceptions import ClusterConnectionError, OptionsError
from apimanager_options.models import APIManager, Component
from apimanager_options.operator.apicast_provider import ApicastOptionsProvider
from apimanager_options.operator.images_provider import AmpImagesOptionsProvider
from apimanager_options.operator.zync_provider import ZyncOptionsProvider
from apimanager_options.parsing import load_apimanager
from apimanager_options.prometheusrules.factories import build_rule_factory_registry
from apimanager_options.prometheusrules.registry import RuleFactoryRegistry


def describe_resources(requirements: client.V1ResourceRequirements | None) -> str:
    """Summarize resource requirements on one line.

    Args:
        requirements: The requirements, possibly empty.

    Returns:
        'unconstrained' for empty requirements, otherwise limits and requests.

    """
    if requirements is None or not (requirements.limits or requirements.requests):
        return "unconstrained"
    parts = []
    for kind, values in (("limits", requirements.limits), ("requests", requirements.requests)):
        if values:
            parts.append(f"{kind} " + ", ".join(f"{key}={value}" for key, value in sorted(values.items())))
    return "; ".join(parts)


def options_summary(options: Any) -> dict[str, str]:
    """Build the printable summary of resolved options.

    Secret values are never included.
    """
    match options:
        case ZyncOptions():
            return {
                "Namespace": options.namespace,
                "Image tag": options.image_tag,
                "Replicas": f"zync={options.zync_replicas}, zync-que={options.zync_que_replicas}",
                "Zync resources": describe_resources(options.container_resource_requirements),
                "Que resources": describe_resources(options.que_container_resource_requirements),
                "Database resources": describe_resources(options.database_container_resource_requirements),
                "Metrics": str(options.zync_metrics).lower(),
                "Pull secrets": ", ".join(ref.name for ref in options.zync_que_service_account_image_pull_secrets),
                "Secret fields": "resolved (values hidden)",
            }
        case ApicastOptions():
            return {
                "Namespace": options.namespace,
                "Image tag": options.image_tag,
                "Management API": options.management_api,
                "OpenSSL verify": options.openssl_verify,
                "Response codes": options.response_codes,
                "Replicas": f"staging={options.staging_replicas}, production={options.production_replicas}",
                "Staging resources": describe_resources(options.staging_resource_requirements),
                "Production resources": describe_resources(options.production_resource_requirements),
            }
        case AmpImagesOptions():
            return {
                "APIcast": options.apicast_image,
                "Zync": options.zync_image,
                "Zync database": options.zync_database_postgresql_image,
            }
    raise TypeError(f"Unsupported options type: {type(options).__name__}")


def resolve_options(apimanager: APIManager, component: Component, namespace: str, *, select_context: bool) -> Any:
    """Resolve the options of one subsystem.

    Only zync needs the cluster, for its secret.

    Raises:
        OptionsError: If resolution fails.

    """
    match component:
        case Component.ZYNC:
            cluster = Cluster(select_context=select_context)
            return ZyncOptionsProvider(apimanager, namespace, cluster.secret_source(namespace)).get_zync_options()
        case Component.APICAST:
            return ApicastOptionsProvider(apimanager, namespace).get_apicast_options()
        case Component.IMAGES:
            return AmpImagesOptionsProvider(apimanager).get_amp_images_options()
    raise ValueError(f"Unsupported component: {component}")


@click.group(help="Resolve APIManager subsystem options and generate alerting rules", invoke_without_command=True)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.pass_context
def cli(ctx: click.Context, version: bool, debug: bool) -> None:
    """Process global options and build the rule factory registry.

    Args:
        ctx: Click context. A registry passed in as ctx.obj is kept.
        version: Print version and exit.
        debug: Enable debug output.

    """
    if not debug:
        ic.disable()
    else:
        ic.enable()

    if version:
        click.echo(__version__)
        ctx.exit()

    if ctx.obj is None:
        ctx.obj = build_rule_factory_registry()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(help="Resolve the options of one subsystem")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--component",
    "-c",
    type=click.Choice([component.value for component in Component]),
    default=Component.ZYNC.value,
    show_default=True,
    help="subsystem to resolve",
)
@click.option("--namespace", "-n", required=False, help="target namespace, defaults to the APIManager namespace")
@click.option("--select", required=False, is_flag=True, default=False, help="prompt for context select")
def resolve(file: str, component: str, namespace: str | None, select: bool) -> None:
    """Resolve and summarize the options of one subsystem.

    Args:
        file: Path to the APIManager YAML file.
        component: Subsystem to resolve.
        namespace: Target namespace override.
        select: Prompt for Kubernetes context selection.

    """
    try:
        apimanager = load_apimanager(file)
    except OptionsError as e:
        raise click.ClickException(str(e)) from None

    namespace = namespace or apimanager.namespace
    if not namespace:
        raise click.UsageError("No namespace given and the APIManager has none")

    try:
        options = resolve_options(apimanager, Component(component), namespace, select_context=select)
    except ClusterConnectionError as e:
        console.error(f"Cluster connection failed: {e}")
        sys.exit(1)
    except OptionsError as e:
        console.error(f"{type(e).__name__}: {e}")
        sys.exit(1)

    ic(options)
    console.success(f"Resolved {console.highlight(component)} options")
    console.summary_panel(f"{component} options", options_summary(options))


@cli.command(name="prometheusrules", help="Print the PrometheusRule of a subsystem")
@click.argument("rule_type", required=False)
@click.option("--namespace", "-n", default=NAMESPACE_PLACEHOLDER, show_default=True, help="namespace of the rules")
@click.option("--list", "list_types", required=False, is_flag=True, help="list available rule types")
@click.pass_obj
def prometheus_rules(registry: RuleFactoryRegistry, rule_type: str | None, namespace: str, list_types: bool) -> None:
    """Print a PrometheusRule manifest as YAML.

    Args:
        registry: The rule factory registry.
        rule_type: Type of the factory to run.
        namespace: Namespace substituted into the rules.
        list_types: List registered types and exit.

    """
    if list_types:
        for factory_type in registry.types():
            click.echo(factory_type)
        return

    if rule_type is None:
        raise click.UsageError("Missing argument 'RULE_TYPE'. Use --list to see the available types.")

    try:
        factory = registry.get(rule_type)
    except KeyError as e:
        raise click.BadParameter(e.args[0], param_hint="RULE_TYPE") from None

    bundle = factory.prometheus_rule().with_namespace(namespace)
    ic(bundle.name, len(bundle.rules))
    click.echo(yaml.safe_dump(bundle.to_manifest(), sort_keys=False), nl=False)


if __name__ == "__main__":
    cli()

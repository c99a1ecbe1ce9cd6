"""Kubernetes cluster access.

This module provides the Cluster class for selecting a kubeconfig
context and handing out secret sources bound to that cluster.
"""

import click
import questionary
from icecream import ic
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from apimanager_options import console
from apimanager_options.exceptions import ClusterConnectionError
from apimanager_options.secrets.source import KubernetesSecretSource

PROMPT_STYLE = questionary.Style(
    [
        ("qmark", "fg:#af87ff bold"),
        ("question", "bold"),
        ("answer", "fg:#ff87d7 bold"),
        ("pointer", "fg:#ff87d7 bold"),
        ("highlighted", "fg:#1c1c1c bg:#ff87d7 bold"),
    ]
)


class Cluster:
    """Manages the connection to a Kubernetes cluster.

    Attributes:
        context: The active Kubernetes context name.
        api: CoreV1Api client shared by the secret sources.

    """

    def __init__(self, *, select_context: bool) -> None:
        """Initialize Cluster with context selection.

        Args:
            select_context: If True, prompt user to select a context.
                           If False, use the current context.
                           Must be passed as a keyword argument.

        Raises:
            ClusterConnectionError: If the kubeconfig cannot be loaded.

        """
        self.context: str = self._set_context(select_context=select_context)
        try:
            config.load_kube_config(context=self.context)
        except ConfigException as e:
            raise ClusterConnectionError(f"Failed to load context '{self.context}': {e}") from e
        self.api: client.CoreV1Api = client.CoreV1Api()

    @staticmethod
    def _set_context(*, select_context: bool) -> str:
        """Set the Kubernetes context to use.

        Args:
            select_context: If True, prompt user to select a context.
                           Must be passed as a keyword argument.

        Returns:
            The selected or current context name.

        Raises:
            ClusterConnectionError: If kubeconfig is invalid or missing.
            click.Abort: If user cancels context selection.

        """
        try:
            contexts, current_context = config.list_kube_config_contexts()
        except ConfigException as e:
            raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e
        if select_context:
            context: str | None = questionary.select(
                "Select context to work with",
                choices=[context["name"] for context in contexts],
                style=PROMPT_STYLE,
            ).ask()
            if context is None:
                console.warning("Context selection cancelled.")
                raise click.Abort()
        else:
            context = str(current_context["name"])
        console.action(f"Working with {console.highlight(context)} cluster")
        ic(context)
        return context

    def secret_source(self, namespace: str) -> KubernetesSecretSource:
        return KubernetesSecretSource(namespace, api=self.api)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Cluster(context={self.context!r})"

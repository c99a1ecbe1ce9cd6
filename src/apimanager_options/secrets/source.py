"""Secret stores consulted during options resolution.

This module provides the SecretSource interface and its Kubernetes
implementation backed by namespaced Secret objects.
"""

import base64
import binascii
from abc import ABC, abstractmethod

from icecream import ic
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from apimanager_options import console
from apimanager_options.exceptions import ClusterConnectionError, SecretParseError, SecretSourceError
from apimanager_options.secrets.policy import decide_field_value


class SecretSource(ABC):
    """A namespaced key/value store for credential values.

    Implementations must return a persisted value from the next lookup of
    the same field.
    """

    namespace: str

    @abstractmethod
    def lookup(self, secret_name: str, field_name: str) -> str | None:
        """Return the stored value, or None if the secret or field is absent."""

    @abstractmethod
    def persist(self, secret_name: str, field_name: str, value: str) -> None:
        """Store a value, creating the secret if needed."""

    def required_field_value(self, secret_name: str, field_name: str) -> str:
        """Get a field that must already exist.

        Raises:
            SecretNotFoundError: If the secret or field is absent.

        """
        return decide_field_value(
            self.lookup(secret_name, field_name),
            secret_name=secret_name,
            field_name=field_name,
            required=True,
            default=str,
        ).value

    def field_value(self, secret_name: str, field_name: str, default: str) -> str:
        """Get a field, storing and returning default if it is absent."""
        decision = decide_field_value(
            self.lookup(secret_name, field_name),
            secret_name=secret_name,
            field_name=field_name,
            required=False,
            default=lambda: default,
        )
        if decision.persist:
            self.persist(secret_name, field_name, decision.value)
        return decision.value


class KubernetesSecretSource(SecretSource):
    """Secret source backed by Kubernetes Secret objects.

    Attributes:
        namespace: Namespace holding the secrets.
        api: CoreV1Api client used for all calls.

    """

    def __init__(self, namespace: str, api: client.CoreV1Api | None = None) -> None:
        self.namespace: str = namespace
        self.api: client.CoreV1Api = api if api is not None else client.CoreV1Api()

    def _read_secret(self, secret_name: str) -> client.V1Secret | None:
        try:
            with console.spinner(f"Reading secret {self.namespace}/{secret_name}..."):
                return self.api.read_namespaced_secret(secret_name, self.namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise SecretSourceError(f"Failed to read secret '{self.namespace}/{secret_name}': {e.reason}") from e
        except MaxRetryError as e:
            raise ClusterConnectionError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e

    def lookup(self, secret_name: str, field_name: str) -> str | None:
        secret = self._read_secret(secret_name)
        if secret is None or not secret.data or field_name not in secret.data:
            return None
        try:
            return base64.b64decode(secret.data[field_name], validate=True).decode()
        except (binascii.Error, UnicodeDecodeError) as e:
            raise SecretParseError(
                f"Field '{field_name}' in secret '{self.namespace}/{secret_name}' is not valid base64 encoded UTF-8: {e}"
            ) from e

    def persist(self, secret_name: str, field_name: str, value: str) -> None:
        existing = self._read_secret(secret_name)
        try:
            if existing is None:
                body = client.V1Secret(
                    metadata=client.V1ObjectMeta(name=secret_name, namespace=self.namespace),
                    string_data={field_name: value},
                    type="Opaque",
                )
                self.api.create_namespaced_secret(self.namespace, body)
            else:
                self.api.patch_namespaced_secret(secret_name, self.namespace, {"stringData": {field_name: value}})
        except ApiException as e:
            raise SecretSourceError(f"Failed to write secret '{self.namespace}/{secret_name}': {e.reason}") from e
        except MaxRetryError as e:
            raise ClusterConnectionError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e

        ic(secret_name, field_name)
        console.step(f"Stored generated default for {console.highlight(f'{secret_name}/{field_name}')}")

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"KubernetesSecretSource(namespace={self.namespace!r})"

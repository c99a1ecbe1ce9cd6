"""Shared test fixtures for apimanager-options tests."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

from apimanager_options.models import APIManager
from apimanager_options.secrets.source import KubernetesSecretSource

TEST_NAMESPACE = "operator-test"


class FakeSecretsApi:
    """In-memory stand-in for the Secret calls of CoreV1Api."""

    def __init__(self) -> None:
        self.secrets: dict[tuple[str, str], dict[str, str]] = {}

    def add(self, namespace: str, name: str, data: dict[str, str]) -> None:
        self.secrets[(namespace, name)] = dict(data)

    def read_namespaced_secret(self, name, namespace):
        if (namespace, name) not in self.secrets:
            raise ApiException(status=404, reason="Not Found")
        data = {key: base64.b64encode(value.encode()).decode() for key, value in self.secrets[(namespace, name)].items()}
        return client.V1Secret(metadata=client.V1ObjectMeta(name=name, namespace=namespace), data=data)

    def create_namespaced_secret(self, namespace, body):
        self.secrets[(namespace, body.metadata.name)] = dict(body.string_data)
        return body

    def patch_namespaced_secret(self, name, namespace, body):
        self.secrets[(namespace, name)].update(body["stringData"])

    def read_namespace(self, name):
        # Namespaced RBAC only
        raise ApiException(status=403, reason="Forbidden")


@pytest.fixture
def secrets_api():
    """CoreV1Api mock backed by an in-memory secret store.

    Calls are recorded, so tests can assert on create/patch usage.
    """
    fake = FakeSecretsApi()
    api = MagicMock(wraps=fake)
    api.store = fake
    return api


@pytest.fixture
def secret_source(secrets_api):
    """KubernetesSecretSource bound to the test namespace."""
    return KubernetesSecretSource(TEST_NAMESPACE, api=secrets_api)


@pytest.fixture
def apimanager():
    """APIManager with every default applied."""
    return APIManager(name="example-apimanager", namespace=TEST_NAMESPACE)


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}], {"name": "test-context"})
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def sample_apimanager_yaml():
    """Sample APIManager YAML content."""
    return """apiVersion: apps.3scale.net/v1alpha1
kind: APIManager
metadata:
  name: example-apimanager
  namespace: operator-test
spec:
  resourceRequirementsEnabled: false
  imagePullSecrets:
  - name: my-registry
  externalComponents:
    zync:
      database: true
  zync:
    image: quay.io/3scale/zync:2.11.0
    appSpec:
      replicas: 3
      resources:
        limits:
          cpu: "2"
          memory: 1Gi
      tolerations:
      - key: dedicated
        operator: Equal
        value: zync
        effect: NoSchedule
  apicast:
    openSSLVerify: true
    stagingSpec:
      replicas: 0
"""

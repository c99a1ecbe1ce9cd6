"""Tests for cluster.py module."""

from unittest.mock import MagicMock, patch

import click
import pytest
from kubernetes.config.config_exception import ConfigException

from apimanager_options.cluster import Cluster
from apimanager_options.exceptions import ClusterConnectionError
from apimanager_options.secrets.source import KubernetesSecretSource


class TestClusterContextSelection:
    """Tests for context selection functionality."""

    def test_set_context_without_selection(self, mock_kube_contexts, mock_kube_config):
        """Test using current context without selection."""
        with patch("kubernetes.client.CoreV1Api"):
            cluster = Cluster(select_context=False)

        assert cluster.context == "test-context"
        mock_kube_config.assert_called_once_with(context="test-context")

    def test_set_context_with_selection(self, mock_kube_config):
        """Test prompting user for context selection."""
        with (
            patch("kubernetes.config.list_kube_config_contexts") as mock_contexts,
            patch("questionary.select") as mock_select,
            patch("kubernetes.client.CoreV1Api"),
        ):
            mock_contexts.return_value = (
                [{"name": "context1"}, {"name": "context2"}, {"name": "context3"}],
                {"name": "context1"},
            )
            mock_select.return_value.ask.return_value = "context2"

            cluster = Cluster(select_context=True)

        assert cluster.context == "context2"
        mock_select.assert_called_once()

    def test_set_context_cancelled(self, mock_kube_contexts, mock_kube_config):
        """Test cancelling the context prompt aborts."""
        with patch("questionary.select") as mock_select:
            mock_select.return_value.ask.return_value = None

            with pytest.raises(click.Abort):
                Cluster(select_context=True)

        mock_kube_config.assert_not_called()

    def test_set_context_invalid_kubeconfig(self):
        """Test error when kubeconfig is invalid or missing."""
        with patch("kubernetes.config.list_kube_config_contexts") as mock_contexts:
            mock_contexts.side_effect = ConfigException("Invalid kube-config file. No configuration found.")

            with pytest.raises(ClusterConnectionError) as exc_info:
                Cluster(select_context=False)

        assert "Invalid or missing kubeconfig" in str(exc_info.value)

    def test_load_context_failure(self, mock_kube_contexts, mock_kube_config):
        """Test error when the selected context cannot be loaded."""
        mock_kube_config.side_effect = ConfigException("Invalid context")

        with pytest.raises(ClusterConnectionError) as exc_info:
            Cluster(select_context=False)

        assert "test-context" in str(exc_info.value)


class TestClusterSecretSource:
    """Tests for secret sources handed out by the cluster."""

    @pytest.fixture
    def cluster(self, mock_kube_contexts, mock_kube_config):
        with patch("kubernetes.client.CoreV1Api") as mock_api:
            mock_api.return_value = MagicMock()
            yield Cluster(select_context=False)

    def test_secret_source_shares_api(self, cluster):
        """Test secret sources reuse the cluster client."""
        source = cluster.secret_source("3scale")

        assert isinstance(source, KubernetesSecretSource)
        assert source.namespace == "3scale"
        assert source.api is cluster.api

    def test_repr(self, cluster):
        """Test the debug representation."""
        assert repr(cluster) == "Cluster(context='test-context')"

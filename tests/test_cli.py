"""Tests for cli.py module."""

from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner
from kubernetes import client

from apimanager_options import __version__
from apimanager_options.cli import cli, describe_resources, options_summary
from apimanager_options.component.images import AmpImagesOptions
from apimanager_options.exceptions import ClusterConnectionError
from apimanager_options.prometheusrules.factories import ZyncPrometheusRuleFactory
from apimanager_options.prometheusrules.registry import RuleFactoryRegistry


@pytest.fixture
def apimanager_file(tmp_path, sample_apimanager_yaml):
    """APIManager file written to a temporary directory."""
    path = tmp_path / "apimanager.yaml"
    path.write_text(sample_apimanager_yaml)
    return str(path)


class TestCliVersion:
    """Tests for version command."""

    def test_version_flag(self):
        """Test --version flag prints version."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_short_flag(self):
        """Test -v flag prints version."""
        runner = CliRunner()
        result = runner.invoke(cli, ["-v"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestCliHelp:
    """Tests for help output."""

    def test_help_flag(self):
        """Test --help flag shows help text."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Resolve APIManager subsystem options" in result.output
        assert "--debug" in result.output
        assert "resolve" in result.output
        assert "prometheusrules" in result.output

    def test_no_command_prints_help(self):
        """Test running without a command shows help."""
        runner = CliRunner()
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "prometheusrules" in result.output


class TestPrometheusRulesCommand:
    """Tests for the prometheusrules command."""

    def test_list(self):
        """Test listing the registered rule types."""
        runner = CliRunner()
        result = runner.invoke(cli, ["prometheusrules", "--list"])

        assert result.exit_code == 0
        assert result.output.split() == ["zync", "zync-que", "apicast", "threescale-kube-state-metrics"]

    def test_manifest_with_namespace(self):
        """Test the printed manifest targets the given namespace."""
        runner = CliRunner()
        result = runner.invoke(cli, ["prometheusrules", "zync", "--namespace", "3scale"])

        assert result.exit_code == 0
        manifest = yaml.safe_load(result.output)
        assert manifest["kind"] == "PrometheusRule"
        assert manifest["metadata"]["name"] == "zync"
        assert manifest["spec"]["groups"][0]["name"] == "3scale/zync.rules"
        assert "__NAMESPACE__" not in result.output

    def test_manifest_default_keeps_placeholder(self):
        """Test the placeholder is kept when no namespace is given."""
        runner = CliRunner()
        result = runner.invoke(cli, ["prometheusrules", "apicast"])

        assert result.exit_code == 0
        assert "__NAMESPACE__/apicast.rules" in result.output

    def test_unknown_type(self):
        """Test an unknown rule type is rejected."""
        runner = CliRunner()
        result = runner.invoke(cli, ["prometheusrules", "backend-worker"])

        assert result.exit_code == 2
        assert "backend-worker" in result.output

    def test_missing_type(self):
        """Test a rule type or --list is required."""
        runner = CliRunner()
        result = runner.invoke(cli, ["prometheusrules"])

        assert result.exit_code == 2
        assert "--list" in result.output

    def test_injected_registry(self):
        """Test a registry passed in by the caller is used."""
        registry = RuleFactoryRegistry()
        registry.register(ZyncPrometheusRuleFactory)

        runner = CliRunner()
        result = runner.invoke(cli, ["prometheusrules", "--list"], obj=registry.freeze())

        assert result.exit_code == 0
        assert result.output.split() == ["zync"]


class TestResolveCommand:
    """Tests for the resolve command."""

    def test_images(self, apimanager_file):
        """Test resolving image options without a cluster."""
        with (
            patch("apimanager_options.cli.console") as mock_console,
            patch("apimanager_options.cli.Cluster") as mock_cluster,
        ):
            runner = CliRunner()
            result = runner.invoke(cli, ["resolve", apimanager_file, "--component", "images"])

        assert result.exit_code == 0
        mock_cluster.assert_not_called()
        title, summary = mock_console.summary_panel.call_args.args
        assert title == "images options"
        assert summary["Zync"] == "quay.io/3scale/zync:2.11.0"

    def test_apicast(self, apimanager_file):
        """Test resolving APIcast options from the file."""
        with patch("apimanager_options.cli.console") as mock_console:
            runner = CliRunner()
            result = runner.invoke(cli, ["resolve", apimanager_file, "-c", "apicast", "-n", "other"])

        assert result.exit_code == 0
        summary = mock_console.summary_panel.call_args.args[1]
        assert summary["Namespace"] == "other"
        assert summary["OpenSSL verify"] == "true"
        assert summary["Replicas"] == "staging=0, production=1"
        assert summary["Staging resources"] == "unconstrained"

    def test_zync(self, apimanager_file, secret_source, secrets_api):
        """Test resolving zync options against the cluster secret."""
        secrets_api.store.add(
            "operator-test",
            "zync",
            {"ZYNC_DATABASE_PASSWORD": "pw", "DATABASE_URL": "postgresql://zync:pw@db.example.com:5432/zync"},
        )
        with (
            patch("apimanager_options.cli.console") as mock_console,
            patch("apimanager_options.cli.Cluster") as mock_cluster,
        ):
            mock_cluster.return_value.secret_source.return_value = secret_source
            runner = CliRunner()
            result = runner.invoke(cli, ["resolve", apimanager_file])

        assert result.exit_code == 0
        mock_cluster.assert_called_once_with(select_context=False)
        summary = mock_console.summary_panel.call_args.args[1]
        assert summary["Replicas"] == "zync=3, zync-que=1"
        assert summary["Zync resources"] == "limits cpu=2, memory=1Gi"
        assert summary["Pull secrets"] == "my-registry"
        assert "pw" not in summary.values()

    def test_zync_with_namespaced_access_only(self, apimanager_file, secrets_api, mock_kube_contexts, mock_kube_config):
        """Test resolution only needs access to secrets in the target namespace."""
        secrets_api.store.add(
            "operator-test",
            "zync",
            {"ZYNC_DATABASE_PASSWORD": "pw", "DATABASE_URL": "postgresql://zync:pw@db.example.com:5432/zync"},
        )
        with (
            patch("apimanager_options.cli.console") as mock_console,
            patch("kubernetes.client.CoreV1Api", return_value=secrets_api),
        ):
            runner = CliRunner()
            result = runner.invoke(cli, ["resolve", apimanager_file])

        assert result.exit_code == 0
        secrets_api.read_namespace.assert_not_called()
        secrets_api.read_namespaced_secret.assert_called_with("zync", "operator-test")
        mock_console.summary_panel.assert_called_once()

    def test_zync_missing_external_secret(self, apimanager_file, secret_source):
        """Test a missing external database secret fails the command."""
        with (
            patch("apimanager_options.cli.console") as mock_console,
            patch("apimanager_options.cli.Cluster") as mock_cluster,
        ):
            mock_cluster.return_value.secret_source.return_value = secret_source
            runner = CliRunner()
            result = runner.invoke(cli, ["resolve", apimanager_file])

        assert result.exit_code == 1
        message = mock_console.error.call_args.args[0]
        assert message.startswith("SecretNotFoundError")
        assert "ZYNC_DATABASE_PASSWORD" in message

    def test_zync_cluster_unreachable(self, apimanager_file):
        """Test a cluster connection error fails the command."""
        with (
            patch("apimanager_options.cli.console") as mock_console,
            patch("apimanager_options.cli.Cluster") as mock_cluster,
        ):
            mock_cluster.side_effect = ClusterConnectionError("Invalid or missing kubeconfig")
            runner = CliRunner()
            result = runner.invoke(cli, ["resolve", apimanager_file])

        assert result.exit_code == 1
        assert "Cluster connection failed" in mock_console.error.call_args.args[0]

    def test_invalid_file(self, tmp_path):
        """Test a file that is not an APIManager is rejected."""
        path = tmp_path / "secret.yaml"
        path.write_text("apiVersion: v1\nkind: Secret\nmetadata:\n  name: zync\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["resolve", str(path), "-c", "images"])

        assert result.exit_code == 1
        assert "APIManager" in result.output

    def test_missing_namespace(self, tmp_path):
        """Test a namespace is required from the file or the command line."""
        path = tmp_path / "apimanager.yaml"
        path.write_text("apiVersion: apps.3scale.net/v1alpha1\nkind: APIManager\nmetadata:\n  name: example\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["resolve", str(path), "-c", "apicast"])

        assert result.exit_code == 2
        assert "namespace" in result.output


class TestSummaries:
    """Tests for summary helpers."""

    def test_describe_resources(self):
        """Test resource descriptions."""
        requirements = client.V1ResourceRequirements(
            limits={"memory": "1Gi", "cpu": "1"}, requests={"cpu": "100m"}
        )

        assert describe_resources(client.V1ResourceRequirements()) == "unconstrained"
        assert describe_resources(None) == "unconstrained"
        assert describe_resources(requirements) == "limits cpu=1, memory=1Gi; requests cpu=100m"

    def test_images_summary(self):
        """Test the image options summary."""
        summary = options_summary(AmpImagesOptions(apicast_image="a", zync_image="z", zync_database_postgresql_image="p"))

        assert summary == {"APIcast": "a", "Zync": "z", "Zync database": "p"}

    def test_unsupported_options(self):
        """Test unknown option types are rejected."""
        with pytest.raises(TypeError):
            options_summary(object())

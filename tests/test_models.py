"""Tests for models.py and parsing.py modules."""

import pytest
from kubernetes import client

from apimanager_options.exceptions import SpecParsingError
from apimanager_options.models import DEFAULT_APP_LABEL, APIManager
from apimanager_options.parsing import load_apimanager, parse_resource_file


class TestAPIManagerDefaults:
    """Tests for defaults applied on construction."""

    def test_defaults(self, apimanager):
        """Test every defaulted field is populated."""
        spec = apimanager.spec
        assert spec.app_label == DEFAULT_APP_LABEL
        assert spec.resource_requirements_enabled is True
        assert spec.image_pull_secrets is None
        assert spec.zync.app_spec.replicas == 1
        assert spec.zync.que_spec.replicas == 1
        assert spec.apicast.management_api == "status"
        assert spec.apicast.openssl_verify is False
        assert spec.apicast.response_codes is True
        assert spec.apicast.staging_spec.replicas == 1
        assert spec.apicast.production_spec.replicas == 1

    def test_external_database_disabled_by_default(self, apimanager):
        """Test zync uses the internal database unless told otherwise."""
        assert apimanager.is_zync_external_database_enabled() is False

    def test_explicit_zero_replicas_kept(self):
        """Test that zero replicas is not replaced by the default."""
        apimanager = APIManager.from_dict(
            {"metadata": {"name": "x"}, "spec": {"zync": {"queSpec": {"replicas": 0}}}}
        )
        assert apimanager.spec.zync.que_spec.replicas == 0


class TestAPIManagerFromDict:
    """Tests for building an APIManager from a document."""

    def test_missing_name(self):
        """Test error when metadata.name is absent."""
        with pytest.raises(SpecParsingError) as exc_info:
            APIManager.from_dict({"metadata": {}, "spec": {}})

        assert "metadata.name" in str(exc_info.value)

    def test_section_not_a_mapping(self):
        """Test error when a spec section has the wrong shape."""
        with pytest.raises(SpecParsingError) as exc_info:
            APIManager.from_dict({"metadata": {"name": "x"}, "spec": {"zync": ["not", "a", "mapping"]}})

        assert "spec.zync" in str(exc_info.value)

    def test_invalid_replicas(self):
        """Test error when replicas is not an integer."""
        with pytest.raises(SpecParsingError) as exc_info:
            APIManager.from_dict({"metadata": {"name": "x"}, "spec": {"zync": {"appSpec": {"replicas": "three"}}}})

        assert "spec.zync.appSpec.replicas" in str(exc_info.value)

    @pytest.mark.parametrize(
        ("spec", "path"),
        [
            ({"resourceRequirementsEnabled": "false"}, "spec.resourceRequirementsEnabled"),
            ({"externalComponents": {"zync": {"database": "false"}}}, "spec.externalComponents.zync.database"),
            ({"apicast": {"openSSLVerify": "true"}}, "spec.apicast.openSSLVerify"),
            ({"apicast": {"responseCodes": 0}}, "spec.apicast.responseCodes"),
        ],
    )
    def test_invalid_toggle(self, spec, path):
        """Test error when a toggle is not a YAML boolean."""
        with pytest.raises(SpecParsingError) as exc_info:
            APIManager.from_dict({"metadata": {"name": "x"}, "spec": spec})

        assert path in str(exc_info.value)

    def test_boolean_toggles(self):
        """Test explicit boolean toggles are kept."""
        apimanager = APIManager.from_dict(
            {
                "metadata": {"name": "x"},
                "spec": {
                    "resourceRequirementsEnabled": False,
                    "externalComponents": {"zync": {"database": False}},
                    "apicast": {"openSSLVerify": True, "responseCodes": False},
                },
            }
        )

        assert apimanager.spec.resource_requirements_enabled is False
        assert apimanager.is_zync_external_database_enabled() is False
        assert apimanager.spec.apicast.openssl_verify is True
        assert apimanager.spec.apicast.response_codes is False


class TestLoadAPIManager:
    """Tests for loading APIManager files."""

    def test_load(self, tmp_path, sample_apimanager_yaml):
        """Test loading a full document."""
        path = tmp_path / "apimanager.yaml"
        path.write_text(sample_apimanager_yaml)

        apimanager = load_apimanager(str(path))

        assert apimanager.name == "example-apimanager"
        assert apimanager.namespace == "operator-test"
        assert apimanager.spec.resource_requirements_enabled is False
        assert apimanager.spec.image_pull_secrets == [client.V1LocalObjectReference(name="my-registry")]
        assert apimanager.is_zync_external_database_enabled() is True
        assert apimanager.spec.zync.image == "quay.io/3scale/zync:2.11.0"
        assert apimanager.spec.zync.app_spec.replicas == 3
        assert apimanager.spec.zync.app_spec.resources == client.V1ResourceRequirements(
            limits={"cpu": "2", "memory": "1Gi"}
        )
        assert apimanager.spec.zync.app_spec.tolerations[0]["key"] == "dedicated"
        assert apimanager.spec.zync.que_spec.replicas == 1
        assert apimanager.spec.apicast.openssl_verify is True
        assert apimanager.spec.apicast.staging_spec.replicas == 0

    def test_missing_file(self, tmp_path):
        """Test error when the file does not exist."""
        with pytest.raises(SpecParsingError) as exc_info:
            load_apimanager(str(tmp_path / "missing.yaml"))

        assert "does not exist" in str(exc_info.value)

    def test_malformed_yaml(self, tmp_path):
        """Test error when the file is not valid YAML."""
        path = tmp_path / "broken.yaml"
        path.write_text("kind: APIManager\nmetadata: [unclosed\n")

        with pytest.raises(SpecParsingError) as exc_info:
            load_apimanager(str(path))

        assert "malformed YAML" in str(exc_info.value)

    def test_multiple_documents(self, tmp_path):
        """Test error when the file holds more than one document."""
        path = tmp_path / "multi.yaml"
        path.write_text("kind: APIManager\n---\nkind: APIManager\n")

        with pytest.raises(SpecParsingError) as exc_info:
            parse_resource_file(str(path))

        assert "multiple YAML documents" in str(exc_info.value)

    def test_empty_file(self, tmp_path):
        """Test error when the file is empty."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        with pytest.raises(SpecParsingError) as exc_info:
            parse_resource_file(str(path))

        assert "empty" in str(exc_info.value)

    def test_wrong_kind(self, tmp_path):
        """Test error when the document is another resource kind."""
        path = tmp_path / "secret.yaml"
        path.write_text("kind: Secret\nmetadata:\n  name: x\n")

        with pytest.raises(SpecParsingError) as exc_info:
            load_apimanager(str(path))

        assert "'Secret'" in str(exc_info.value)

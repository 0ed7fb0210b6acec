"""Tests for deployment models."""

import pytest
from pydantic import ValidationError

from uds.models.deployment import (
    DeploymentSpec,
    HealthCheckSpec,
    ServiceDescriptor,
    image_reference,
)


class TestDeploymentSpec:
    """Test DeploymentSpec model."""
    
    def test_minimal_spec(self):
        """Test creating a spec with only required fields."""
        spec = DeploymentSpec(app_name="myapp", images=["nginx"])
        
        assert spec.tag == "latest"
        assert spec.ports == []
        assert spec.env_vars == {}
        assert spec.volumes == []
        assert spec.extra_hosts == []
        assert spec.use_profiles is True
        assert spec.compose_schema_version == "3.8"
        assert spec.network_name == "myapp-network"
        assert spec.is_multi_service is False
        
    def test_comma_separated_inputs(self):
        """Test that comma lists are parsed into typed lists."""
        spec = DeploymentSpec(
            app_name="myapp",
            images="registry.io/org/api, registry.io/org/db",
            ports="8080,5432",
            volumes="data:/var/lib/data, ./conf:/etc/conf",
            extra_hosts="db.local:10.0.0.5",
        )
        
        assert spec.images == ["registry.io/org/api", "registry.io/org/db"]
        assert spec.ports == ["8080", "5432"]
        assert spec.volumes == ["data:/var/lib/data", "./conf:/etc/conf"]
        assert spec.extra_hosts == ["db.local:10.0.0.5"]
        assert spec.is_multi_service is True
        
    def test_json_array_inputs(self):
        """Test that JSON array strings are parsed into typed lists."""
        spec = DeploymentSpec(
            app_name="myapp",
            images='["api", "worker"]',
            volumes='["data:/data"]',
        )
        
        assert spec.images == ["api", "worker"]
        assert spec.volumes == ["data:/data"]
        
    def test_integer_ports(self):
        """Test that numeric ports become mapping strings."""
        spec = DeploymentSpec(app_name="myapp", images=["a", "b"], ports=[8080, "9000:80"])
        
        assert spec.ports == ["8080", "9000:80"]
        
    def test_structured_volumes(self):
        """Test that structured mounts are normalized to mount strings."""
        spec = DeploymentSpec(
            app_name="myapp",
            images=["nginx"],
            volumes=[
                {"source": "data", "target": "/data"},
                {"source": "./conf", "target": "/etc/conf", "mode": "ro"},
                ["logs", "/var/log"],
                {"target": "/missing-source"},
            ],
        )
        
        assert spec.volumes == ["data:/data", "./conf:/etc/conf:ro", "logs:/var/log"]
        
    def test_env_vars_json_string(self):
        """Test that a JSON object string is accepted for env vars."""
        spec = DeploymentSpec(app_name="myapp", images=["nginx"], env_vars='{"LOG": "info"}')
        
        assert spec.env_vars == {"LOG": "info"}
        
    def test_malformed_env_vars_degrade_to_empty(self, caplog):
        """Test that malformed env vars are logged and treated as empty."""
        spec = DeploymentSpec(app_name="myapp", images=["nginx"], env_vars="not json")
        
        assert spec.env_vars == {}
        assert "not a valid JSON object" in caplog.text
        
        spec = DeploymentSpec(app_name="myapp", images=["nginx"], env_vars=["A=1"])
        assert spec.env_vars == {}
        
    def test_schema_version_from_float(self):
        """Test that a YAML float schema version stays textual."""
        spec = DeploymentSpec(app_name="myapp", images=["nginx"], compose_schema_version=3.8)
        
        assert spec.compose_schema_version == "3.8"
        
    def test_schema_version_can_be_omitted(self):
        """Test that an empty schema version disables the field."""
        spec = DeploymentSpec(app_name="myapp", images=["nginx"], compose_schema_version="")
        
        assert spec.compose_schema_version is None
        
    def test_invalid_app_name(self):
        """Test validation of app_name."""
        with pytest.raises(ValidationError) as exc_info:
            DeploymentSpec(app_name="my app!", images=["nginx"])
            
        assert "app_name" in str(exc_info.value)
        
    def test_missing_app_name(self):
        """Test that app_name is required."""
        with pytest.raises(ValidationError) as exc_info:
            DeploymentSpec(images=["nginx"])
            
        assert "app_name" in str(exc_info.value)
        
    def test_empty_images(self):
        """Test that at least one image is required."""
        with pytest.raises(ValidationError) as exc_info:
            DeploymentSpec(app_name="myapp", images="")
            
        assert "images" in str(exc_info.value)
        
    def test_invalid_port(self):
        """Test validation of port mappings."""
        for bad in ["http", "70000", "80:90:100", "0"]:
            with pytest.raises(ValidationError) as exc_info:
                DeploymentSpec(app_name="myapp", images=["nginx"], ports=[bad])
            assert "ports" in str(exc_info.value)
            
    def test_spec_is_immutable(self):
        """Test that a spec cannot be changed after construction."""
        spec = DeploymentSpec(app_name="myapp", images=["nginx"])
        
        with pytest.raises(ValidationError):
            spec.app_name = "other"
            
    def test_port_for_multi_service_default(self):
        """Test that missing ports default to 3000 for multi-service stacks."""
        spec = DeploymentSpec(app_name="myapp", images=["a", "b", "c"], ports=["8080"])
        
        assert spec.port_for(0) == "8080"
        assert spec.port_for(1) == "3000"
        assert spec.port_for(2) == "3000"
        
    def test_port_for_single_service_without_port(self):
        """Test that a single service without ports publishes nothing."""
        spec = DeploymentSpec(app_name="myapp", images=["nginx"])
        
        assert spec.port_for(0) is None


class TestHealthCheckSpec:
    """Test HealthCheckSpec model."""
    
    def test_defaults(self):
        """Test that health checks are off by default."""
        spec = HealthCheckSpec()
        
        assert spec.mode == "none"
        assert spec.enabled is False
        assert spec.materialized is False
        assert spec.timeout_seconds == 60
        
    def test_auto_path(self):
        """Test that 'auto' resolves to /health."""
        assert HealthCheckSpec(mode="http").resolved_path == "/health"
        assert HealthCheckSpec(mode="http", path=None).resolved_path == "/health"
        assert HealthCheckSpec(mode="http", path="/ready").resolved_path == "/ready"
        assert HealthCheckSpec(mode="http", path="status").resolved_path == "/status"
        
    def test_mode_spellings(self):
        """Test mode normalization."""
        assert HealthCheckSpec(mode="HTTP").mode == "http"
        assert HealthCheckSpec(mode="auto").mode == "http"
        assert HealthCheckSpec(mode="command").mode == "external"
        assert HealthCheckSpec(mode="container").mode == "external"
        assert HealthCheckSpec(mode=None).mode == "none"
        
    def test_materialized_modes(self):
        """Test that only http and tcp are written into compose files."""
        assert HealthCheckSpec(mode="http").materialized is True
        assert HealthCheckSpec(mode="tcp").materialized is True
        assert HealthCheckSpec(mode="external").materialized is False
        assert HealthCheckSpec(mode="external").enabled is True
        assert HealthCheckSpec(mode="disabled").materialized is False
        assert HealthCheckSpec(mode="none").materialized is False
        
    def test_disabled_path(self):
        """Test that a 'none' path disables the check."""
        spec = HealthCheckSpec(mode="http", path="none")
        
        assert spec.enabled is False
        assert spec.materialized is False
        
    def test_invalid_mode(self):
        """Test validation of mode."""
        with pytest.raises(ValidationError) as exc_info:
            HealthCheckSpec(mode="grpc")
            
        assert "mode" in str(exc_info.value)


class TestServiceDescriptor:
    """Test ServiceDescriptor derived values."""
    
    def _descriptor(self, port_mapping):
        return ServiceDescriptor(
            service_name="api",
            image="registry.io/org/api",
            tag="1.2",
            container_name="myapp-api",
            port_mapping=port_mapping,
        )
        
    def test_published_port(self):
        """Test bare ports map to themselves."""
        assert self._descriptor("8080").published_port == "8080:8080"
        assert self._descriptor("9000:80").published_port == "9000:80"
        assert self._descriptor(None).published_port is None
        
    def test_container_port(self):
        """Test container port extraction."""
        assert self._descriptor("9000:80").container_port == "80"
        assert self._descriptor("8080").container_port == "8080"
        assert self._descriptor(None).container_port == "3000"
        
    def test_image_reference(self):
        """Test image and tag are joined."""
        assert self._descriptor(None).image_reference == "registry.io/org/api:1.2"


class TestImageReference:
    """Test image reference helper."""
    
    def test_appends_tag(self):
        assert image_reference("nginx", "latest") == "nginx:latest"
        assert image_reference("registry.io:5000/org/api", "1.0") == "registry.io:5000/org/api:1.0"
        
    def test_keeps_pinned_reference(self):
        assert image_reference("nginx:1.25", "latest") == "nginx:1.25"
        assert image_reference("nginx@sha256:abc", "latest") == "nginx@sha256:abc"

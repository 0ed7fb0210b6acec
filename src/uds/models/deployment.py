"""Deployment specification models."""

import logging
import re
from typing import Any, ClassVar, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from uds.utils.parsing import parse_list, parse_mapping


logger = logging.getLogger(__name__)

APP_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
PORT_PATTERN = re.compile(r"^(\d{1,5})(?::(\d{1,5}))?$")
DEFAULT_SERVICE_PORT = "3000"


def image_reference(image: str, tag: str) -> str:
    """Join an image and tag into a pullable reference.

    References that already pin a tag or digest are returned unchanged.
    """
    last_segment = image.rsplit("/", 1)[-1]
    if "@" in image or ":" in last_segment or not tag:
        return image
    return f"{image}:{tag}"


def container_port(port_mapping: str) -> str:
    """Return the container side of a ``host:container`` mapping."""
    return port_mapping.split(":")[-1]


def host_port(port_mapping: str) -> str:
    """Return the host side of a ``host:container`` mapping."""
    return port_mapping.split(":")[0]


class HealthCheckSpec(BaseModel):
    """Health check configuration supplied by the caller."""
    mode: Literal["none", "disabled", "http", "tcp", "external"] = Field(default="none")
    path: str = Field(default="auto", description="HTTP path, 'auto' means /health")
    command: Optional[str] = Field(None, description="Command for externally handled checks")
    timeout_seconds: int = Field(default=60, ge=1)
    
    INTERVAL: ClassVar[str] = "30s"
    TIMEOUT: ClassVar[str] = "10s"
    RETRIES: ClassVar[int] = 3
    START_PERIOD: ClassVar[str] = "60s"
    DEFAULT_PATH: ClassVar[str] = "/health"
    
    model_config = ConfigDict(frozen=True, extra="ignore")
    
    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        """Map the mode spellings used by deployment files."""
        if v is None:
            return "none"
        mode = str(v).strip().lower()
        if mode == "auto":
            return "http"
        if mode in ("container", "command"):
            return "external"
        return mode

    @field_validator("path", mode="before")
    @classmethod
    def normalize_path(cls, v):
        """Treat a missing path as auto."""
        if v is None:
            return "auto"
        return str(v).strip() or "auto"

    @property
    def enabled(self) -> bool:
        """Whether a health check is configured at all."""
        return self.mode not in ("none", "disabled") and self.path.lower() not in ("none", "disabled")
        
    @property
    def materialized(self) -> bool:
        """Whether the check is written into the compose document."""
        return self.enabled and self.mode in ("http", "tcp")
        
    @property
    def resolved_path(self) -> str:
        """HTTP path with 'auto' resolved."""
        if self.path == "auto" or not self.path:
            return self.DEFAULT_PATH
        return self.path if self.path.startswith("/") else f"/{self.path}"


class DeploymentSpec(BaseModel):
    """Caller-supplied description of one application stack."""
    app_name: str = Field(..., description="Application name")
    images: List[str] = Field(..., min_length=1, description="Image references, one per service")
    tag: str = Field(default="latest")
    ports: List[str] = Field(default_factory=list, description="Port mappings aligned with images")
    env_vars: Dict[str, Any] = Field(default_factory=dict)
    volumes: List[str] = Field(default_factory=list)
    extra_hosts: List[str] = Field(default_factory=list)
    use_profiles: bool = Field(default=True)
    compose_schema_version: Optional[str] = Field(default="3.8")
    
    model_config = ConfigDict(frozen=True, extra="ignore")
    
    @field_validator("app_name")
    @classmethod
    def validate_app_name(cls, v):
        """Validate application name."""
        v = v.strip()
        if not APP_NAME_PATTERN.match(v):
            raise ValueError(f"Invalid app name: {v!r}")
        return v
        
    @field_validator("images", mode="before")
    @classmethod
    def parse_images(cls, v):
        """Accept a list, a comma list or a JSON array of images."""
        return [str(image).replace(" ", "") for image in parse_list(v, "images")]
        
    @field_validator("ports", mode="before")
    @classmethod
    def parse_ports(cls, v):
        """Accept a list, a comma list or a JSON array of port mappings."""
        return [str(port) for port in parse_list(v, "ports")]
        
    @field_validator("ports")
    @classmethod
    def validate_ports(cls, v):
        """Validate bare ports and host:container pairs."""
        for mapping in v:
            match = PORT_PATTERN.match(mapping)
            if not match or not all(1 <= int(p) <= 65535 for p in match.groups() if p):
                raise ValueError(f"Invalid port mapping: {mapping!r}")
        return v
        
    @field_validator("env_vars", mode="before")
    @classmethod
    def parse_env_vars(cls, v):
        """Degrade malformed environment input to an empty mapping."""
        return parse_mapping(v, "env_vars")
        
    @field_validator("volumes", mode="before")
    @classmethod
    def parse_volumes(cls, v):
        """Accept mount strings or structured mount entries."""
        mounts = []
        for entry in parse_list(v, "volumes"):
            if isinstance(entry, dict) and entry.get("source") and entry.get("target"):
                parts = [str(entry["source"]), str(entry["target"])]
                if entry.get("mode"):
                    parts.append(str(entry["mode"]))
                mounts.append(":".join(parts))
            elif isinstance(entry, list) and len(entry) in (2, 3):
                mounts.append(":".join(str(p) for p in entry))
            elif isinstance(entry, str):
                mounts.append(entry.replace(" ", ""))
            else:
                logger.warning(f"Skipping malformed volume entry: {entry!r}")
        return mounts
        
    @field_validator("extra_hosts", mode="before")
    @classmethod
    def parse_extra_hosts(cls, v):
        """Accept a list, a comma list or a JSON array of host:ip entries."""
        return [str(host).replace(" ", "") for host in parse_list(v, "extra_hosts")]
        
    @field_validator("compose_schema_version", mode="before")
    @classmethod
    def normalize_schema_version(cls, v):
        """YAML reads 3.8 as a float; keep it textual."""
        if v is None:
            return None
        text = str(v).strip()
        return text or None
        
    @property
    def is_multi_service(self) -> bool:
        """Whether more than one image is deployed."""
        return len(self.images) > 1
        
    @property
    def network_name(self) -> str:
        """Name of the shared application network."""
        return f"{self.app_name}-network"
        
    def port_for(self, index: int) -> Optional[str]:
        """Port mapping for the service at ``index``.

        Multi-service stacks fall back to the default service port when the
        ports list is shorter than the images list.
        """
        if index < len(self.ports):
            return self.ports[index]
        if self.is_multi_service:
            return DEFAULT_SERVICE_PORT
        return None


class ServiceDescriptor(BaseModel):
    """Derived per-image service configuration."""
    service_name: str
    image: str
    tag: str
    container_name: str
    port_mapping: Optional[str] = None
    env: Dict[str, str] = Field(default_factory=dict)
    volumes: List[str] = Field(default_factory=list)
    extra_hosts: List[str] = Field(default_factory=list)
    health_check: Optional[HealthCheckSpec] = None
    
    model_config = ConfigDict(frozen=True)
    
    @property
    def image_reference(self) -> str:
        """Image reference including the tag."""
        return image_reference(self.image, self.tag)
        
    @property
    def published_port(self) -> Optional[str]:
        """Port mapping in compose ``host:container`` form."""
        if not self.port_mapping:
            return None
        if ":" in self.port_mapping:
            return self.port_mapping
        return f"{self.port_mapping}:{self.port_mapping}"
        
    @property
    def container_port(self) -> str:
        """Port the service listens on inside its container."""
        return container_port(self.port_mapping or DEFAULT_SERVICE_PORT)

"""Deployment file loading."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from uds.errors import InvalidConfig
from uds.models.config import UDSConfig
from uds.models.deployment import DeploymentSpec, HealthCheckSpec


logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads settings, deployment and health check sections from YAML.

    This is the only place where loosely typed deployment input is read;
    everything it hands out is a validated model.
    """
    
    def __init__(self, config_path: Path):
        """Initialize configuration manager."""
        self.config_path = Path(config_path)
        self.yaml = YAML(typ="safe")
        self.config: UDSConfig = UDSConfig()
        self.health_check: HealthCheckSpec = HealthCheckSpec()
        self._deployment: Optional[DeploymentSpec] = None
        
    def load(self) -> "ConfigManager":
        """Load and validate every section of the file."""
        logger.info(f"Loading configuration from {self.config_path}")
        data = self._read_yaml(self.config_path)
        
        try:
            self.config = UDSConfig(**self._section(data, "settings"))
            self.health_check = HealthCheckSpec(**self._section(data, "health_check"))
            
            deployment = self._section(data, "deployment")
            if deployment:
                self._deployment = DeploymentSpec(**deployment)
        except ValidationError as e:
            logger.error(f"Invalid configuration in {self.config_path}: {e}")
            raise
            
        logger.debug("Configuration loaded successfully")
        return self
        
    @property
    def deployment(self) -> DeploymentSpec:
        """The deployment section; required for deployment operations."""
        if self._deployment is None:
            raise InvalidConfig(f"No deployment section in {self.config_path}")
        return self._deployment
        
    def _section(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        """A top-level mapping section, empty when absent."""
        section = data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise InvalidConfig(f"Section '{name}' in {self.config_path} must be a mapping")
        return dict(section)
        
    def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse YAML file."""
        if not file_path.exists():
            raise InvalidConfig(f"Configuration file not found: {file_path}")
            
        try:
            data = self.yaml.load(file_path.read_text())
        except YAMLError as e:
            raise InvalidConfig(f"Failed to parse {file_path}: {e}") from e
            
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise InvalidConfig(f"Configuration file {file_path} must contain a mapping")
        return data

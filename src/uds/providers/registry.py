"""Provider registry wiring the runtime and its consumers."""

import logging
import time
from typing import Callable, Dict, Optional

from uds.models.config import UDSConfig
from uds.providers.base import ContainerRuntime
from uds.providers.container import ContainerController
from uds.providers.docker import DockerRuntime
from uds.providers.image import ImagePuller
from uds.providers.port import PortResolver


logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry for managing providers."""
    
    def __init__(self):
        """Initialize provider registry."""
        self._providers: Dict[str, object] = {}
        self.runtime: Optional[ContainerRuntime] = None
        
    def initialize(
        self,
        config: UDSConfig,
        runtime: Optional[ContainerRuntime] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Build all providers around a single runtime."""
        self.runtime = runtime or DockerRuntime(
            binary=config.runtime.binary,
            timeout=config.runtime.command_timeout,
        )
        
        self._providers = {
            "ports": PortResolver(config.ports),
            "images": ImagePuller(
                self.runtime,
                max_attempts=config.retry.pull_attempts,
                sleep=sleep,
            ),
            "containers": ContainerController(
                self.runtime,
                max_start_attempts=config.retry.start_attempts,
                stop_timeout=config.retry.stop_timeout,
                sleep=sleep,
            ),
        }
        
        for name in self._providers:
            logger.debug(f"Initialized provider: {name}")
                
    def get_provider(self, name: str) -> Optional[object]:
        """Get a provider by name."""
        return self._providers.get(name)
        
    def list_providers(self) -> list[str]:
        """List available provider names."""
        return list(self._providers.keys())
        
    @property
    def ports(self) -> PortResolver:
        return self._providers["ports"]
        
    @property
    def images(self) -> ImagePuller:
        return self._providers["images"]
        
    @property
    def containers(self) -> ContainerController:
        return self._providers["containers"]

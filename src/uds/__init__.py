"""
UDS Docker - Docker integration layer of the Unified Deployment System.

Generates compose documents for single- and multi-service stacks, resolves
port conflicts, pulls images with retry and controls container lifecycle.
"""

__version__ = "1.0.0"

# Re-export key components for easier access
from uds.compose.generator import ComposeGenerator
from uds.models.config import UDSConfig
from uds.models.deployment import DeploymentSpec, HealthCheckSpec
from uds.providers.container import ContainerController
from uds.providers.image import ImagePuller
from uds.providers.port import PortResolver

__all__ = [
    "ComposeGenerator",
    "UDSConfig",
    "DeploymentSpec",
    "HealthCheckSpec",
    "ContainerController",
    "ImagePuller",
    "PortResolver",
]

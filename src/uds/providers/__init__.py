"""Container runtime providers."""

from uds.providers.base import ContainerHealth, ContainerRuntime
from uds.providers.container import ContainerController
from uds.providers.docker import DockerRuntime
from uds.providers.image import ImagePuller, PullSummary
from uds.providers.port import PortResolver
from uds.providers.registry import ProviderRegistry

__all__ = [
    "ContainerHealth",
    "ContainerRuntime",
    "ContainerController",
    "DockerRuntime",
    "ImagePuller",
    "PullSummary",
    "PortResolver",
    "ProviderRegistry",
]

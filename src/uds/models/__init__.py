"""Pydantic models for configuration and validation."""

from uds.models.config import UDSConfig, RuntimeConfig, RetryConfig, PortConfig
from uds.models.deployment import DeploymentSpec, HealthCheckSpec, ServiceDescriptor

__all__ = [
    "UDSConfig",
    "RuntimeConfig",
    "RetryConfig",
    "PortConfig",
    "DeploymentSpec",
    "HealthCheckSpec",
    "ServiceDescriptor",
]

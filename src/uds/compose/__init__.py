"""Compose document generation."""

from uds.compose.generator import ComposeGenerator
from uds.compose.services import build_service_descriptors, derive_service_name, service_environment
from uds.compose.volumes import infer_named_volumes, named_volume_source

__all__ = [
    "ComposeGenerator",
    "build_service_descriptors",
    "derive_service_name",
    "service_environment",
    "infer_named_volumes",
    "named_volume_source",
]

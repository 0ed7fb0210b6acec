"""Service descriptor derivation."""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from uds.models.deployment import DeploymentSpec, HealthCheckSpec, ServiceDescriptor


logger = logging.getLogger(__name__)

SERVICE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
SINGLE_SERVICE_NAME = "app"


def derive_service_name(image: str, index: int) -> str:
    """Derive a service name from an image reference.

    ``registry.io/org/api:1.2`` becomes ``api``. Names that come out empty or
    with characters outside ``[a-zA-Z0-9_-]`` fall back to ``service-<n>``.
    """
    name = image.strip().rsplit("/", 1)[-1]
    name = name.split("@", 1)[0].split(":", 1)[0].lower()
    if not name or not SERVICE_NAME_PATTERN.match(name):
        return f"service-{index + 1}"
    return name


def format_env_value(value: Any) -> str:
    """Render an environment value the way ``jq tostring`` prints it."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def service_environment(env_vars: Dict[str, Any], service_name: str) -> Dict[str, str]:
    """Environment for one service.

    A nested mapping keyed by the service name replaces the global entries
    entirely. Without one, every top-level entry applies to the service;
    nested values are written as compact JSON text.
    """
    if not env_vars:
        return {}
        
    scoped = env_vars.get(service_name)
    if isinstance(scoped, dict):
        return {str(key): format_env_value(value) for key, value in scoped.items()}
        
    return {str(key): format_env_value(value) for key, value in env_vars.items()}


def build_service_descriptors(
    spec: DeploymentSpec,
    health_check: Optional[HealthCheckSpec] = None,
) -> List[ServiceDescriptor]:
    """Derive one service descriptor per image in ``spec``."""
    if spec.is_multi_service:
        names = []
        for index, image in enumerate(spec.images):
            name = derive_service_name(image, index)
            if name in names:
                logger.warning(f"Duplicate service name {name} for image {image}, using {name}-{index + 1}")
                name = f"{name}-{index + 1}"
            names.append(name)
    else:
        names = [SINGLE_SERVICE_NAME]
        
    return [
        ServiceDescriptor(
            service_name=name,
            image=image,
            tag=spec.tag,
            container_name=f"{spec.app_name}-{name}",
            port_mapping=spec.port_for(index),
            env=service_environment(spec.env_vars, name),
            volumes=list(spec.volumes),
            extra_hosts=list(spec.extra_hosts),
            health_check=health_check,
        )
        for index, (name, image) in enumerate(zip(names, spec.images))
    ]

"""Compose document generator.

The generator builds the whole document as a structured ``ruamel.yaml``
mapping (header, services, networks, volumes) and serializes it in one pass.
Nothing is appended to the output file incrementally, so section order is
fixed by construction.
"""

import io
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.scalarstring import DoubleQuotedScalarString

from uds.compose.services import build_service_descriptors
from uds.compose.volumes import infer_named_volumes
from uds.models.deployment import DeploymentSpec, HealthCheckSpec, ServiceDescriptor


logger = logging.getLogger(__name__)

HEADER_COMMENT = "Generated by Unified Deployment System"
DIRECTORY_MODE = 0o700
FILE_MODE = 0o600


def _flow_seq(items) -> CommentedSeq:
    """Sequence rendered inline as ``[a, b]``."""
    seq = CommentedSeq(items)
    seq.fa.set_flow_style()
    return seq


class ComposeGenerator:
    """Builds compose documents from deployment specs."""

    def __init__(self, health_check: Optional[HealthCheckSpec] = None):
        """Initialize generator with the caller's health check configuration."""
        self.health_check = health_check or HealthCheckSpec()
        self.yaml = YAML()
        self.yaml.default_flow_style = False
        self.yaml.indent(mapping=2, sequence=4, offset=2)

    def generate(self, spec: DeploymentSpec, output_path: Union[str, Path]) -> Path:
        """Write the compose file for ``spec`` to ``output_path``.

        The output directory is created and restricted to its owner before
        the file is written; the file itself is restricted after writing.
        The file is replaced wholesale on every call.
        """
        output_path = Path(output_path)
        logger.debug(f"Generating compose file for {spec.app_name}")

        output_dir = output_path.parent
        output_dir.mkdir(parents=True, exist_ok=True)
        self._secure_permissions(output_dir, DIRECTORY_MODE)

        content = self.render(spec)
        output_path.write_text(content)

        self._secure_permissions(output_path, FILE_MODE)

        logger.info(f"Generated compose file at {output_path}")
        return output_path

    def render(self, spec: DeploymentSpec) -> str:
        """Serialize the compose document for ``spec`` to YAML text."""
        stream = io.StringIO()
        self.yaml.dump(self.build(spec), stream)
        return stream.getvalue()

    def build(self, spec: DeploymentSpec) -> CommentedMap:
        """Build the structured compose document for ``spec``."""
        document = CommentedMap()

        if spec.compose_schema_version:
            document["version"] = DoubleQuotedScalarString(spec.compose_schema_version)

        services = CommentedMap()
        for service in build_service_descriptors(spec, self.health_check):
            services[service.service_name] = self._service_block(spec, service)
        document["services"] = services

        document["networks"] = self._networks_section(spec)

        volumes = self._volumes_section(spec)
        if volumes:
            document["volumes"] = volumes

        document.yaml_set_start_comment(HEADER_COMMENT)
        return document

    def _service_block(self, spec: DeploymentSpec, service: ServiceDescriptor) -> CommentedMap:
        """Build one service block in its fixed key order."""
        block = self._service_base(spec, service)

        ports = self._port_block(service)
        if ports:
            block["ports"] = ports

        environment = self._environment_block(service)
        if environment:
            block["environment"] = environment

        volumes = self._list_block(service.volumes)
        if volumes:
            block["volumes"] = volumes

        extra_hosts = self._list_block(service.extra_hosts)
        if extra_hosts:
            block["extra_hosts"] = extra_hosts

        healthcheck = self._health_check_block(service)
        if healthcheck:
            block["healthcheck"] = healthcheck

        block["networks"] = [spec.network_name]
        return block

    def _service_base(self, spec: DeploymentSpec, service: ServiceDescriptor) -> CommentedMap:
        """Image, container name, profiles and restart policy."""
        block = CommentedMap()
        block["image"] = service.image_reference
        block["container_name"] = service.container_name
        if spec.use_profiles:
            block["profiles"] = ["app"]
        block["restart"] = "unless-stopped"
        return block

    def _port_block(self, service: ServiceDescriptor) -> Optional[List[str]]:
        """Port mapping list, or None when the service publishes no port."""
        published = service.published_port
        if not published:
            return None
        return [DoubleQuotedScalarString(published)]

    def _environment_block(self, service: ServiceDescriptor) -> Optional[List[str]]:
        """``KEY=VALUE`` entries, or None when the environment is empty."""
        if not service.env:
            return None
        return [f"{key}={value}" for key, value in service.env.items()]

    def _list_block(self, entries: List[str]) -> Optional[List[str]]:
        """Literal entries such as mounts or host entries, emitted unmodified."""
        if not entries:
            return None
        return list(entries)

    def _health_check_block(self, service: ServiceDescriptor) -> Optional[CommentedMap]:
        """Container health check for http and tcp modes only."""
        health_check = service.health_check
        if health_check is None or not health_check.materialized:
            return None

        port = service.container_port
        if health_check.mode == "http":
            url = f"http://localhost:{port}{health_check.resolved_path}"
            test = ["CMD", "wget", "--no-verbose", "--tries=1", "--spider", url]
        else:
            test = ["CMD", "nc", "-z", "localhost", port]

        block = CommentedMap()
        block["test"] = _flow_seq(test)
        block["interval"] = health_check.INTERVAL
        block["timeout"] = health_check.TIMEOUT
        block["retries"] = health_check.RETRIES
        block["start_period"] = health_check.START_PERIOD
        return block

    def _networks_section(self, spec: DeploymentSpec) -> CommentedMap:
        """The single shared application network."""
        network = CommentedMap()
        network["name"] = spec.network_name
        section = CommentedMap()
        section[spec.network_name] = network
        return section

    def _volumes_section(self, spec: DeploymentSpec) -> Optional[CommentedMap]:
        """Top-level declarations for named volumes referenced by mounts."""
        names = infer_named_volumes(spec.volumes)
        if not names:
            return None

        section = CommentedMap()
        for name in names:
            volume = CommentedMap()
            volume["name"] = name
            volume["external"] = False
            section[name] = volume
        logger.debug(f"Declaring named volumes: {', '.join(names)}")
        return section

    def _secure_permissions(self, path: Path, mode: int) -> None:
        """Restrict ``path`` to its owner."""
        os.chmod(path, mode)
        logger.debug(f"Set permissions {oct(mode)} on {path}")

"""Network coordinate resolution for discovered containers.

Address and port are each resolved by an ordered list of sources; the first
source that yields a value wins. The module level functions are the pure
sources, ``CoordinateResolver`` adds the ones that need a process or the
container runtime.
"""

import json
import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Optional

from flexdisco.models.config import DiscoveryConfig
from flexdisco.models.container import (
    ContainerSnapshot,
    ContainerInspection,
    KUBE_CONTAINER_PORTS_LABEL,
)
from flexdisco.models.directive import Directive, IPMode
from flexdisco.runtime.client import DockerRuntime, RuntimeClientError
from flexdisco.utils.commands import run_command


logger = logging.getLogger(__name__)

IPV4_PATTERN = re.compile(
    r"^(?:(?:25[0-5]|2[0-4]\d|[01]?\d?\d)\.){3}(?:25[0-5]|2[0-4]\d|[01]?\d?\d)$"
)

FIB_TRIE_PIPELINE = (
    "cat {proc}/{pid}/net/fib_trie | awk '/32 host/ {{ print f }} {{f=$2}}' "
    "| grep -v 127.0.0.1 | sort -u"
)


@dataclass
class Coordinates:
    """Resolved address of a target; unresolved fields stay ``None``."""
    ip: Optional[str] = None
    port: Optional[str] = None


def extract_ipv4(output: str) -> Optional[str]:
    """Return the first non-loopback IPv4 address found in command output."""
    for token in output.split():
        if IPV4_PATTERN.match(token) and not token.startswith("127."):
            return token
    return None


def effective_ip_mode(directive: Directive, config: DiscoveryConfig) -> IPMode:
    """Global override, then directive mode, then the configured default."""
    if config.override_ip_mode:
        return IPMode(config.override_ip_mode)
    if directive.ip_mode is not None:
        return directive.ip_mode
    return IPMode(config.default_ip_mode)


def mode_ip(container: ContainerSnapshot, mode: IPMode) -> Optional[str]:
    """Address for the ip mode: first network ip or first published host ip."""
    if mode == IPMode.PRIVATE:
        return container.network_ips[0] if container.network_ips else None
    if container.ports:
        return container.ports[0].ip or None
    return None


def override_port(directive: Directive) -> Optional[str]:
    """Port given explicitly on the directive."""
    return directive.port or None


def mode_port(container: ContainerSnapshot, mode: IPMode) -> Optional[str]:
    """Private or published port of the first port mapping."""
    if not container.ports:
        return None
    mapping = container.ports[0]
    port = mapping.private_port if mode == IPMode.PRIVATE else mapping.public_port
    return str(port) if port else None


def kube_port(container: ContainerSnapshot) -> Optional[str]:
    """First ``containerPort`` of the kubernetes container ports annotation."""
    raw = container.labels.get(KUBE_CONTAINER_PORTS_LABEL)
    if not raw:
        return None
    try:
        ports = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.debug(f"Invalid kubernetes ports label on {container.id}: {e}")
        return None

    if not isinstance(ports, list):
        return None
    for entry in ports:
        if isinstance(entry, dict) and entry.get("containerPort") is not None:
            return str(entry["containerPort"])
    return None


def exposed_port(inspection: Optional[ContainerInspection]) -> Optional[str]:
    """First exposed port of the image, without its protocol suffix."""
    if inspection is None or not inspection.exposed_ports:
        return None
    return inspection.exposed_ports[0].split("/")[0] or None


class CoordinateResolver:
    """Resolves ip and port of a matched container."""

    def __init__(self, config: DiscoveryConfig, runtime: DockerRuntime):
        """Initialize resolver."""
        self.config = config
        self.runtime = runtime

    async def resolve(
        self,
        container: ContainerSnapshot,
        inspection: Optional[ContainerInspection],
        directive: Directive,
    ) -> Coordinates:
        """Run both fallback chains for one directive/container pair."""
        mode = effective_ip_mode(directive, self.config)
        return Coordinates(
            ip=await self.resolve_ip(container, inspection, mode),
            port=self.resolve_port(container, inspection, directive, mode),
        )

    async def resolve_ip(
        self,
        container: ContainerSnapshot,
        inspection: Optional[ContainerInspection],
        mode: IPMode,
    ) -> Optional[str]:
        """Address from the IP mode, then host proc, then `hostname -i`."""
        ip = mode_ip(container, mode)
        if ip:
            return ip

        if inspection is not None:
            ip = await self.low_level_ip(inspection.pid)
            if ip:
                return ip

        return await self.hostname_ip(container.id)

    def resolve_port(
        self,
        container: ContainerSnapshot,
        inspection: Optional[ContainerInspection],
        directive: Directive,
        mode: IPMode,
    ) -> Optional[str]:
        """Port from the override, the IP mode, the kube label, then the image."""
        return (
            override_port(directive)
            or mode_port(container, mode)
            or kube_port(container)
            or exposed_port(inspection)
        )

    async def low_level_ip(self, pid: int) -> Optional[str]:
        """Read the address from the target's network namespace via host proc."""
        if pid <= 0:
            return None

        logger.info(f"Attempting low level ip fetch for pid {pid}")
        command = FIB_TRIE_PIPELINE.format(proc=self.config.host_proc_dir, pid=pid)
        try:
            result = await run_command(
                command,
                timeout=self.config.command_timeout,
            )
        except subprocess.TimeoutExpired:
            logger.debug(f"Low level ip fetch timed out for pid {pid}")
            return None
        except subprocess.CalledProcessError as e:
            logger.debug(f"Low level ip fetch failed for pid {pid}: {e}. Stderr: {e.stderr}")
            return None
        except OSError as e:
            logger.debug(f"Low level ip fetch could not run: {e}")
            return None

        ip = extract_ipv4(result.stdout)
        if ip:
            logger.info(f"Fetched {ip} for pid {pid}")
        else:
            logger.debug(f"Low level fetch returned no address: {result.stdout.strip()!r}")
        return ip

    async def hostname_ip(self, container_id: str) -> Optional[str]:
        """Ask the container itself via ``hostname -i``."""
        try:
            output = await self.runtime.exec_in_container(container_id, ["hostname", "-i"])
        except RuntimeClientError as e:
            logger.debug(f"Secondary fetch of container ip failed: {e}")
            return None

        if "exec failed" in output:
            logger.debug(f"Secondary fetch of container ip failed: {output.strip()}")
            return None
        return extract_ipv4(output)

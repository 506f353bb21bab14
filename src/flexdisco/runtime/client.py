"""Docker runtime client used by discovery."""

import asyncio
import logging
import subprocess
from typing import List, Optional

import docker
from docker.constants import DEFAULT_DOCKER_API_VERSION
from docker.errors import DockerException

from flexdisco.models.config import DiscoveryConfig
from flexdisco.models.container import ContainerSnapshot, ContainerInspection
from flexdisco.utils.commands import run_command


logger = logging.getLogger(__name__)


class RuntimeClientError(Exception):
    """Container runtime error."""
    pass


def _version_tuple(version: str) -> tuple:
    return tuple(int(part) for part in version.split("."))


async def probe_client_api_version(binaries: List[str], timeout: Optional[float] = None) -> Optional[str]:
    """Ask the local docker CLI for its client API version.

    Each binary is tried in turn; ``None`` is returned when none answers.
    """
    for binary in binaries:
        try:
            result = await run_command(
                [binary, "version", "--format", "{{json .Client.APIVersion}}"],
                timeout=timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Unable to fetch docker API version with {binary}: {e}")
            continue

        version = result.stdout.strip().replace('"', "")
        if version:
            return version

    return None


async def select_api_version(config: DiscoveryConfig) -> Optional[str]:
    """Pick the API version to pin the client to, ``None`` for unpinned."""
    if config.docker_api_version:
        return config.docker_api_version

    client_version = await probe_client_api_version(
        config.docker_binaries, timeout=config.command_timeout
    )
    if not client_version:
        logger.debug("Unable to fetch docker API version, using unpinned client")
        return None

    try:
        newer = _version_tuple(client_version) > _version_tuple(DEFAULT_DOCKER_API_VERSION)
    except ValueError:
        logger.debug(f"Unparseable docker API version {client_version!r}, using unpinned client")
        return None

    if newer:
        logger.debug(
            f"Client API version {client_version} is higher than supported "
            f"version {DEFAULT_DOCKER_API_VERSION}, using unpinned client"
        )
        return None

    logger.debug(f"Setting client with version: {client_version}")
    return client_version


class DockerRuntime:
    """Async facade over the docker SDK low-level API."""

    def __init__(self, client: "docker.DockerClient"):
        """Wrap an existing docker client."""
        self.client = client

    @classmethod
    async def create(cls, config: DiscoveryConfig) -> "DockerRuntime":
        """Create a runtime client honouring the configured API version."""
        version = await select_api_version(config)
        try:
            if config.docker_base_url:
                client = await asyncio.to_thread(
                    docker.DockerClient, base_url=config.docker_base_url, version=version
                )
            else:
                client = await asyncio.to_thread(docker.from_env, version=version)
        except DockerException as e:
            raise RuntimeClientError(f"Unable to create docker client: {e}") from e
        return cls(client)

    async def list_containers(self) -> List[ContainerSnapshot]:
        """List running containers."""
        try:
            entries = await asyncio.to_thread(self.client.api.containers)
        except DockerException as e:
            raise RuntimeClientError(f"Unable to list containers: {e}") from e
        return [ContainerSnapshot.from_api(entry) for entry in entries]

    async def inspect_container(self, container_id: str) -> ContainerInspection:
        """Inspect a single container."""
        try:
            data = await asyncio.to_thread(self.client.api.inspect_container, container_id)
        except DockerException as e:
            raise RuntimeClientError(f"Unable to inspect container {container_id}: {e}") from e
        return ContainerInspection.from_api(data)

    async def exec_in_container(self, container_id: str, cmd: List[str]) -> str:
        """Run a command inside a container and return its output."""
        try:
            return await asyncio.to_thread(self._exec, container_id, cmd)
        except DockerException as e:
            raise RuntimeClientError(f"Exec in container {container_id} failed: {e}") from e

    def _exec(self, container_id: str, cmd: List[str]) -> str:
        api = self.client.api
        exec_id = api.exec_create(container_id, cmd, stdout=True, stderr=True)["Id"]
        output = api.exec_start(exec_id)
        if isinstance(output, bytes):
            output = output.decode(errors="replace")

        exit_code = api.exec_inspect(exec_id).get("ExitCode")
        if exit_code not in (0, None):
            raise RuntimeClientError(
                f"Command {' '.join(cmd)} exited with {exit_code}: {output.strip()}"
            )
        return output

    def close(self):
        """Release the underlying HTTP session."""
        self.client.close()

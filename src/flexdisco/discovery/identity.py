"""Identification of the agent's own container."""

import logging
import re
from pathlib import Path
from typing import List, Optional

from flexdisco.discovery.fanout import fan_out_ordered
from flexdisco.models.config import DiscoveryConfig
from flexdisco.models.container import ContainerSnapshot


logger = logging.getLogger(__name__)

CONTAINER_ID_PATTERN = re.compile(r"[0-9a-f]{64}")

# Heuristic ranks, lower wins.
RANK_IMAGE = 1
RANK_NAME = 2
RANK_KUBE_NAME = 3


def read_own_container_id(cgroup_path: Path = Path("/proc/self/cgroup")) -> Optional[str]:
    """Container id of the current process according to its cgroup file."""
    try:
        content = cgroup_path.read_text()
    except OSError as e:
        logger.debug(f"Unable to read {cgroup_path}: {e}")
        return None

    match = CONTAINER_ID_PATTERN.search(content)
    return match.group(0) if match else None


class SelfIdentifier:
    """Finds which enumerated container runs this agent."""

    def __init__(self, config: DiscoveryConfig, cgroup_path: Optional[Path] = None):
        """Initialize identifier."""
        self.config = config
        self.cgroup_path = cgroup_path

    def rank(self, container: ContainerSnapshot) -> Optional[int]:
        """Best heuristic step the container satisfies, ``None`` for none."""
        if self.config.integration_name in container.image:
            return RANK_IMAGE

        short_name = self.config.integration_name_short
        if any(short_name in name for name in container.stripped_names()):
            return RANK_NAME

        kube_name = container.kube_container_name
        if kube_name and short_name in kube_name:
            return RANK_KUBE_NAME

        return None

    async def identify(
        self,
        containers: List[ContainerSnapshot],
        known_id: Optional[str] = None,
    ) -> Optional[str]:
        """Resolve the agent container id.

        A known or configured id is used as is. Otherwise the cgroup file is
        consulted, then every container is ranked concurrently and the best
        rank wins, ties going to the earliest container in the listing.
        """
        container_id = known_id or self.config.container_id
        if container_id:
            return container_id

        if self.cgroup_path is not None:
            container_id = read_own_container_id(self.cgroup_path)
            if container_id:
                logger.debug(f"Agent container id from cgroup: {container_id}")
                return container_id

        logger.debug("Agent container id has not been found internally")
        logger.debug(
            f"Falling back - looking for '{self.config.integration_name}' image or container name"
        )

        async def _rank(container: ContainerSnapshot) -> Optional[int]:
            return self.rank(container)

        ranks = await fan_out_ordered(containers, _rank)
        best = None
        for container, rank in zip(containers, ranks):
            if rank is not None and (best is None or rank < best[0]):
                best = (rank, container.id)

        if best is None:
            logger.debug("Unable to find agent container id")
            return None

        logger.debug(f"Agent container id: {best[1]}")
        return best[1]

"""Per-pass container inspection cache."""

import asyncio
import logging
from typing import Dict

from flexdisco.models.container import ContainerInspection
from flexdisco.runtime.client import DockerRuntime


logger = logging.getLogger(__name__)


class InspectionCache:
    """Inspects each container at most once per discovery pass.

    Concurrent callers asking for the same container share one in-flight
    request; a failed request is cached too and re-raised to every caller.
    """

    def __init__(self, runtime: DockerRuntime):
        """Initialize cache."""
        self.runtime = runtime
        self._requests: Dict[str, asyncio.Future] = {}

    async def get(self, container_id: str) -> ContainerInspection:
        """Inspection for a container, raising ``RuntimeClientError`` on failure."""
        request = self._requests.get(container_id)
        if request is None:
            request = asyncio.ensure_future(self.runtime.inspect_container(container_id))
            self._requests[container_id] = request
        return await asyncio.shield(request)

    def __len__(self) -> int:
        return len(self._requests)

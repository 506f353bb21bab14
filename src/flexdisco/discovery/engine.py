"""Discovery pass orchestration."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from flexdisco.discovery.annotations import merge_annotations, parse_directives
from flexdisco.discovery.fanout import fan_out
from flexdisco.discovery.identity import SelfIdentifier
from flexdisco.discovery.inspection import InspectionCache
from flexdisco.discovery.matcher import ClaimSet, TargetMatcher
from flexdisco.discovery.resolver import CoordinateResolver
from flexdisco.discovery.synthesizer import ConfigSynthesizer
from flexdisco.models.config import DiscoveryConfig
from flexdisco.models.container import ContainerSnapshot, ContainerInspection
from flexdisco.models.directive import Directive
from flexdisco.models.template import ProbeConfig, TemplateDocument
from flexdisco.runtime.client import DockerRuntime, RuntimeClientError


logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """Result of one fan-out unit: an inspected container and its directives."""
    container: ContainerSnapshot
    inspection: ContainerInspection
    directives: List[Directive] = field(default_factory=list)


@dataclass
class PassState:
    """Structures owned by a single discovery pass."""
    claims: ClaimSet
    inspections: InspectionCache


class DiscoveryEngine:
    """Runs discovery passes against a container runtime.

    Fan-out tasks only inspect and decode; the claim set and the output list
    are mutated solely by the coroutine consuming their results, so which
    directive wins a contested container is decided by arrival order.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        runtime: DockerRuntime,
        templates: List[TemplateDocument],
        cgroup_path: Optional[Path] = None,
    ):
        """Initialize discovery engine."""
        self.config = config
        self.runtime = runtime
        self.identifier = SelfIdentifier(config, cgroup_path=cgroup_path)
        self.matcher = TargetMatcher()
        self.resolver = CoordinateResolver(config, runtime)
        self.synthesizer = ConfigSynthesizer(templates)
        self.container_id: Optional[str] = config.container_id
        self.last_pass: Optional[datetime] = None

    async def run(self, output: Optional[List[ProbeConfig]] = None) -> List[ProbeConfig]:
        """Perform one discovery pass, appending configs to ``output``."""
        if output is None:
            output = []

        start_time = datetime.now()
        try:
            containers = await self.runtime.list_containers()
        except RuntimeClientError as e:
            logger.debug(f"Unable to perform container list: {e}")
            return output

        if not containers:
            logger.debug("No containers found")
            return output

        self.container_id = await self.identifier.identify(containers, self.container_id)

        state = PassState(claims=ClaimSet(), inspections=InspectionCache(self.runtime))
        found = len(output)

        # agent directives -> other containers
        await self._reverse_lookup(containers, state, output)
        # container directives -> themselves
        await self._forward_lookup(containers, state, output)

        self.last_pass = datetime.now()
        duration = (self.last_pass - start_time).total_seconds()
        logger.info(
            f"Discovery pass over {len(containers)} containers produced "
            f"{len(output) - found} configs in {duration:.2f}s"
        )
        return output

    async def _reverse_lookup(
        self,
        containers: List[ContainerSnapshot],
        state: PassState,
        output: List[ProbeConfig],
    ):
        """Match the agent's own directives against every other container."""
        if not self.container_id:
            return

        try:
            inspection = await state.inspections.get(self.container_id)
        except RuntimeClientError as e:
            logger.debug(f"Agent container inspect failed: {e}")
            return

        own = next((c for c in containers if c.id == self.container_id), None)
        annotations = merge_annotations(own.labels if own else {}, inspection)
        directives = parse_directives(annotations, self.config.marker, source=self.container_id)
        if not directives:
            return

        async def _inspect_candidate(container: ContainerSnapshot) -> Optional[Candidate]:
            possible = [d for d in directives if self.matcher.matches(d, container)]
            if not possible:
                return None
            try:
                target_inspection = await state.inspections.get(container.id)
            except RuntimeClientError as e:
                logger.debug(f"Reverse lookup inspect failed on {container.id}: {e}")
                return None
            return Candidate(container, target_inspection, possible)

        others = [c for c in containers if c.id != self.container_id]
        emissions = []
        async for candidate in fan_out(others, _inspect_candidate):
            if candidate is None:
                continue
            for directive in candidate.directives:
                if self.matcher.match(directive, candidate.container, state.claims):
                    logger.debug(f"Reverse lookup matched {candidate.container.id}: {directive.key}")
                    emissions.append(self._emit(directive, candidate.container, candidate.inspection))
                    break

        await self._collect(emissions, output)

    async def _forward_lookup(
        self,
        containers: List[ContainerSnapshot],
        state: PassState,
        output: List[ProbeConfig],
    ):
        """Honour directives other containers carry about themselves."""

        async def _inspect_candidate(container: ContainerSnapshot) -> Optional[Candidate]:
            try:
                inspection = await state.inspections.get(container.id)
            except RuntimeClientError as e:
                logger.debug(f"Forward lookup inspect failed on {container.id}: {e}")
                return None
            annotations = merge_annotations(container.labels, inspection)
            directives = parse_directives(annotations, self.config.marker, source=container.id)
            if not directives:
                return None
            return Candidate(container, inspection, directives)

        others = [
            c for c in containers
            if c.id != self.container_id and not state.claims.is_claimed(c.id)
        ]
        emissions = []
        async for candidate in fan_out(others, _inspect_candidate):
            if candidate is None:
                continue
            for directive in candidate.directives:
                if state.claims.claim(directive, candidate.container.id):
                    logger.debug(f"Forward lookup for {candidate.container.id}: {directive.key}")
                    emissions.append(self._emit(directive, candidate.container, candidate.inspection))
                    break

        await self._collect(emissions, output)

    async def _emit(
        self,
        directive: Directive,
        container: ContainerSnapshot,
        inspection: ContainerInspection,
    ) -> Optional[ProbeConfig]:
        coordinates = await self.resolver.resolve(container, inspection, directive)
        return self.synthesizer.synthesize(directive, container, coordinates)

    async def _collect(self, emissions: list, output: List[ProbeConfig]):
        results = await asyncio.gather(*emissions, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Failed to build dynamic config: {result}")
            elif result is not None:
                output.append(result)


async def discover(
    config: DiscoveryConfig,
    templates: List[TemplateDocument],
    output: Optional[List[ProbeConfig]] = None,
    cgroup_path: Optional[Path] = Path("/proc/self/cgroup"),
) -> List[ProbeConfig]:
    """Create a runtime client and run a single discovery pass.

    Client construction failures are logged and yield no configs.
    """
    if output is None:
        output = []

    try:
        runtime = await DockerRuntime.create(config)
    except RuntimeClientError as e:
        logger.debug(f"Unable to set docker client: {e}")
        return output

    try:
        engine = DiscoveryEngine(config, runtime, templates, cgroup_path=cgroup_path)
        return await engine.run(output)
    finally:
        runtime.close()

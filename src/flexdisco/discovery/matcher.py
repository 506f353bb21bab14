"""Target matching and per-pass claim bookkeeping."""

import logging
from typing import Set

from flexdisco.models.container import ContainerSnapshot
from flexdisco.models.directive import Directive, TargetType
from flexdisco.utils.matching import kv_finder


logger = logging.getLogger(__name__)


class ClaimSet:
    """Containers and directives already paired during a discovery pass.

    A container is claimed by at most one directive and a directive claims at
    most one container. Only the pass aggregator mutates it.
    """

    def __init__(self):
        self.containers: Set[str] = set()
        self.directives: Set[str] = set()

    def __contains__(self, container_id: str) -> bool:
        return container_id in self.containers

    def is_claimed(self, container_id: str) -> bool:
        """Check whether a container has already been taken."""
        return container_id in self.containers

    def claim(self, directive: Directive, container_id: str) -> bool:
        """Record the pairing, ``False`` if either side is already taken."""
        if container_id in self.containers or directive.claim_key in self.directives:
            return False
        self.containers.add(container_id)
        self.directives.add(directive.claim_key)
        return True


class TargetMatcher:
    """Decides whether a container is the one a directive points at."""

    def matches(self, directive: Directive, container: ContainerSnapshot) -> bool:
        """Compare the directive target against the container, ignoring claims."""
        mode = directive.target_mode

        if directive.target_type == TargetType.CONTAINER_NAME:
            for name in container.stripped_names():
                if kv_finder(mode, name, directive.target):
                    return True
            kube_name = container.kube_container_name
            return bool(kube_name) and kv_finder(mode, kube_name, directive.target)

        if directive.target_type == TargetType.IMAGE:
            return kv_finder(mode, container.image, directive.target)

        return False

    def match(self, directive: Directive, container: ContainerSnapshot, claims: ClaimSet) -> bool:
        """Match and claim the container; claimed containers never match."""
        if claims.is_claimed(container.id):
            return False
        if not self.matches(directive, container):
            return False
        if not claims.claim(directive, container.id):
            return False

        logger.debug(f"Directive {directive.key} claimed container {container.id}")
        return True

"""Tests for agent container identification."""

import pytest

from flexdisco.discovery.identity import SelfIdentifier, read_own_container_id
from flexdisco.models.config import DiscoveryConfig
from flexdisco.models.container import ContainerSnapshot


CGROUP_ID = "4f9c1e" + "0" * 58


@pytest.fixture
def identifier():
    """Create an identifier with default integration names."""
    return SelfIdentifier(DiscoveryConfig())


@pytest.mark.asyncio
class TestSelfIdentifier:
    """Test the identification fallback chain."""

    async def test_image_match(self, identifier):
        """Test the image heuristic."""
        containers = [
            ContainerSnapshot(id="app", image="nginx:latest", names=["/web"]),
            ContainerSnapshot(id="agent", image="example/nri-flex:latest", names=["/monitor"]),
        ]
        assert await identifier.identify(containers) == "agent"

    async def test_image_beats_name(self, identifier):
        """Test the image step wins over an earlier name match."""
        containers = [
            ContainerSnapshot(id="named", image="busybox", names=["/flex-sidecar"]),
            ContainerSnapshot(id="imaged", image="newrelic/nri-flex:1.4", names=["/agent"]),
        ]
        assert await identifier.identify(containers) == "imaged"

    async def test_name_then_kube_label(self, identifier):
        """Test name and kubernetes label fallbacks."""
        by_label = ContainerSnapshot(
            id="kube", image="custom", labels={"io.kubernetes.container.name": "flex"}
        )
        by_name = ContainerSnapshot(id="named", image="custom", names=["/my-flex"])

        assert await identifier.identify([by_label, by_name]) == "named"
        assert await identifier.identify([by_label]) == "kube"

    async def test_no_match(self, identifier):
        """Test nothing is returned when no heuristic applies."""
        containers = [ContainerSnapshot(id="x", image="redis", names=["/cache"])]
        assert await identifier.identify(containers) is None

    async def test_known_id_skips_heuristics(self, identifier):
        """Test a known id is returned untouched."""
        containers = [ContainerSnapshot(id="agent", image="nri-flex")]
        assert await identifier.identify(containers, known_id="preset") == "preset"

        configured = SelfIdentifier(DiscoveryConfig(container_id="configured"))
        assert await configured.identify(containers) == "configured"

    async def test_cgroup(self, tmp_path):
        """Test the cgroup file takes precedence over heuristics."""
        cgroup = tmp_path / "cgroup"
        cgroup.write_text(f"0::/system.slice/docker-{CGROUP_ID}.scope\n")
        identifier = SelfIdentifier(DiscoveryConfig(), cgroup_path=cgroup)

        containers = [ContainerSnapshot(id="agent", image="nri-flex")]
        assert await identifier.identify(containers) == CGROUP_ID


def test_read_own_container_id_missing(tmp_path):
    """Test a missing cgroup file yields nothing."""
    assert read_own_container_id(tmp_path / "missing") is None
    (tmp_path / "cgroup").write_text("0::/\n")
    assert read_own_container_id(tmp_path / "cgroup") is None

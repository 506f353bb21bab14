"""Container snapshot and inspection models."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


KUBE_CONTAINER_NAME_LABEL = "io.kubernetes.container.name"
KUBE_CONTAINER_PORTS_LABEL = "annotation.io.kubernetes.container.ports"


class PortMapping(BaseModel):
    """Published port of a container."""
    private_port: Optional[int] = None
    public_port: Optional[int] = None
    ip: Optional[str] = None
    protocol: str = Field(default="tcp")

    class Config:
        """Pydantic config."""
        frozen = True


class ContainerSnapshot(BaseModel):
    """Container as returned by a runtime container listing."""
    id: str = Field(..., description="Full container id")
    names: List[str] = Field(default_factory=list)
    image: str = Field(default="")
    labels: Dict[str, str] = Field(default_factory=dict)
    network_ips: List[str] = Field(default_factory=list)
    ports: List[PortMapping] = Field(default_factory=list)

    class Config:
        """Pydantic config."""
        frozen = True

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContainerSnapshot":
        """Build a snapshot from a docker list-containers entry."""
        networks = (data.get("NetworkSettings") or {}).get("Networks") or {}
        return cls(
            id=data["Id"],
            names=list(data.get("Names") or []),
            image=data.get("Image") or "",
            labels=dict(data.get("Labels") or {}),
            network_ips=[
                net.get("IPAddress")
                for net in networks.values()
                if net and net.get("IPAddress")
            ],
            ports=[
                PortMapping(
                    private_port=port.get("PrivatePort"),
                    public_port=port.get("PublicPort"),
                    ip=port.get("IP"),
                    protocol=port.get("Type") or "tcp",
                )
                for port in data.get("Ports") or []
            ],
        )

    @property
    def short_id(self) -> str:
        """First 12 characters of the id."""
        return self.id[:12]

    def stripped_names(self) -> List[str]:
        """Container names without the leading slash docker adds."""
        return [name[1:] if name.startswith("/") else name for name in self.names]

    @property
    def kube_container_name(self) -> Optional[str]:
        """Kubernetes container name label, if any."""
        return self.labels.get(KUBE_CONTAINER_NAME_LABEL)


class ContainerInspection(BaseModel):
    """Detailed per-container state from a runtime inspect call."""
    id: str
    pid: int = 0
    env: List[str] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)
    exposed_ports: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContainerInspection":
        """Build an inspection from a docker inspect-container response."""
        config = data.get("Config") or {}
        state = data.get("State") or {}
        return cls(
            id=data["Id"],
            pid=state.get("Pid") or 0,
            env=list(config.get("Env") or []),
            labels=dict(config.get("Labels") or {}),
            exposed_ports=list((config.get("ExposedPorts") or {}).keys()),
        )

"""Discovery directive model."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class TargetType(Enum):
    """What a directive compares its target against."""
    CONTAINER_NAME = "cname"
    IMAGE = "img"


class IPMode(Enum):
    """Which address family of a container to use."""
    PRIVATE = "private"
    PUBLIC = "public"


class Directive(BaseModel):
    """A discovery advertisement decoded from one annotation entry.

    ``key`` is the annotation key the directive came from and ``source`` the
    id of the container that carried it. Together they identify the
    directive within a discovery pass.
    """
    key: str
    source: str = ""
    target: str
    config_name: str
    reverse: bool = False
    target_type: TargetType = TargetType.IMAGE
    target_mode: str = Field(default="contains")
    ip_mode: Optional[IPMode] = None
    port: Optional[str] = None

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def claim_key(self) -> str:
        """Identity of this directive in a claim set."""
        return f"{self.source}/{self.key}"

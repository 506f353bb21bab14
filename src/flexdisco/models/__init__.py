"""Pydantic models for configuration and discovery."""

from flexdisco.models.config import FlexConfig, AgentConfig, DiscoveryConfig
from flexdisco.models.container import ContainerSnapshot, ContainerInspection, PortMapping
from flexdisco.models.directive import Directive, TargetType, IPMode
from flexdisco.models.template import TemplateDocument, ProbeConfig

__all__ = [
    "FlexConfig",
    "AgentConfig",
    "DiscoveryConfig",
    "ContainerSnapshot",
    "ContainerInspection",
    "PortMapping",
    "Directive",
    "TargetType",
    "IPMode",
    "TemplateDocument",
    "ProbeConfig",
]

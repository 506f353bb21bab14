"""Configuration models."""

from typing import List, Optional
from pydantic import BaseModel, Field, validator


IP_MODES = ("private", "public")


class AgentConfig(BaseModel):
    """Agent configuration."""
    log_level: str = Field(default="INFO")
    templates_dir: str = Field(default="./flexConfigs")

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class DiscoveryConfig(BaseModel):
    """Container discovery settings."""
    integration_name: str = Field(default="nri-flex")
    integration_name_short: str = Field(default="flex")
    marker: str = Field(default="flexDiscovery")
    container_id: Optional[str] = None
    default_ip_mode: str = Field(default="private")
    override_ip_mode: Optional[str] = None
    command_timeout: float = Field(default=10.0, gt=0)
    docker_api_version: Optional[str] = None
    docker_base_url: Optional[str] = None
    host_proc_dir: str = Field(default="/host/proc")
    docker_binaries: List[str] = Field(
        default_factory=lambda: ["docker", "/host/usr/local/bin/docker"]
    )

    @validator("default_ip_mode")
    def validate_default_ip_mode(cls, v):
        """Default mode must be one of the known ip modes."""
        if v.lower() not in IP_MODES:
            raise ValueError(f"Invalid ip mode: {v}")
        return v.lower()

    @validator("override_ip_mode")
    def validate_override_ip_mode(cls, v):
        """Unrecognized overrides are treated as unset."""
        if v is None or v.lower() not in IP_MODES:
            return None
        return v.lower()


class FlexConfig(BaseModel):
    """Main configuration model."""
    agent: AgentConfig = Field(default_factory=AgentConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)

    class Config:
        """Pydantic config."""
        extra = "ignore"

"""Agent entry point for a single discovery pass."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from flexdisco.agent.config import ConfigManager
from flexdisco.discovery.engine import discover
from flexdisco.models.template import ProbeConfig
from flexdisco.utils.logging import setup_logging


logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "FLEXDISCO_CONFIG_DIR"


def resolve_config_dir(config_dir: Optional[Path] = None) -> Path:
    """Explicit directory, then the environment, then ``./configs``."""
    if config_dir:
        return Path(config_dir)
    env_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return Path("./configs")


async def run_discovery(config_dir: Optional[Path] = None) -> List[ProbeConfig]:
    """Load configuration and run one discovery pass."""
    config_manager = ConfigManager(resolve_config_dir(config_dir))
    await config_manager.load()

    config = config_manager.config
    setup_logging(config.agent.log_level)

    return await discover(config.discovery, config_manager.templates)

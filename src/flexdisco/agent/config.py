"""Configuration management for the agent."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from pydantic import ValidationError

from flexdisco.models.config import FlexConfig
from flexdisco.models.template import TemplateDocument


logger = logging.getLogger(__name__)

TEMPLATE_GLOB = "*.yml"


class ConfigError(Exception):
    """Invalid agent configuration."""
    pass


class ConfigManager:
    """Manages configuration and template loading."""

    def __init__(self, config_dir: Path):
        """Initialize configuration manager."""
        self.config_dir = Path(config_dir)
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.config: Optional[FlexConfig] = None
        self.templates: List[TemplateDocument] = []

    async def load(self):
        """Load main configuration and templates."""
        logger.info(f"Loading configuration from {self.config_dir}")

        await self._load_main_config()
        await self.load_templates()

        logger.info(f"Configuration loaded, {len(self.templates)} templates available")

    async def _load_main_config(self):
        """Load main configuration file, defaults when it is absent."""
        config_file = self.config_dir / "config.yaml"
        if not config_file.exists():
            logger.debug(f"Main config not found, using defaults: {config_file}")
            self.config = FlexConfig()
            return

        try:
            data = await self._read_yaml(config_file)
        except YAMLError as e:
            raise ConfigError(f"Unable to parse {config_file}: {e}") from e

        try:
            self.config = FlexConfig(**(data or {}))
            logger.debug(f"Loaded main config: {config_file}")
        except ValidationError as e:
            logger.error(f"Invalid main config: {e}")
            raise ConfigError(f"Invalid main config {config_file}: {e}") from e

    @property
    def templates_dir(self) -> Path:
        """Template directory, relative paths resolved against the config dir."""
        config = self.config or FlexConfig()
        templates_dir = Path(config.agent.templates_dir)
        if templates_dir.is_absolute():
            return templates_dir
        return self.config_dir / templates_dir

    async def load_templates(self) -> List[TemplateDocument]:
        """Load every template document of the templates directory."""
        templates_dir = self.templates_dir
        if not templates_dir.exists():
            logger.warning(f"Templates directory not found: {templates_dir}")
            self.templates = []
            return self.templates

        templates = []
        for template_file in sorted(templates_dir.glob(TEMPLATE_GLOB)):
            try:
                raw_text = await asyncio.to_thread(template_file.read_text)
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Error loading {template_file}: {e}")
                continue
            templates.append(TemplateDocument(file_name=template_file.name, raw_text=raw_text))
            logger.debug(f"Loaded template {template_file.name}")

        self.templates = templates
        return self.templates

    def get_template(self, file_name: str) -> Optional[TemplateDocument]:
        """Get a loaded template by file name."""
        for template in self.templates:
            if template.file_name == file_name:
                return template
        return None

    async def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse YAML file."""
        content = await asyncio.to_thread(file_path.read_text)
        return self.yaml.load(content)

"""Configuration synthesis from named templates."""

import logging
from typing import Callable, List, Optional

from flexdisco.discovery.resolver import Coordinates
from flexdisco.models.container import ContainerSnapshot
from flexdisco.models.directive import Directive
from flexdisco.models.template import ProbeConfig, TemplateDocument
from flexdisco.utils.templates import (
    TemplateParseError,
    parse_template,
    substitute_placeholders,
    unresolved_placeholders,
)


logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".yml"


class ConfigSynthesizer:
    """Builds probe configurations for matched containers."""

    def __init__(
        self,
        templates: List[TemplateDocument],
        parser: Callable[[str], ProbeConfig] = parse_template,
    ):
        """Initialize synthesizer with the loaded template documents."""
        self.templates = templates
        self.parser = parser

    def find_template(self, config_name: str) -> Optional[TemplateDocument]:
        """Template whose file name is ``<config_name>.yml``."""
        file_name = config_name + TEMPLATE_SUFFIX
        for template in self.templates:
            if template.file_name == file_name:
                return template
        return None

    def synthesize(
        self,
        directive: Directive,
        container: ContainerSnapshot,
        coordinates: Coordinates,
    ) -> Optional[ProbeConfig]:
        """Render, parse and decorate the directive's template.

        Returns ``None`` when the template is missing, a placeholder could
        not be filled, or the rendered text does not parse.
        """
        template = self.find_template(directive.config_name)
        if template is None:
            logger.debug(
                f"No template {directive.config_name}{TEMPLATE_SUFFIX} for container {container.id}"
            )
            return None

        logger.debug(f"Container {container.id} matched template {template.file_name}")
        text = substitute_placeholders(template.raw_text, coordinates.ip, coordinates.port)

        missing = unresolved_placeholders(text)
        if missing:
            logger.debug(f"Couldn't build dynamic config for: {container.image} - {container.id}")
            logger.debug(
                f"Missing variable {', '.join(missing)}, unable to create dynamic config "
                f"ip:<{coordinates.ip or ''}>-port:<{coordinates.port or ''}>"
            )
            return None

        try:
            probe = self.parser(text)
        except TemplateParseError as e:
            logger.debug(f"Unable to parse config {template.file_name}: {e}")
            logger.debug(text)
            return None

        attributes = dict(probe.custom_attributes or {})
        attributes.update(container.labels)
        attributes["containerID"] = container.id
        attributes["image"] = container.image
        attributes["IDShort"] = container.short_id
        probe.custom_attributes = attributes
        return probe

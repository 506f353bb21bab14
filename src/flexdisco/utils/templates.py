"""Template parsing utilities."""

import logging
from typing import Any, List, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from flexdisco.models.template import ProbeConfig


logger = logging.getLogger(__name__)

PLACEHOLDER_HOST = "${auto:host}"
PLACEHOLDER_IP = "${auto:ip}"
PLACEHOLDER_PORT = "${auto:port}"
PLACEHOLDERS = (PLACEHOLDER_HOST, PLACEHOLDER_IP, PLACEHOLDER_PORT)


class TemplateParseError(Exception):
    """Template could not be turned into a probe configuration."""
    pass


def _plain(value: Any) -> Any:
    """Convert ruamel containers into plain dicts and lists."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def parse_template(text: str) -> ProbeConfig:
    """Parse YAML template text into a probe configuration."""
    yaml = YAML(typ="safe")
    try:
        data = yaml.load(text)
    except YAMLError as e:
        raise TemplateParseError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise TemplateParseError("Template is not a mapping")

    try:
        return ProbeConfig(**_plain(data))
    except ValidationError as e:
        raise TemplateParseError(f"Invalid probe config: {e}") from e


def substitute_placeholders(text: str, ip: Optional[str] = None, port: Optional[str] = None) -> str:
    """Replace every auto placeholder for which a value is known."""
    if ip:
        text = text.replace(PLACEHOLDER_HOST, ip).replace(PLACEHOLDER_IP, ip)
    if port:
        text = text.replace(PLACEHOLDER_PORT, port)
    return text


def unresolved_placeholders(text: str) -> List[str]:
    """Placeholders still present in the text."""
    return [placeholder for placeholder in PLACEHOLDERS if placeholder in text]

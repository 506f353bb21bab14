"""
flexdisco - Container discovery for monitoring agents.

Finds co-located service containers that advertise themselves through labels
or environment variables and builds ready-to-run probe configurations for
them from named templates.
"""

__version__ = "1.0.0"
__author__ = "Flexdisco Development Team"

# Re-export key components for easier access
from flexdisco.models.config import FlexConfig
from flexdisco.models.directive import Directive
from flexdisco.models.template import ProbeConfig, TemplateDocument

__all__ = [
    "FlexConfig",
    "Directive",
    "ProbeConfig",
    "TemplateDocument",
]

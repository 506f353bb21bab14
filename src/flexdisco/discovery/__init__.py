"""Container discovery and dynamic configuration synthesis."""

from flexdisco.discovery.annotations import merge_annotations, parse_annotation_value, parse_directives
from flexdisco.discovery.engine import DiscoveryEngine, discover
from flexdisco.discovery.matcher import ClaimSet, TargetMatcher
from flexdisco.discovery.resolver import CoordinateResolver, Coordinates
from flexdisco.discovery.synthesizer import ConfigSynthesizer

__all__ = [
    "merge_annotations",
    "parse_annotation_value",
    "parse_directives",
    "DiscoveryEngine",
    "discover",
    "ClaimSet",
    "TargetMatcher",
    "CoordinateResolver",
    "Coordinates",
    "ConfigSynthesizer",
]

"""Annotation merging and discovery directive decoding."""

import logging
from typing import Dict, List, Optional

from flexdisco.models.container import ContainerInspection
from flexdisco.models.directive import Directive, IPMode, TargetType


logger = logging.getLogger(__name__)

DEFAULT_MARKER = "flexDiscovery"
DEFAULT_TARGET_MODE = "contains"

# t = target, c = config, r = reverse, tt = target type, tm = target mode,
# ip = ip mode, p = port
FIELD_TARGET = "t"
FIELD_CONFIG = "c"
FIELD_REVERSE = "r"
FIELD_TARGET_TYPE = "tt"
FIELD_TARGET_MODE = "tm"
FIELD_IP_MODE = "ip"
FIELD_PORT = "p"


def merge_annotations(
    labels: Dict[str, str],
    inspection: Optional[ContainerInspection] = None,
) -> Dict[str, str]:
    """Flatten labels and environment assignments into one map.

    Labels go in first, then the inspected labels and ``KEY=VALUE``
    environment entries, so later entries win on key collision.
    """
    annotations = dict(labels)
    if inspection is None:
        return annotations

    annotations.update(inspection.labels)
    for assignment in inspection.env:
        key, sep, value = assignment.partition("=")
        if sep:
            annotations[key] = value
    return annotations


def _split_pairs(value: str, separator: str, assign: str) -> Dict[str, str]:
    fields = {}
    for segment in value.split(separator):
        parts = segment.split(assign)
        if len(parts) == 2:
            fields[parts[0]] = parts[1]
    return fields


def parse_annotation_value(value: str) -> Dict[str, str]:
    """Decode a directive value into raw field pairs.

    ``t=redis,tt=img`` is preferred whenever the value contains ``=``;
    otherwise ``t_redis.tt_img`` is used for values restricted to label-safe
    characters (kubernetes). Segments without exactly one separator are
    skipped.
    """
    if "=" in value:
        return _split_pairs(value, ",", "=")
    if "." in value:
        return _split_pairs(value, ".", "_")
    return {}


def build_directive(key: str, fields: Dict[str, str], source: str = "") -> Optional[Directive]:
    """Turn raw fields into a typed directive, ``None`` if unusable."""
    target = fields.get(FIELD_TARGET)
    if not target:
        return None

    target_type = TargetType.IMAGE
    if FIELD_TARGET_TYPE in fields:
        try:
            target_type = TargetType(fields[FIELD_TARGET_TYPE])
        except ValueError:
            logger.debug(f"Unknown target type {fields[FIELD_TARGET_TYPE]!r} in {key}, ignoring directive")
            return None

    ip_mode = None
    if fields.get(FIELD_IP_MODE) in {mode.value for mode in IPMode}:
        ip_mode = IPMode(fields[FIELD_IP_MODE])

    return Directive(
        key=key,
        source=source,
        target=target,
        config_name=fields.get(FIELD_CONFIG) or target,
        reverse=fields.get(FIELD_REVERSE, "false").lower() == "true",
        target_type=target_type,
        target_mode=fields.get(FIELD_TARGET_MODE) or DEFAULT_TARGET_MODE,
        ip_mode=ip_mode,
        port=fields.get(FIELD_PORT) or None,
    )


def parse_directives(
    annotations: Dict[str, str],
    marker: str = DEFAULT_MARKER,
    source: str = "",
) -> List[Directive]:
    """Extract every directive from an annotation map, ordered by key."""
    directives = []
    for key in sorted(annotations):
        if marker not in key:
            continue
        directive = build_directive(key, parse_annotation_value(annotations[key]), source)
        if directive is None:
            logger.debug(f"Discarding {key}: no target")
            continue
        logger.debug(f"Parsed directive {key}: target={directive.target} config={directive.config_name}")
        directives.append(directive)
    return directives

"""Value matching helpers."""

import logging
import re


logger = logging.getLogger(__name__)

MATCH_MODES = ("contains", "equal", "prefix", "suffix", "regex")


def kv_finder(mode: str, value: str, target: str) -> bool:
    """Check ``value`` against ``target`` using the named match mode.

    For ``regex`` the target is the pattern and is searched for in the value.
    Unknown modes never match.
    """
    if mode == "contains":
        return target in value
    if mode == "equal":
        return value == target
    if mode == "prefix":
        return value.startswith(target)
    if mode == "suffix":
        return value.endswith(target)
    if mode == "regex":
        try:
            return re.search(target, value) is not None
        except re.error as e:
            logger.debug(f"Invalid match pattern {target!r}: {e}")
            return False

    logger.debug(f"Unknown match mode: {mode}")
    return False

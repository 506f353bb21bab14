"""Logging utilities."""

import logging
import sys
from typing import Optional, TextIO


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None):
    """Configure the root logger.

    Records go to stderr by default because stdout carries the discovered
    configurations.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[logging.StreamHandler(stream or sys.stderr)],
        force=True,
    )

    # Docker SDK and its HTTP stack log every API round trip at debug
    for name in ("asyncio", "docker", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)

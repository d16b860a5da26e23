"""
This module is for I/O.
"""
from __future__ import annotations
import logging
from pathlib import Path
import rtoml

logger = logging.getLogger(__name__)


def load_toml(path) -> dict:
    """Load toml file"""

    path = Path(path)
    if not path.exists():
        logger.debug('Config file not found: %s', path)
        return {}

    with open(path, 'r', encoding='utf-8') as file:
        return rtoml.load(file)

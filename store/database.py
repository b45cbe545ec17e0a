"""
File utilities for the store module.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path


logger = logging.getLogger(__name__)


def read_file(path: str | Path) -> bytes:
    """Return the raw content of the store file."""
    with open(path, "rb") as f:
        return f.read()


def write_file(path: str | Path, data: bytes) -> None:
    """Replace the store file with *data*.

    The content goes to a temporary file in the same directory first and is
    moved over the target with :func:`os.replace`, so readers see either the
    old file or the new one.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug(f"Wrote {len(data)} bytes to {target}")


def initialize_file(path: str | Path, initial_content: Callable[[], bytes]) -> bool:
    """Create the store file if needed.

    Returns:
        True if the file was created, False if it already existed
    """
    target = Path(path)
    if target.exists():
        return False
    write_file(target, initial_content())
    logger.info(f"Created store file {target}")
    return True

"""Unique artifact names.

A name is intended to be identifiable, sortable by time, unique, and
reasonably short:

    [<mode>-]<bin>-<YYYYMMDD>-<first 16 hex digits of sha256(contents)>

The hash is truncated so names stay short; collisions would also need the
same binary name and build date.
"""

from __future__ import annotations

import hashlib
from datetime import date

from aws_build.types import BuildMode, mode_info

HASH_PREFIX_LEN = 16


def content_hash(contents: bytes) -> str:
    """Return the SHA-256 hex digest of the contents."""
    return hashlib.sha256(contents).hexdigest()


def make_unique_name(
    name: str,
    contents: bytes,
    when: date,
    mode: BuildMode | None = None,
) -> str:
    """Create a unique output name for a built executable.

    Args:
        name: Binary target name.
        contents: Full executable contents.
        when: Build date (UTC).
        mode: Build mode; its token is prefixed when given.

    Returns:
        The unique name, without any file extension.
    """
    digest = content_hash(contents)[:HASH_PREFIX_LEN]
    unique = f"{name}-{when:%Y%m%d}-{digest}"
    if mode is not None:
        unique = f"{mode_info(mode).name}-{unique}"
    return unique


def zip_name(base: str) -> str:
    return f"{base}.zip"


__all__ = ["HASH_PREFIX_LEN", "content_hash", "make_unique_name", "zip_name"]

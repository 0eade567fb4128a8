"""
Filename Sanitizer

Turns untrusted names (note titles, slugs, upload filenames) into safe
single path segments. Every name coming from a client passes through
``sanitize_filename`` before it is joined onto a directory.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Final

from notevault.core.errors import InvalidName

TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d_%H%M%S"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(name: str) -> str:
    """
    Reduce ``name`` to a safe path segment.

    Steps:
        1. Keep only the final path segment (``/`` and ``\\`` both separate).
        2. Replace spaces with hyphens.
        3. Drop every character outside ``[A-Za-z0-9._-]``.

    Raises:
        InvalidName: If nothing survives sanitization.
    """
    segment = re.split(r"[/\\]", name)[-1]
    segment = segment.replace(" ", "-")
    segment = _UNSAFE_CHARS.sub("", segment)

    # "." and ".." are not files
    if not segment.strip("."):
        raise InvalidName(f"Invalid name: '{name}'")
    return segment


def file_extension(name: str) -> str:
    """Lower-cased suffix after the last dot, or an empty string."""
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return ""
    return ext.lower()


def strip_extension(name: str) -> str:
    """Filename without its final extension."""
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name


def timestamped_name(name: str, now: datetime | None = None) -> str:
    """Prefix ``name`` with a sortable ``YYYY-MM-DD_HHMMSS`` timestamp."""
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{stamp}_{name}"


def numbered_name(name: str, n: int) -> str:
    """``report.md`` -> ``report-2.md`` for collision fallbacks."""
    if n < 2:
        return name
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return f"{name}-{n}"
    return f"{stem}-{n}.{ext}"

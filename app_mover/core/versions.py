"""Version comparison for CFBundleVersion strings."""

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)

MIN_COMPONENTS = 3


def normalize_version(version: str) -> Optional[tuple[int, ...]]:
    """Parse ``version`` and pad it with zeros to at least three components.

    "1.0" and "1.0.0" must normalise to the same tuple, otherwise a
    numeric comparison reports 1.0 > 1.0.0. Returns None when a component
    is not a non-negative integer.
    """
    parts = version.strip().split(".")
    numbers: list[int] = []
    for part in parts:
        if not (part.isascii() and part.isdigit()):
            return None
        numbers.append(int(part))
    while len(numbers) < MIN_COMPONENTS:
        numbers.append(0)
    return tuple(numbers)


def compare_versions(left: str, right: str) -> Optional[int]:
    """Return -1, 0 or 1 as ``left`` is older, equal or newer than ``right``.

    None means the comparison is unavailable (a malformed component).
    """
    lhs = normalize_version(left)
    rhs = normalize_version(right)
    if lhs is None or rhs is None:
        logger.warning("Cannot compare versions %r and %r", left, right)
        return None
    width = max(len(lhs), len(rhs))
    lhs = lhs + (0,) * (width - len(lhs))
    rhs = rhs + (0,) * (width - len(rhs))
    if lhs < rhs:
        return -1
    if lhs > rhs:
        return 1
    return 0


def is_newer(candidate: str, reference: str) -> bool:
    """True only when ``candidate`` is strictly newer than ``reference``."""
    return compare_versions(candidate, reference) == 1

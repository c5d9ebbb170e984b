"""Conflict detection against the install destination."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from app_mover.core.bundle import Bundle
from app_mover.core.models import normalized_path
from app_mover.core.versions import compare_versions

logger = logging.getLogger(__name__)


def is_application_running(
    destination: Path,
    running_bundles: Iterable[str],
) -> bool:
    """True if a running process belongs to the bundle at ``destination``."""
    wanted = normalized_path(destination)
    return any(normalized_path(path) == wanted for path in running_bundles)


def is_newer_application_installed(destination: Path, current: Bundle) -> bool:
    """True if ``destination`` holds a strictly newer CFBundleVersion.

    Unreadable metadata on either side counts as "not newer" so the move
    can go ahead.
    """
    if not os.path.exists(destination):
        return False

    installed_version = Bundle(destination).version
    if installed_version is None:
        logger.warning(
            "Failed to retrieve CFBundleVersion from app at %s", destination
        )
        return False

    current_version = current.version
    if current_version is None:
        logger.warning("Failed to retrieve CFBundleVersion from current app")
        return False

    ordering: Optional[int] = compare_versions(installed_version, current_version)
    if ordering is None:
        return False
    logger.debug(
        "Installed version %s vs current %s -> %d",
        installed_version, current_version, ordering,
    )
    return ordering > 0

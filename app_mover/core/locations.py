"""Applications folder discovery — classification and target resolution."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

APPLICATIONS_DIRNAME = "Applications"
SYSTEM_APPLICATIONS_DIR = Path("/System/Applications")


def application_directories(home: Optional[Path] = None) -> list[Path]:
    """Applications directories of every domain: user, local, network, system.

    The order is fixed; it decides ties in
    :func:`preferred_applications_directory`.
    """
    home = home or Path.home()
    return [
        home / APPLICATIONS_DIRNAME,
        Path("/") / APPLICATIONS_DIRNAME,
        Path("/Network") / APPLICATIONS_DIRNAME,
        SYSTEM_APPLICATIONS_DIR,
    ]


def is_inside_applications_folder(
    path: str | Path,
    application_dirs: Optional[Iterable[Path]] = None,
) -> bool:
    """True if ``path`` lies in an Applications folder.

    Two independent checks: the path is below a known Applications
    directory, or one of its components is literally ``Applications``
    (catches mirrored roots such as ``/Volumes/X/Applications``).
    """
    absolute = Path(os.path.abspath(os.fspath(path)))
    dirs = application_dirs if application_dirs is not None else application_directories()
    for directory in dirs:
        if absolute == directory or directory in absolute.parents:
            return True

    if APPLICATIONS_DIRNAME in absolute.parts:
        return True

    return False


def count_directory_entries(path: Path) -> int:
    try:
        return len(os.listdir(path))
    except OSError:
        return 0


def preferred_applications_directory(
    candidates: Optional[Iterable[Path]] = None,
) -> Optional[Path]:
    """Pick the Applications directory holding the most entries.

    Candidates are resolved through symlinks, must be existing
    directories and may not be ``/System/Applications``. The sort is
    stable and the last element wins, so among equal counts the
    candidate enumerated last is chosen. Returns None if nothing is left.
    """
    if candidates is None:
        candidates = application_directories()

    usable: list[Path] = []
    for candidate in candidates:
        resolved = Path(os.path.realpath(candidate))
        if not resolved.is_dir():
            continue
        if resolved == SYSTEM_APPLICATIONS_DIR:
            continue
        usable.append(resolved)

    if not usable:
        logger.warning("No usable Applications directory found")
        return None

    ranked = sorted(usable, key=count_directory_entries)
    logger.debug("Applications directory candidates: %s", ranked)
    return ranked[-1]

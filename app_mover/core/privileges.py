"""Privilege assessment — does writing a path need administrator rights."""

from __future__ import annotations

import os
from pathlib import Path

from app_mover.core.models import InstallTarget


def needs_auth_to_write(path: Path) -> bool:
    """True if something exists at ``path`` and this process cannot write it."""
    return os.path.exists(path) and not os.access(path, os.W_OK)


def needs_auth(target: InstallTarget) -> bool:
    """Elevation is needed if the destination or its parent is unwritable."""
    return needs_auth_to_write(target.destination) or needs_auth_to_write(
        target.applications_dir
    )

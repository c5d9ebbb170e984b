"""Workspace — the macOS services the move flow talks to."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import psutil

from app_mover.core.bundle import find_enclosing_bundle
from app_mover.core.models import normalized_path

logger = logging.getLogger(__name__)

OPEN = "/usr/bin/open"

# NSApplicationActivateIgnoringOtherApps
_ACTIVATE_IGNORING_OTHER_APPS = 1 << 1


class Workspace:
    """Opens, trashes and inspects applications."""

    def open_application(self, path: Path) -> bool:
        """Ask Launch Services to open ``path``. Returns False on failure."""
        try:
            result = subprocess.run(
                [OPEN, str(path)],
                capture_output=True, text=True,
            )
        except OSError as e:
            logger.error("Cannot open %s: %s", path, e)
            return False
        if result.returncode != 0:
            logger.error("Opening %s failed: %s", path, result.stderr.strip())
            return False
        return True

    def running_bundle_paths(self) -> set[str]:
        """Normalised bundle paths of every running process we can inspect."""
        paths: set[str] = set()
        for proc in psutil.process_iter(["exe"], ad_value=None):
            exe = proc.info.get("exe")
            if not exe:
                continue
            bundle = find_enclosing_bundle(exe)
            if bundle is not None:
                paths.add(normalized_path(bundle))
        return paths

    def trash_item(self, path: Path) -> None:
        """Move ``path`` to the Trash. Raises OSError on failure."""
        from Foundation import NSURL, NSFileManager

        url = NSURL.fileURLWithPath_(str(path))
        ok, _resulting_url, error = (
            NSFileManager.defaultManager()
            .trashItemAtURL_resultingItemURL_error_(url, None, None)
        )
        if not ok:
            reason = error.localizedDescription() if error is not None else "unknown error"
            raise OSError(f"Cannot move {path} to the Trash: {reason}")
        logger.info("Moved %s to the Trash", path)

    def activate_current_app(self) -> None:
        """Bring this process to the front, ahead of the Gatekeeper dialog."""
        try:
            from AppKit import NSRunningApplication

            NSRunningApplication.currentApplication().activateWithOptions_(
                _ACTIVATE_IGNORING_OTHER_APPS
            )
        except Exception:
            logger.debug("Could not activate current application", exc_info=True)

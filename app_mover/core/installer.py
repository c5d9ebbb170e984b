"""Installer — copies the bundle into place, directly or as administrator."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Optional

from app_mover.core.errors import InstallError
from app_mover.core.models import InstallResult
from app_mover.core.osascript import escape_string, run_applescript
from app_mover.core.workspace import Workspace

logger = logging.getLogger(__name__)

DITTO = "/usr/bin/ditto"
XATTR = "/usr/bin/xattr"
QUARANTINE_ATTRIBUTE = "com.apple.quarantine"


def build_privileged_script(source: Path, destination: Path) -> str:
    """AppleScript that replaces ``destination`` with ``source`` as root.

    The three commands are chained with ``&&`` so a failed delete never
    runs the copy. This runs with administrator privileges: both paths
    are shell-quoted and then escaped for the AppleScript literal.
    """
    src = shlex.quote(os.path.abspath(source))
    dest = shlex.quote(os.path.abspath(destination))
    commands = [
        f"/bin/rm -rf -- {dest}",
        f"/bin/cp -pR -- {src} {dest}",
        f"{XATTR} -d -r {QUARANTINE_ATTRIBUTE} {dest}",
    ]
    shell = " && ".join(commands)
    return f'do shell script "{escape_string(shell)}" with administrator privileges'


class Installer:
    """Performs the trash/copy/unquarantine sequence."""

    def __init__(self, workspace: Optional[Workspace] = None):
        self.workspace = workspace or Workspace()

    def install(self, source: Path, destination: Path) -> None:
        """Install without elevation. Raises InstallError on any failure.

        If the copy fails after an existing destination was trashed, the
        old copy stays in the Trash; it is not restored.
        """
        if os.path.lexists(destination):
            try:
                self.workspace.trash_item(destination)
            except OSError as e:
                raise InstallError(
                    f"Could not move existing {destination} to the Trash: {e}",
                    step="trash", path=str(destination),
                ) from e

        self._copy(source, destination)
        self.unquarantine(destination)
        logger.info("Installed %s to %s", source, destination)

    def authenticated_install(self, source: Path, destination: Path) -> InstallResult:
        """Install through the administrator authorization prompt."""
        script = build_privileged_script(source, destination)
        logger.info("Requesting administrator privileges to install %s", destination)
        result, _ = run_applescript(script)
        return result

    def unquarantine(self, path: Path) -> None:
        """Recursively drop the quarantine attribute below ``path``.

        A bundle without the attribute makes xattr exit non-zero; only a
        failure to run the tool is an error.
        """
        try:
            result = subprocess.run(
                [XATTR, "-d", "-r", QUARANTINE_ATTRIBUTE, str(path)],
                capture_output=True, text=True,
            )
        except OSError as e:
            raise InstallError(
                f"Could not clear quarantine on {path}: {e}",
                step="unquarantine", path=str(path),
            ) from e
        if result.returncode != 0:
            logger.debug("xattr exited %d: %s", result.returncode, result.stderr.strip())

    def _copy(self, source: Path, destination: Path) -> None:
        try:
            subprocess.run(
                [DITTO, str(source), str(destination)],
                check=True, capture_output=True, text=True,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip()
            raise InstallError(
                f"Copying {source} to {destination} failed: {detail}",
                step="copy", path=str(destination),
            ) from e
        except OSError as e:
            raise InstallError(
                f"Copying {source} to {destination} failed: {e}",
                step="copy", path=str(destination),
            ) from e

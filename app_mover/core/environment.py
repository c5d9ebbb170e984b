"""Host detection — OS, process, running bundle, build flavour."""

from __future__ import annotations

import os
import platform
import sys

from app_mover.core.bundle import current_bundle
from app_mover.core.models import OS, HostEnvironment

DEBUG_BUILD_ENV = "APP_MOVER_DEBUG_BUILD"


class EnvironmentDetector:
    """Detects what the move flow needs to know about this process."""

    @staticmethod
    def detect_current() -> HostEnvironment:
        frozen = is_frozen()
        return HostEnvironment(
            os=_detect_os(),
            os_version=_detect_os_version(),
            pid=os.getpid(),
            bundle=current_bundle(),
            frozen=frozen,
            development_build=is_development_build(frozen),
        )


def is_frozen() -> bool:
    """True when running from a py2app or PyInstaller bundle."""
    return bool(getattr(sys, "frozen", False))


def is_development_build(frozen: bool | None = None) -> bool:
    """A build counts as development unless it is frozen.

    ``APP_MOVER_DEBUG_BUILD`` overrides: "1" forces development, "0"
    forces release.
    """
    override = os.environ.get(DEBUG_BUILD_ENV, "").strip().lower()
    if override in ("1", "true", "yes"):
        return True
    if override in ("0", "false", "no"):
        return False
    if frozen is None:
        frozen = is_frozen()
    return not frozen


def _detect_os() -> OS:
    system = platform.system().lower()
    if system == "linux":
        return OS.LINUX
    elif system == "darwin":
        return OS.MACOS
    elif system == "windows":
        return OS.WINDOWS
    return OS.LINUX


def _detect_os_version() -> str:
    if platform.system() == "Darwin":
        release = platform.mac_ver()[0]
        if release:
            return f"macOS {release}"
    return platform.platform()

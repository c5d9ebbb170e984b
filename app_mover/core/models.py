"""Core data models for app-mover."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from app_mover.core.bundle import Bundle


APPLE_SCRIPT_USER_CANCELLED = -128


class OS(Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"


class NameStrategy(Enum):
    BUNDLE_NAME = "bundle"
    CURRENT = "current"
    CUSTOM = "custom"


@dataclass(frozen=True)
class InstalledName:
    """Name the bundle takes once copied, without the ``.app`` suffix."""

    strategy: NameStrategy = NameStrategy.BUNDLE_NAME
    custom: Optional[str] = None

    @classmethod
    def bundle_name(cls) -> InstalledName:
        return cls(NameStrategy.BUNDLE_NAME)

    @classmethod
    def current(cls) -> InstalledName:
        return cls(NameStrategy.CURRENT)

    @classmethod
    def named(cls, name: str) -> InstalledName:
        if not name:
            raise ValueError("A custom installed name must not be empty")
        return cls(NameStrategy.CUSTOM, name)

    def resolve(self, bundle: Bundle) -> str:
        """Return the installed name for ``bundle``.

        CFBundleName is preferred because Archive Utility may append
        suffixes such as ``MyApp-1.app`` to the on-disk name.
        """
        if self.strategy == NameStrategy.CUSTOM and self.custom:
            return self.custom
        if self.strategy == NameStrategy.BUNDLE_NAME:
            display_name = bundle.display_name
            if display_name:
                return display_name
        return bundle.file_name


@dataclass(frozen=True)
class InstallTarget:
    applications_dir: Path
    name: str

    @property
    def destination(self) -> Path:
        return self.applications_dir / f"{self.name}.app"


class InstallOutcome(Enum):
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallResult:
    outcome: InstallOutcome
    code: int = 0
    message: str = ""

    @classmethod
    def success(cls) -> InstallResult:
        return cls(InstallOutcome.SUCCESS)

    @classmethod
    def cancelled(cls) -> InstallResult:
        return cls(InstallOutcome.CANCELLED, APPLE_SCRIPT_USER_CANCELLED)

    @classmethod
    def failed(cls, code: int, message: str) -> InstallResult:
        return cls(InstallOutcome.FAILED, code, message)


@dataclass(frozen=True)
class RelaunchRequest:
    pid: int
    destination: Path


@dataclass(frozen=True)
class PromptStrings:
    title: str
    body: str
    accept_label: str
    decline_label: str


class MoveOutcome(Enum):
    ALREADY_INSTALLED = "already_installed"
    SKIPPED_DEBUG_BUILD = "skipped_debug_build"
    NO_BUNDLE = "no_bundle"
    DECLINED = "declined"
    SWITCHED_TO_RUNNING = "switched_to_running"
    SWITCHED_TO_NEWER = "switched_to_newer"
    MOVED = "moved"
    FAILED = "failed"


@dataclass
class HostEnvironment:
    os: OS
    os_version: str
    pid: int
    bundle: Optional[Bundle]
    frozen: bool
    development_build: bool


def normalized_path(path: os.PathLike | str) -> str:
    """Absolute, normalised form of ``path`` without a trailing slash."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))

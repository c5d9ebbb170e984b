"""Failures surfaced to callers of the move flow."""

from __future__ import annotations


class AppMoverError(Exception):
    """Base class for every error raised while moving the app."""


class ApplicationsDirectoryNotFound(AppMoverError):
    """No usable Applications directory exists on this machine."""

    def __init__(self, message: str = "Applications directory could not be located"):
        super().__init__(message)


class InstallError(AppMoverError):
    """A step of the direct install failed.

    Attributes:
        step: The failing step: trash, copy, unquarantine or verify
        path: The path the step operated on
    """

    def __init__(self, message: str, step: str = "", path: str = ""):
        super().__init__(message)
        self.step = step
        self.path = path


class AuthenticatedInstallError(AppMoverError):
    """The install run with administrator privileges failed.

    Attributes:
        code: AppleScript error number (0 when unknown)
        message: AppleScript error message
    """

    def __init__(self, code: int, message: str):
        super().__init__(
            f"Authenticated install failed: number={code}, message={message}"
        )
        self.code = code
        self.message = message


class RelaunchError(AppMoverError):
    """The watcher that reopens the moved app could not be spawned."""

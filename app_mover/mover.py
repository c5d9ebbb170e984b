"""Public entry points for moving the running app into Applications."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from app_mover.core.bundle import Bundle, current_bundle
from app_mover.core.environment import EnvironmentDetector, is_development_build
from app_mover.core.errors import AppMoverError
from app_mover.core.locations import is_inside_applications_folder
from app_mover.core.models import InstalledName, MoveOutcome
from app_mover.core.orchestrator import InstallOrchestrator, TerminateHook, hard_exit
from app_mover.core.prompts import ConfirmCallback, StringBuilder, standard_strings
from app_mover.data.store import DataStore

logger = logging.getLogger(__name__)


def is_installed(bundle: Optional[Bundle] = None) -> bool:
    """Whether the bundle (default: the running one) is in an Applications folder."""
    bundle = bundle or current_bundle()
    if bundle is None:
        return False
    return is_inside_applications_folder(bundle.path)


def move_app(
    installed_name: Optional[InstalledName] = None,
    string_builder: StringBuilder = standard_strings,
    replace_newer_versions: bool = False,
    skip_debug_builds: bool = True,
    confirm: Optional[ConfirmCallback] = None,
    bundle: Optional[Bundle] = None,
    pid: Optional[int] = None,
    store: Optional[DataStore] = None,
    terminate: TerminateHook = hard_exit,
) -> MoveOutcome:
    """Move the running app bundle into Applications, asking the user first.

    Args:
        installed_name: Name the bundle takes when copied. Defaults to
            CFBundleName, which avoids propagating suffixes such as
            "MyApp-1" added by Archive Utility.
        string_builder: Builds the prompt strings, given whether
            administrator authentication is needed.
        replace_newer_versions: If False and a newer CFBundleVersion is
            already installed, that copy is opened and this process exits.
        skip_debug_builds: Do nothing when running a development build.
        confirm: Shows the prompt and returns the user's decision.
            Defaults to a native AppleScript dialog.
        bundle: Bundle to move. Defaults to the running one.
        pid: Process whose exit triggers the relaunch. Defaults to this one.
        store: Optional store recording the attempt.
        terminate: Ends the process on the exit paths.

    Blocks until the move is complete. On success, or when switching to
    an already running or newer copy, the process is terminated and this
    function never returns. Errors are raised as ``AppMoverError``.
    """
    if skip_debug_builds and is_development_build():
        logger.info("AppMover: skipping move for debug build")
        return MoveOutcome.SKIPPED_DEBUG_BUILD

    environment = EnvironmentDetector.detect_current()
    bundle = bundle or environment.bundle
    if bundle is None:
        logger.info("Not running from an app bundle; nothing to move")
        return MoveOutcome.NO_BUNDLE

    orchestrator = InstallOrchestrator(
        bundle=bundle,
        installed_name=installed_name,
        string_builder=string_builder,
        confirm=confirm,
        replace_newer_versions=replace_newer_versions,
        pid=pid,
        store=store,
        terminate=terminate,
        os_version=environment.os_version,
    )
    return orchestrator.run()


def move_if_necessary() -> None:
    """Non-raising variant of :func:`move_app` that logs failures."""
    try:
        move_app(
            installed_name=InstalledName.current(),
            replace_newer_versions=False,
            skip_debug_builds=True,
        )
    except AppMoverError as e:
        logger.error("Moving app: %s", e)


def bundle_at(path: str | Path) -> Bundle:
    """Bundle for ``path``, made absolute."""
    return Bundle(Path(path).expanduser().resolve())

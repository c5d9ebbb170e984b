"""Install orchestrator — the move-or-abort state machine."""

from __future__ import annotations

import logging
import os
import sqlite3
import sys
import uuid
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, NoReturn, Optional

from app_mover.core.bundle import Bundle
from app_mover.core.conflicts import (
    is_application_running,
    is_newer_application_installed,
)
from app_mover.core.errors import (
    AppMoverError,
    ApplicationsDirectoryNotFound,
    AuthenticatedInstallError,
    InstallError,
    RelaunchError,
)
from app_mover.core.installer import Installer
from app_mover.core.locations import (
    is_inside_applications_folder,
    preferred_applications_directory,
)
from app_mover.core.models import (
    InstalledName,
    InstallOutcome,
    InstallTarget,
    MoveOutcome,
)
from app_mover.core.privileges import needs_auth
from app_mover.core.prompts import (
    ConfirmCallback,
    StringBuilder,
    applescript_confirm,
    standard_strings,
)
from app_mover.core.relaunch import launch_after_exit
from app_mover.core.workspace import Workspace
from app_mover.data.store import DataStore

logger = logging.getLogger(__name__)

TerminateHook = Callable[[int], NoReturn]


def hard_exit(code: int = 0) -> NoReturn:
    """End the process immediately; never returns to the caller."""
    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(code)


class State(Enum):
    CHECK_ALREADY_INSTALLED = "check_already_installed"
    RESOLVE_TARGET = "resolve_target"
    DETECT_RUNNING_CONFLICT = "detect_running_conflict"
    DETECT_VERSION_CONFLICT = "detect_version_conflict"
    DETERMINE_AUTH_NEED = "determine_auth_need"
    AWAIT_CONFIRMATION = "await_confirmation"
    INSTALL = "install"
    CLEANUP_ORIGINAL = "cleanup_original"
    SCHEDULE_RELAUNCH = "schedule_relaunch"
    SWITCH_AND_EXIT = "switch_and_exit"
    TERMINATE = "terminate"
    DONE = "done"


class InstallOrchestrator:
    """Runs the move flow for one bundle.

    check installed → resolve target → running conflict → version
    conflict → auth need → confirmation → install → trash original →
    schedule relaunch → terminate.

    Declining the administrator prompt goes back to the confirmation
    with a freshly resolved target. ``run()`` returns only when nothing
    had to be done or the user declined; moving or switching to another
    copy ends the process through ``terminate``.
    """

    def __init__(
        self,
        bundle: Bundle,
        installed_name: Optional[InstalledName] = None,
        string_builder: StringBuilder = standard_strings,
        confirm: Optional[ConfirmCallback] = None,
        replace_newer_versions: bool = False,
        pid: Optional[int] = None,
        workspace: Optional[Workspace] = None,
        installer: Optional[Installer] = None,
        store: Optional[DataStore] = None,
        terminate: TerminateHook = hard_exit,
        application_dirs: Optional[Iterable[Path]] = None,
        os_version: str = "",
    ):
        self.bundle = bundle
        self.installed_name = installed_name or InstalledName.bundle_name()
        self.string_builder = string_builder
        self.confirm = confirm or applescript_confirm
        self.replace_newer_versions = replace_newer_versions
        self.pid = pid if pid is not None else os.getpid()
        self.workspace = workspace or Workspace()
        self.installer = installer or Installer(self.workspace)
        self.store = store
        self.terminate = terminate
        self.application_dirs = (
            list(application_dirs) if application_dirs is not None else None
        )
        self.os_version = os_version

        self.relocation_id = str(uuid.uuid4())
        self.attempt = 0
        self.target: Optional[InstallTarget] = None
        self.needs_auth = False
        self.outcome: Optional[MoveOutcome] = None
        self.history: list[State] = []

    def run(self) -> MoveOutcome:
        """Drive the state machine until it finishes or the process exits."""
        self._record_start()
        state = State.CHECK_ALREADY_INSTALLED
        try:
            while state != State.DONE:
                self.history.append(state)
                handler = getattr(self, f"_on_{state.value}")
                state = handler()
        except AppMoverError as e:
            self.outcome = MoveOutcome.FAILED
            self._record_finish(error_message=str(e))
            raise
        if self.outcome is None:
            raise AppMoverError("Move flow finished without an outcome")
        return self.outcome

    # ── States ───────────────────────────────────────────────────────

    def _on_check_already_installed(self) -> State:
        if is_inside_applications_folder(self.bundle.path, self.application_dirs):
            logger.info("%s is already in an Applications folder", self.bundle.path)
            return self._finish(MoveOutcome.ALREADY_INSTALLED)
        return State.RESOLVE_TARGET

    def _on_resolve_target(self) -> State:
        self.attempt += 1
        applications_dir = preferred_applications_directory(self.application_dirs)
        if applications_dir is None:
            raise ApplicationsDirectoryNotFound()
        self.target = InstallTarget(
            applications_dir=applications_dir,
            name=self.installed_name.resolve(self.bundle),
        )
        logger.debug(
            "Attempt %d: install destination %s", self.attempt, self.target.destination
        )
        return State.DETECT_RUNNING_CONFLICT

    def _on_detect_running_conflict(self) -> State:
        destination = self._destination()
        if is_application_running(destination, self.workspace.running_bundle_paths()):
            logger.info(
                "App already running at %s. Switching to app then killing this process.",
                destination,
            )
            self.outcome = MoveOutcome.SWITCHED_TO_RUNNING
            return State.SWITCH_AND_EXIT
        return State.DETECT_VERSION_CONFLICT

    def _on_detect_version_conflict(self) -> State:
        destination = self._destination()
        if not self.replace_newer_versions and is_newer_application_installed(
            destination, self.bundle
        ):
            logger.info(
                "Newer app version installed at %s. Switching to app then killing this process.",
                destination,
            )
            self.outcome = MoveOutcome.SWITCHED_TO_NEWER
            return State.SWITCH_AND_EXIT
        return State.DETERMINE_AUTH_NEED

    def _on_determine_auth_need(self) -> State:
        self.needs_auth = needs_auth(self._target())
        return State.AWAIT_CONFIRMATION

    def _on_await_confirmation(self) -> State:
        self.workspace.activate_current_app()
        strings = self.string_builder(self.needs_auth)
        if not self.confirm(strings):
            logger.info("User declined moving %s", self.bundle.path)
            return self._finish(MoveOutcome.DECLINED)
        return State.INSTALL

    def _on_install(self) -> State:
        destination = self._destination()
        if not self.needs_auth:
            self.installer.install(self.bundle.path, destination)
        else:
            result = self.installer.authenticated_install(self.bundle.path, destination)
            if result.outcome == InstallOutcome.CANCELLED:
                # A misclick on the auth dialog returns to the first prompt.
                logger.info("Administrator authentication cancelled; asking again")
                return State.RESOLVE_TARGET
            if result.outcome == InstallOutcome.FAILED:
                raise AuthenticatedInstallError(result.code, result.message)

        if not os.path.exists(destination):
            raise InstallError(
                f"{destination} does not exist after install",
                step="verify", path=str(destination),
            )
        return State.CLEANUP_ORIGINAL

    def _on_cleanup_original(self) -> State:
        try:
            self.workspace.trash_item(self.bundle.path)
        except OSError as e:
            logger.error("Trashing %s failed: %s", self.bundle.path, e)
        return State.SCHEDULE_RELAUNCH

    def _on_schedule_relaunch(self) -> State:
        try:
            launch_after_exit(self._destination(), self.pid)
        except OSError as e:
            raise RelaunchError(f"Could not schedule relaunch: {e}") from e
        self.outcome = MoveOutcome.MOVED
        return State.TERMINATE

    def _on_switch_and_exit(self) -> State:
        self.workspace.open_application(self._destination())
        self._record_finish()
        self.terminate(0)
        return State.DONE

    def _on_terminate(self) -> State:
        self._record_finish()
        self.terminate(0)
        return State.DONE

    # ── Helpers ──────────────────────────────────────────────────────

    def _target(self) -> InstallTarget:
        if self.target is None:
            raise AppMoverError("Install target has not been resolved")
        return self.target

    def _destination(self) -> Path:
        return self._target().destination

    def _finish(self, outcome: MoveOutcome) -> State:
        self.outcome = outcome
        self._record_finish()
        return State.DONE

    def _record_start(self) -> None:
        if self.store is None:
            return
        try:
            self.store.create_relocation(
                self.relocation_id,
                source=str(self.bundle.path),
                version=self.bundle.version,
                os_version=self.os_version,
            )
        except sqlite3.Error as e:
            logger.warning("Could not record relocation: %s", e)

    def _record_finish(self, error_message: Optional[str] = None) -> None:
        if self.store is None or self.outcome is None:
            return
        try:
            self.store.complete_relocation(
                self.relocation_id,
                outcome=self.outcome.value,
                destination=str(self.target.destination) if self.target else None,
                needs_auth=self.needs_auth if self.target else None,
                attempts=self.attempt,
                error_message=error_message,
            )
        except sqlite3.Error as e:
            logger.warning("Could not record relocation outcome: %s", e)

"""Tests for app_mover.core.installer — direct and elevated installs."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from app_mover.core.errors import InstallError
from app_mover.core.installer import (
    DITTO,
    QUARANTINE_ATTRIBUTE,
    XATTR,
    Installer,
    build_privileged_script,
)
from app_mover.core.models import InstallOutcome, InstallResult


def _make_installer():
    workspace = MagicMock()
    return Installer(workspace=workspace), workspace


# ---------------------------------------------------------------------------
# Direct install
# ---------------------------------------------------------------------------

class TestDirectInstall:
    @patch("app_mover.core.installer.subprocess.run")
    def test_fresh_install(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        installer, workspace = _make_installer()
        source = tmp_path / "Downloads" / "Foo.app"
        dest = tmp_path / "Apps" / "Foo.app"

        installer.install(source, dest)

        workspace.trash_item.assert_not_called()
        assert mock_run.call_args_list == [
            call([DITTO, str(source), str(dest)],
                 check=True, capture_output=True, text=True),
            call([XATTR, "-d", "-r", QUARANTINE_ATTRIBUTE, str(dest)],
                 capture_output=True, text=True),
        ]

    @patch("app_mover.core.installer.subprocess.run")
    def test_existing_destination_is_trashed_first(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        installer, workspace = _make_installer()
        dest = tmp_path / "Foo.app"
        dest.mkdir()
        order = []
        workspace.trash_item.side_effect = lambda p: order.append("trash")
        mock_run.side_effect = lambda *a, **kw: order.append(a[0][0]) or MagicMock(
            returncode=0, stdout="", stderr=""
        )

        installer.install(tmp_path / "src.app", dest)

        workspace.trash_item.assert_called_once_with(dest)
        assert order == ["trash", DITTO, XATTR]

    @patch("app_mover.core.installer.subprocess.run")
    def test_trash_failure_aborts(self, mock_run, tmp_path):
        installer, workspace = _make_installer()
        dest = tmp_path / "Foo.app"
        dest.mkdir()
        workspace.trash_item.side_effect = OSError("Trash is locked")

        with pytest.raises(InstallError) as exc_info:
            installer.install(tmp_path / "src.app", dest)

        assert exc_info.value.step == "trash"
        mock_run.assert_not_called()

    @patch("app_mover.core.installer.subprocess.run")
    def test_copy_failure_aborts(self, mock_run, tmp_path):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, [DITTO], stderr="ditto: No space left on device\n"
        )
        installer, _ = _make_installer()

        with pytest.raises(InstallError) as exc_info:
            installer.install(tmp_path / "src.app", tmp_path / "Foo.app")

        assert exc_info.value.step == "copy"
        assert "No space left" in str(exc_info.value)
        assert mock_run.call_count == 1

    @patch("app_mover.core.installer.subprocess.run")
    def test_copy_tool_missing(self, mock_run, tmp_path):
        mock_run.side_effect = FileNotFoundError(DITTO)
        installer, _ = _make_installer()
        with pytest.raises(InstallError):
            installer.install(tmp_path / "src.app", tmp_path / "Foo.app")

    @patch("app_mover.core.installer.subprocess.run")
    def test_missing_quarantine_attribute_is_fine(self, mock_run, tmp_path):
        mock_run.side_effect = [
            MagicMock(returncode=0, stdout="", stderr=""),
            MagicMock(returncode=1, stdout="", stderr="No such xattr"),
        ]
        installer, _ = _make_installer()
        installer.install(tmp_path / "src.app", tmp_path / "Foo.app")

    @patch("app_mover.core.installer.subprocess.run")
    def test_unquarantine_tool_missing(self, mock_run, tmp_path):
        mock_run.side_effect = [
            MagicMock(returncode=0, stdout="", stderr=""),
            FileNotFoundError(XATTR),
        ]
        installer, _ = _make_installer()
        with pytest.raises(InstallError) as exc_info:
            installer.install(tmp_path / "src.app", tmp_path / "Foo.app")
        assert exc_info.value.step == "unquarantine"


# ---------------------------------------------------------------------------
# Elevated install
# ---------------------------------------------------------------------------

class TestBuildPrivilegedScript:
    def test_commands_chained_in_order(self):
        script = build_privileged_script(
            Path("/Users/x/Downloads/Foo.app"), Path("/Applications/Foo.app")
        )
        assert script.startswith('do shell script "')
        assert script.endswith('" with administrator privileges')
        rm = script.index("/bin/rm -rf -- /Applications/Foo.app")
        cp = script.index("/bin/cp -pR -- /Users/x/Downloads/Foo.app /Applications/Foo.app")
        xattr = script.index(f"{XATTR} -d -r {QUARANTINE_ATTRIBUTE} /Applications/Foo.app")
        assert rm < cp < xattr
        assert script.count(" && ") == 2

    def test_paths_with_spaces_and_quotes_are_quoted(self):
        script = build_privileged_script(
            Path("/Volumes/My Disk/Foo's.app"), Path('/Applications/Foo "Pro".app')
        )
        assert "'/Volumes/My Disk/Foo'\"'\"'s.app'" in script.replace('\\"', '"')
        # every double quote inside the shell command is escaped
        body = script[len('do shell script "'):-len('" with administrator privileges')]
        assert '"' not in body.replace('\\"', "")


class TestAuthenticatedInstall:
    @patch("app_mover.core.installer.run_applescript")
    def test_success(self, mock_run_applescript):
        mock_run_applescript.return_value = (InstallResult.success(), "")
        installer, _ = _make_installer()
        result = installer.authenticated_install(Path("/tmp/Foo.app"), Path("/Applications/Foo.app"))
        assert result.outcome == InstallOutcome.SUCCESS
        script = mock_run_applescript.call_args[0][0]
        assert "with administrator privileges" in script

    @patch("app_mover.core.installer.run_applescript")
    def test_user_declined_is_cancelled_not_failed(self, mock_run_applescript):
        mock_run_applescript.return_value = (InstallResult.cancelled(), "")
        installer, _ = _make_installer()
        result = installer.authenticated_install(Path("/tmp/Foo.app"), Path("/Applications/Foo.app"))
        assert result.outcome == InstallOutcome.CANCELLED
        assert result.code == -128

    @patch("app_mover.core.installer.run_applescript")
    def test_failure_carries_code_and_message(self, mock_run_applescript):
        mock_run_applescript.return_value = (InstallResult.failed(1, "cp failed"), "")
        installer, _ = _make_installer()
        result = installer.authenticated_install(Path("/tmp/Foo.app"), Path("/Applications/Foo.app"))
        assert result.outcome == InstallOutcome.FAILED
        assert (result.code, result.message) == (1, "cp failed")

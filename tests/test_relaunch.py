"""Tests for app_mover.core.relaunch."""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from app_mover.core.models import RelaunchRequest
from app_mover.core.relaunch import build_watcher_command, launch_after_exit


class TestBuildWatcherCommand:
    def test_polls_pid_then_opens(self):
        cmd = build_watcher_command(RelaunchRequest(4242, Path("/Applications/Foo.app")))
        assert cmd == (
            "(while /bin/kill -0 4242 >/dev/null 2>&1; do /bin/sleep 0.1; done; "
            "/usr/bin/open /Applications/Foo.app) &"
        )

    def test_destination_is_quoted(self):
        cmd = build_watcher_command(
            RelaunchRequest(1, Path("/Applications/My App.app")), interval=0.5
        )
        assert "/usr/bin/open '/Applications/My App.app'" in cmd
        assert "/bin/sleep 0.5" in cmd


class TestLaunchAfterExit:
    @patch("app_mover.core.relaunch.subprocess.Popen")
    def test_spawns_detached_watcher(self, mock_popen):
        request = launch_after_exit(Path("/Applications/Foo.app"), pid=77)

        assert request == RelaunchRequest(77, Path("/Applications/Foo.app"))
        args, kwargs = mock_popen.call_args
        assert args[0][:2] == ["/bin/sh", "-c"]
        assert "kill -0 77" in args[0][2]
        assert kwargs["start_new_session"] is True
        assert kwargs["stdout"] is subprocess.DEVNULL
        mock_popen.return_value.wait.assert_not_called()

    @patch("app_mover.core.relaunch.os.getpid", return_value=999)
    @patch("app_mover.core.relaunch.subprocess.Popen")
    def test_defaults_to_current_pid(self, mock_popen, _getpid):
        request = launch_after_exit(Path("/Applications/Foo.app"))
        assert request.pid == 999
        assert "kill -0 999" in mock_popen.call_args[0][0][2]


@pytest.mark.skipif(
    not (os.path.exists("/bin/kill") and os.path.exists("/bin/sleep")),
    reason="needs a POSIX /bin/kill and /bin/sleep",
)
class TestWatcherProcess:
    """Run the generated watcher with ``open`` swapped for ``touch``."""

    def test_fires_only_after_pid_exits(self, tmp_path):
        marker = tmp_path / "relaunched"
        touch = shutil.which("touch")
        assert touch is not None
        target = subprocess.Popen(["/bin/sleep", "30"])
        try:
            command = build_watcher_command(
                RelaunchRequest(target.pid, marker), interval=0.05
            ).replace("/usr/bin/open", touch)
            subprocess.run(["/bin/sh", "-c", command], check=True, timeout=5)

            time.sleep(0.5)
            assert not marker.exists()
        finally:
            target.terminate()
            # reap it, otherwise the zombie still answers kill -0
            target.wait(timeout=5)

        deadline = time.monotonic() + 5
        while not marker.exists() and time.monotonic() < deadline:
            time.sleep(0.05)
        assert marker.exists()

"""Relaunch scheduling — reopen the moved app once this process is gone."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Optional

from app_mover.core.models import RelaunchRequest

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.1


def build_watcher_command(
    request: RelaunchRequest, interval: float = POLL_INTERVAL_SECONDS
) -> str:
    """Shell snippet that waits for ``request.pid`` to die, then opens the app.

    ``kill -0`` only probes whether the pid can be signalled; it sends
    nothing.
    """
    destination = shlex.quote(os.path.abspath(request.destination))
    return (
        f"(while /bin/kill -0 {int(request.pid)} >/dev/null 2>&1; "
        f"do /bin/sleep {interval}; done; "
        f"/usr/bin/open {destination}) &"
    )


def launch_after_exit(destination: Path, pid: Optional[int] = None) -> RelaunchRequest:
    """Spawn a detached watcher that opens ``destination`` after ``pid`` exits.

    ``pid`` defaults to the current process. The watcher runs in its own
    session and is never waited on.
    """
    request = RelaunchRequest(pid=pid if pid is not None else os.getpid(),
                              destination=destination)
    command = build_watcher_command(request)
    logger.info("Scheduling relaunch of %s after pid %d exits", destination, request.pid)
    subprocess.Popen(
        ["/bin/sh", "-c", command],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        close_fds=True,
        start_new_session=True,
    )
    return request

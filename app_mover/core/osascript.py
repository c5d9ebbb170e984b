"""AppleScript runner — executes scripts through ``/usr/bin/osascript``."""

from __future__ import annotations

import logging
import re
import subprocess

from app_mover.core.models import APPLE_SCRIPT_USER_CANCELLED, InstallResult

logger = logging.getLogger(__name__)

OSASCRIPT = "/usr/bin/osascript"

# e.g. "0:171: execution error: User canceled. (-128)"
_ERROR_RE = re.compile(
    r"(?P<message>.*?)\s*\((?P<code>-?\d+)\)\s*$",
    re.DOTALL,
)


def escape_string(value: str) -> str:
    """Escape ``value`` for use inside an AppleScript string literal."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def parse_error(stderr: str) -> tuple[int, str]:
    """Extract (error number, message) from osascript's stderr.

    The number is 0 when stderr carries none.
    """
    text = stderr.strip()
    if "execution error:" in text:
        text = text.split("execution error:", 1)[1].strip()
    match = _ERROR_RE.match(text)
    if match is None:
        return 0, text
    return int(match.group("code")), match.group("message").strip()


def run_applescript(source: str) -> tuple[InstallResult, str]:
    """Run ``source`` and classify the outcome.

    Returns the three-way result and the script's stdout. Error -128 is
    the user pressing Cancel and maps to ``CANCELLED``. Blocks for as
    long as the script does, including any authentication prompt.
    """
    try:
        result = subprocess.run(
            [OSASCRIPT, "-e", source],
            capture_output=True,
            text=True,
        )
    except OSError as e:
        logger.error("Cannot run %s: %s", OSASCRIPT, e)
        return InstallResult.failed(0, str(e)), ""

    if result.returncode == 0:
        return InstallResult.success(), result.stdout.strip()

    code, message = parse_error(result.stderr)
    if code == APPLE_SCRIPT_USER_CANCELLED:
        return InstallResult.cancelled(), ""
    logger.debug("AppleScript failed: number=%d, message=%s", code, message)
    return InstallResult.failed(code, message), ""

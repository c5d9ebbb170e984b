"""App bundle metadata — Info.plist access and bundle discovery."""

from __future__ import annotations

import logging
import plistlib
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

BUNDLE_SUFFIX = ".app"


@dataclass(frozen=True)
class Bundle:
    """An application bundle on disk.

    Metadata is read from ``Contents/Info.plist`` on every access, so a
    bundle replaced in place reports its new version.
    """

    path: Path

    @property
    def info_plist_path(self) -> Path:
        return self.path / "Contents" / "Info.plist"

    @property
    def file_name(self) -> str:
        name = self.path.name
        if name.endswith(BUNDLE_SUFFIX):
            return name[: -len(BUNDLE_SUFFIX)]
        return name

    def info(self) -> Optional[dict[str, Any]]:
        """Return the parsed Info.plist, or None when it cannot be read."""
        try:
            with open(self.info_plist_path, "rb") as f:
                data = plistlib.load(f)
        except (OSError, plistlib.InvalidFileException, ValueError) as e:
            logger.debug("Cannot read %s: %s", self.info_plist_path, e)
            return None
        if not isinstance(data, dict):
            return None
        return data

    def _string_key(self, key: str) -> Optional[str]:
        info = self.info()
        if info is None:
            return None
        value = info.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    @property
    def version(self) -> Optional[str]:
        """CFBundleVersion, the build number used for comparisons."""
        return self._string_key("CFBundleVersion")

    @property
    def display_name(self) -> Optional[str]:
        return self._string_key("CFBundleName")

    @property
    def short_version(self) -> Optional[str]:
        return self._string_key("CFBundleShortVersionString")


def find_enclosing_bundle(path: str | Path) -> Optional[Path]:
    """Return the innermost ``*.app`` directory containing ``path``."""
    parts = Path(path).parts
    for index in range(len(parts) - 1, -1, -1):
        part = parts[index]
        if part.endswith(BUNDLE_SUFFIX) and len(part) > len(BUNDLE_SUFFIX):
            return Path(*parts[: index + 1])
    return None


def current_bundle() -> Optional[Bundle]:
    """Return the bundle the running interpreter was launched from.

    Frozen apps (py2app, PyInstaller) run from ``Foo.app/Contents/MacOS``.
    Returns None when the process is not running from a bundle.
    """
    executable = Path(sys.executable).resolve()
    bundle_path = find_enclosing_bundle(executable)
    if bundle_path is None:
        return None
    return Bundle(bundle_path)

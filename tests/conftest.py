"""Shared test fixtures for app-mover tests."""

from __future__ import annotations

import plistlib
from pathlib import Path
from typing import Optional

import pytest

from app_mover.core.bundle import Bundle
from app_mover.data.store import DataStore


def write_bundle(
    path: Path,
    version: Optional[str] = "1.0",
    name: Optional[str] = "Foo",
) -> Bundle:
    """Create a minimal app bundle with an Info.plist at ``path``."""
    contents = path / "Contents"
    (contents / "MacOS").mkdir(parents=True, exist_ok=True)
    info: dict[str, str] = {"CFBundleIdentifier": "com.example.foo"}
    if version is not None:
        info["CFBundleVersion"] = version
    if name is not None:
        info["CFBundleName"] = name
    with open(contents / "Info.plist", "wb") as f:
        plistlib.dump(info, f)
    (contents / "MacOS" / "Foo").write_text("#!/bin/sh\n")
    return Bundle(path)


def populate(directory: Path, count: int) -> Path:
    """Create ``directory`` holding ``count`` dummy entries."""
    directory.mkdir(parents=True, exist_ok=True)
    for i in range(count):
        (directory / f"App{i}.app").mkdir()
    return directory


@pytest.fixture
def downloads_bundle(tmp_path) -> Bundle:
    """Foo.app version 1.0 sitting in a Downloads folder."""
    return write_bundle(tmp_path / "Downloads" / "Foo.app", version="1.0")


@pytest.fixture
def applications_dir(tmp_path) -> Path:
    """An existing, writable Applications-like directory with a few apps.

    Named "Apps" so that paths below it are not classified as installed by
    the literal "Applications" component rule.
    """
    return populate(tmp_path / "Apps", 3)


@pytest.fixture
def temp_db(tmp_path):
    """DataStore with a temporary SQLite database."""
    db_path = str(tmp_path / "test.db")
    store = DataStore(db_path=db_path)
    yield store
    store.close()


@pytest.fixture
def make_bundle():
    """Factory fixture: ``make_bundle(path, version=..., name=...)``."""
    return write_bundle


@pytest.fixture
def make_dir():
    """Factory fixture: ``make_dir(path, count)``."""
    return populate

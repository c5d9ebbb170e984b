"""Tests for app_mover.core.privileges — elevation assessment."""

from __future__ import annotations

from unittest.mock import patch

from app_mover.core.models import InstallTarget
from app_mover.core.privileges import needs_auth, needs_auth_to_write


class TestNeedsAuthToWrite:
    def test_missing_path_needs_nothing(self, tmp_path):
        assert needs_auth_to_write(tmp_path / "missing") is False

    def test_writable_path(self, tmp_path):
        assert needs_auth_to_write(tmp_path) is False

    @patch("app_mover.core.privileges.os.access", return_value=False)
    def test_unwritable_existing_path(self, mock_access, tmp_path):
        assert needs_auth_to_write(tmp_path) is True

    @patch("app_mover.core.privileges.os.access", return_value=False)
    def test_unwritable_but_missing(self, mock_access, tmp_path):
        assert needs_auth_to_write(tmp_path / "missing") is False
        mock_access.assert_not_called()


class TestNeedsAuth:
    def test_everything_writable(self, tmp_path):
        target = InstallTarget(tmp_path, "Foo")
        assert needs_auth(target) is False

    def test_parent_unwritable(self, tmp_path):
        target = InstallTarget(tmp_path, "Foo")
        with patch("app_mover.core.privileges.os.access",
                   side_effect=lambda p, mode: p != tmp_path):
            assert needs_auth(target) is True

    def test_existing_destination_unwritable(self, tmp_path):
        target = InstallTarget(tmp_path, "Foo")
        target.destination.mkdir()
        with patch("app_mover.core.privileges.os.access",
                   side_effect=lambda p, mode: p != target.destination):
            assert needs_auth(target) is True

"""
Tests for file service — critical for safe file deletion.
These tests verify files are moved to trash (not permanently deleted) and that
failures are raised in a form the reclamation executor can classify.
"""
import sys
from unittest import mock

import pytest

from keepone.services import file_service
from keepone.services.file_service import FileService


class TestMoveToTrash:

    def test_moves_file_to_trash(self, tmp_path):
        """
        CRITICAL: File must disappear from original location after move_to_trash().
        Trash location is OS-dependent and is not verified.
        """
        test_file = tmp_path / "test.txt"
        test_file.write_text("content to delete")

        FileService.move_to_trash(str(test_file))

        assert not test_file.exists()

    def test_missing_file_raises_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="File not found"):
            FileService.move_to_trash(str(tmp_path / "does_not_exist.txt"))

    def test_handles_files_with_spaces_in_name(self, tmp_path):
        spaced_file = tmp_path / "my photo.jpg"
        spaced_file.write_text("content")
        FileService.move_to_trash(str(spaced_file))
        assert not spaced_file.exists()

    def test_handles_files_with_unicode_in_name(self, tmp_path):
        if sys.platform == "win32":
            pytest.skip("Unicode filename handling may be flaky on Windows")
        unicode_file = tmp_path / "фото.jpg"
        unicode_file.write_text("content")
        FileService.move_to_trash(str(unicode_file))
        assert not unicode_file.exists()

    def test_trash_failure_is_wrapped_with_cause(self, tmp_path):
        test_file = tmp_path / "stuck.txt"
        test_file.write_text("content")
        cause = PermissionError(13, "Permission denied")

        with mock.patch.object(file_service, "send2trash", side_effect=cause):
            with pytest.raises(RuntimeError, match="Failed to move to trash") as exc_info:
                FileService.move_to_trash(str(test_file))

        assert exc_info.value.__cause__ is cause
        assert test_file.exists()


class TestDeletePermanently:

    def test_deletes_file(self, tmp_path):
        test_file = tmp_path / "gone.txt"
        test_file.write_text("bye")
        FileService.delete_permanently(str(test_file))
        assert not test_file.exists()

    def test_missing_file_raises_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileService.delete_permanently(str(tmp_path / "nope.txt"))


class TestExists:

    def test_exists_only_for_files(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        assert FileService.exists(str(f))
        assert not FileService.exists(str(tmp_path))
        assert not FileService.exists(str(tmp_path / "missing"))

"""
Critical tests for space reclamation: kept files are never removed,
per-file failures are reported and never abort the batch.
"""
import os
from pathlib import Path
from unittest import mock

import pytest

from keepone.core.engine import DuplicateScanner
from keepone.core.models import DuplicateFile, DuplicateGroup, ReclaimErrorKind
from keepone.core.reclaimer import ReclamationExecutor, default_eligibility
from keepone.services.duplicate_service import DuplicateService
from keepone.services.file_service import FileService


class FolderTrash:
    """Trash double that moves files into a local folder instead of the OS trash."""

    def __init__(self, folder: Path):
        self.folder = folder
        self.folder.mkdir(exist_ok=True)
        self.trashed = []

    def exists(self, file_path):
        return os.path.isfile(file_path)

    def move_to_trash(self, file_path):
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")
        target = self.folder / f"{len(self.trashed)}_{os.path.basename(file_path)}"
        os.replace(file_path, target)
        self.trashed.append(file_path)

    def delete_permanently(self, file_path):
        os.remove(file_path)


@pytest.fixture
def scanned(test_files, tmp_path):
    """Scan the fixture tree and return (groups, trash double, executor)."""
    groups = DuplicateScanner().scan(str(tmp_path))
    trash = FolderTrash(tmp_path.parent / f"{tmp_path.name}_trash")
    return groups, trash, ReclamationExecutor(trash)


class TestKeptFileSafety:

    def test_default_predicate_removes_only_selected(self, scanned):
        groups, trash, executor = scanned
        DuplicateService.select_all_duplicates(groups)

        result = executor.reclaim(groups)

        assert result.ok
        assert result.deleted_count == 3
        assert result.freed_bytes == 2 * 2048 + 4096
        for group in groups:
            assert os.path.exists(group.kept_file.path)
            for f in group.selected_files:
                assert not os.path.exists(f.path)

    def test_kept_file_survives_even_when_selected(self, scanned):
        """CRITICAL: A kept file must never be removed, even if a caller marks it selected."""
        groups, trash, executor = scanned
        for group in groups:
            for f in group.files:
                f.selected = True

        result = executor.reclaim(groups, lambda f: True)

        kept_paths = [g.kept_file.path for g in groups]
        assert all(os.path.exists(p) for p in kept_paths)
        assert not set(kept_paths) & set(trash.trashed)
        assert result.deleted_count == 3

    def test_nothing_selected_removes_nothing(self, scanned):
        groups, trash, executor = scanned
        result = executor.reclaim(groups)
        assert result.deleted_count == 0
        assert result.freed_bytes == 0
        assert trash.trashed == []

    def test_custom_predicate(self, scanned):
        groups, trash, executor = scanned
        biggest = max(groups, key=lambda g: g.file_size)

        result = executor.reclaim(groups, lambda f: f.size == biggest.file_size)

        assert result.deleted_count == 1
        assert result.freed_bytes == biggest.file_size

    def test_groups_are_not_modified(self, scanned):
        groups, trash, executor = scanned
        DuplicateService.select_all_duplicates(groups)
        before = [[f.path for f in g.files] for g in groups]
        executor.reclaim(groups)
        assert [[f.path for f in g.files] for g in groups] == before


class TestFailures:

    def test_second_reclaim_reports_missing(self, scanned):
        groups, trash, executor = scanned
        DuplicateService.select_all_duplicates(groups)
        executor.reclaim(groups)

        result = executor.reclaim(groups)

        assert result.deleted_count == 0
        assert result.freed_bytes == 0
        assert len(result.errors) == 3
        assert {e.kind for e in result.errors} == {ReclaimErrorKind.MISSING}

    def test_failure_does_not_stop_remaining_files(self):
        files = [DuplicateFile(path=f"/data/{i}.bin", size=100, selected=True) for i in range(3)]
        files.insert(0, DuplicateFile(path="/data/keep.bin", size=100, kept=True))
        group = DuplicateGroup(hash="h", files=files)

        service = mock.Mock()
        service.exists.return_value = True
        denied = PermissionError(13, "Permission denied")
        wrapped = RuntimeError("Failed to move to trash")
        wrapped.__cause__ = OSError(5, "I/O error")
        service.move_to_trash.side_effect = [denied, None, wrapped]

        result = ReclamationExecutor(service).reclaim([group])

        assert result.deleted_count == 1
        assert result.freed_bytes == 100
        assert result.removed_paths == ["/data/1.bin"]
        assert [(e.path, e.kind) for e in result.errors] == [
            ("/data/0.bin", ReclaimErrorKind.PERMISSION_DENIED),
            ("/data/2.bin", ReclaimErrorKind.TRASH_FAILED),
        ]
        assert "/data/keep.bin" not in [c.args[0] for c in service.move_to_trash.call_args_list]

    def test_wrapped_permission_error_is_classified(self):
        group = DuplicateGroup(hash="h", files=[
            DuplicateFile(path="/keep", size=1, kept=True),
            DuplicateFile(path="/locked", size=1, selected=True),
        ])
        service = mock.Mock()
        service.exists.return_value = True
        error = RuntimeError("Failed to move to trash")
        error.__cause__ = PermissionError("read-only volume")
        service.move_to_trash.side_effect = error

        result = ReclamationExecutor(service).reclaim([group])

        assert result.errors[0].kind == ReclaimErrorKind.PERMISSION_DENIED

    def test_file_vanishing_during_trash_is_missing(self):
        group = DuplicateGroup(hash="h", files=[
            DuplicateFile(path="/keep", size=1, kept=True),
            DuplicateFile(path="/racy", size=1, selected=True),
        ])
        service = mock.Mock()
        service.exists.return_value = True
        service.move_to_trash.side_effect = FileNotFoundError("File not found: /racy")

        result = ReclamationExecutor(service).reclaim([group])

        assert result.errors[0].kind == ReclaimErrorKind.MISSING

    def test_group_is_skipped_when_kept_copy_is_gone(self, scanned):
        """CRITICAL: If the kept copy vanished, its duplicates may be the last copies and must stay."""
        groups, trash, executor = scanned
        DuplicateService.select_all_duplicates(groups)
        orphaned, intact = groups[0], groups[1]
        os.remove(orphaned.kept_file.path)

        result = executor.reclaim(groups)

        for file in orphaned.selected_files:
            assert os.path.exists(file.path)
            assert file.path not in trash.trashed
        assert [e.path for e in result.errors] == [f.path for f in orphaned.selected_files]
        assert {e.kind for e in result.errors} == {ReclaimErrorKind.KEPT_MISSING}
        assert result.removed_paths == [f.path for f in intact.selected_files]

    def test_group_without_kept_file_is_skipped(self):
        group = DuplicateGroup(hash="h", files=[
            DuplicateFile(path="/a", size=1, selected=True),
            DuplicateFile(path="/b", size=1, selected=True),
        ])
        service = mock.Mock()
        service.exists.return_value = True

        result = ReclamationExecutor(service).reclaim([group])

        service.move_to_trash.assert_not_called()
        assert [(e.path, e.kind) for e in result.errors] == [
            ("/a", ReclaimErrorKind.KEPT_MISSING),
            ("/b", ReclaimErrorKind.KEPT_MISSING),
        ]


class TestDeletionModes:

    def test_permanent_deletion_bypasses_trash(self, scanned):
        groups, trash, _ = scanned
        DuplicateService.select_all_duplicates(groups)

        result = ReclamationExecutor(trash, use_trash=False).reclaim(groups)

        assert result.deleted_count == 3
        assert trash.trashed == []

    def test_default_service_is_send2trash_backed(self):
        assert isinstance(ReclamationExecutor().file_service, FileService)

    def test_engine_delegates_to_executor(self, scanned):
        groups, trash, _ = scanned
        DuplicateService.select_all_duplicates(groups)
        scanner = DuplicateScanner(file_service=trash)

        result = scanner.reclaim(groups)

        assert result.deleted_count == 3
        assert len(trash.trashed) == 3


def test_default_eligibility():
    assert default_eligibility(DuplicateFile(path="/a", size=1, selected=True))
    assert not default_eligibility(DuplicateFile(path="/a", size=1, selected=True, kept=True))
    assert not default_eligibility(DuplicateFile(path="/a", size=1))

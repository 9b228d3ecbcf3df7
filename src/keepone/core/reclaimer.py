"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/reclaimer.py
Removes selected duplicates, preferring the system trash over permanent deletion.
A file marked `kept` is never removed, whatever the caller's predicate says.
A group whose kept copy is gone is skipped whole: its other members may be the last copies.
"""

import logging
from typing import Callable, List, Optional

from keepone.core.interfaces import Trash
from keepone.core.models import (
    DuplicateFile, DuplicateGroup, ReclaimError, ReclaimErrorKind, ReclaimResult)
from keepone.services.file_service import FileService

logger = logging.getLogger(__name__)

EligibilityPredicate = Callable[[DuplicateFile], bool]


def default_eligibility(file: DuplicateFile) -> bool:
    return file.selected and not file.kept


class ReclamationExecutor:
    """
    Attributes:
        file_service: Trash primitive (send2trash-backed FileService by default)
        use_trash: False switches to permanent deletion
    """

    def __init__(self, file_service: Optional[Trash] = None, use_trash: bool = True):
        self.file_service = file_service or FileService()
        self.use_trash = use_trash

    def reclaim(
        self,
        groups: List[DuplicateGroup],
        is_eligible: Optional[EligibilityPredicate] = None,
    ) -> ReclaimResult:
        """
        Remove every eligible, non-kept file. Per-file failures are collected, never raised.
        Groups are not modified; prune them with DuplicateService.remove_files_from_groups.
        """
        is_eligible = is_eligible or default_eligibility
        result = ReclaimResult()

        for group in groups:
            candidates = []
            for file in group.files:
                if not is_eligible(file):
                    continue
                if file.kept:
                    logger.warning(f"Refusing to remove kept file: {file.path}")
                    continue
                candidates.append(file)
            if not candidates:
                continue

            # The kept copy must still exist before any of its duplicates go
            kept = group.kept_file
            if kept is None or not self.file_service.exists(kept.path):
                reason = f"kept copy {kept.path} no longer exists" if kept else "group has no kept copy"
                logger.warning(f"Skipping group {group.hash[:12]}: {reason}")
                result.errors.extend(
                    ReclaimError(f.path, ReclaimErrorKind.KEPT_MISSING, reason) for f in candidates)
                continue

            for file in candidates:
                self._reclaim_one(file, result)

        logger.info(
            f"Reclaimed {result.deleted_count} file(s), {result.freed_bytes} bytes, "
            f"{len(result.errors)} error(s)"
        )
        return result

    def _reclaim_one(self, file: DuplicateFile, result: ReclaimResult) -> None:
        # The file may have vanished between scan and reclaim
        if not self.file_service.exists(file.path):
            result.errors.append(ReclaimError(file.path, ReclaimErrorKind.MISSING, "file no longer exists"))
            return

        try:
            if self.use_trash:
                self.file_service.move_to_trash(file.path)
            else:
                self.file_service.delete_permanently(file.path)
        except FileNotFoundError as e:
            result.errors.append(ReclaimError(file.path, ReclaimErrorKind.MISSING, str(e)))
            return
        except PermissionError as e:
            result.errors.append(ReclaimError(file.path, ReclaimErrorKind.PERMISSION_DENIED, str(e)))
            return
        except (RuntimeError, OSError) as e:
            kind = ReclaimErrorKind.TRASH_FAILED
            if isinstance(e.__cause__, PermissionError):
                kind = ReclaimErrorKind.PERMISSION_DENIED
            elif isinstance(e.__cause__, FileNotFoundError):
                kind = ReclaimErrorKind.MISSING
            logger.debug(f"Failed to remove {file.path}: {e}")
            result.errors.append(ReclaimError(file.path, kind, str(e)))
            return

        result.deleted_count += 1
        result.freed_bytes += file.size
        result.removed_paths.append(file.path)
        logger.debug(f"Removed {file.path} ({file.size} bytes)")

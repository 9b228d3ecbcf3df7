"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Cross-platform file removal: recoverable move to the system trash (send2trash)
with a permanent-delete fallback for callers that explicitly ask for it.
"""
import os
import logging
from pathlib import Path

from send2trash import send2trash

logger = logging.getLogger(__name__)


class FileService:
    """
    File operations used by the reclamation executor.
    Missing files raise FileNotFoundError; every other failure is wrapped in RuntimeError
    chained to the original OSError so callers can classify it.
    """

    @staticmethod
    def exists(file_path: str) -> bool:
        return os.path.isfile(file_path)

    @staticmethod
    def move_to_trash(file_path: str) -> None:
        """Moves a file to the system trash."""
        path = Path(file_path).absolute()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except FileNotFoundError:
            raise
        except OSError as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e
        logger.debug(f"Moved to trash: {path}")

    @staticmethod
    def delete_permanently(file_path: str) -> None:
        """Removes a file for good. Only used when the caller opts out of the trash."""
        path = Path(file_path).absolute()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            path.unlink()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise RuntimeError(f"Failed to delete: {e}") from e
        logger.debug(f"Deleted permanently: {path}")

"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Moves duplicates to the system trash (via send2trash). Nothing is deleted permanently.
"""
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from send2trash import send2trash

logger = logging.getLogger(__name__)


class FileService:

    @staticmethod
    def move_to_trash(file_path: str) -> Path:
        """Moves one file to the system trash and returns its resolved path."""
        path = Path(file_path).resolve()
        if not path.is_file():
            raise FileNotFoundError(f"No longer on disk: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Trash refused {path.name}: {e}") from e
        logger.info(f"Moved to trash: {path}")
        return path

    @classmethod
    def move_each_to_trash(
            cls,
            file_paths: List[str],
            on_progress: Optional[Callable[[int, int, str], None]] = None
    ) -> Tuple[int, List[Tuple[str, str]]]:
        """
        Trashes every path independently; one failure does not stop the others.
        Returns the number of moved files and (path, reason) for each failure.
        """
        moved = 0
        failures: List[Tuple[str, str]] = []
        for index, path in enumerate(file_paths, 1):
            if on_progress:
                on_progress(index, len(file_paths), path)
            try:
                cls.move_to_trash(path)
                moved += 1
            except (FileNotFoundError, RuntimeError) as e:
                logger.warning(str(e))
                failures.append((path, str(e)))
        return moved, failures

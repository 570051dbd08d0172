"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
"""
from typing import List
from dupfinder.core.models import DuplicateGroup


class DuplicateService:
    @staticmethod
    def keep_only_one_file_per_group(groups: List[DuplicateGroup]) -> List[str]:
        """
        Keeps the first file of every group and marks the rest for deletion.
        Returns:
            List of file paths to be deleted, in group order
        """
        return [file.path for group in groups for file in group.files[1:]]

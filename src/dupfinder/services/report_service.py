"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report_service.py
JSON report of a deduplication run.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from dupfinder.core.models import DeduplicationResult
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.utils.path_format import PathFormatter

logger = logging.getLogger(__name__)


class ReportService:
    @staticmethod
    def build_report(
            result: DeduplicationResult,
            base_path: str,
            relative: bool = False,
            hash_algorithm: str = "xxhash",
            include_hardlinks: bool = False,
            now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Builds the report structure:
            scan_info         - base path, group count, RFC3339 timestamp, digest algorithm
            duplicate_groups  - one entry per group, files in keep-first order
            statistics        - totals after the hardlink carve-out

        Hardlinks are only skipped when they were left out of the groups, so
        hardlinks_skipped is 0 when include_hardlinks is set.
        """
        hardlinks_detected = len(result.stats.hardlinks)
        formatter = PathFormatter(base_path, relative=relative)

        duplicate_groups = []
        for group_id, group in enumerate(result.groups, 1):
            duplicate_groups.append({
                "group_id": group_id,
                "file_size": group.size,
                "file_count": group.duplicate_count,
                "digest": group.digest_hex,
                "files": [
                    {
                        "path": formatter.display(f.path),
                        "absolute_path": formatter.absolute(f.path),
                    }
                    for f in group.files
                ],
            })

        return {
            "scan_info": {
                "base_path": formatter.base_path,
                "total_groups": len(result.groups),
                "timestamp": ConvertUtils.rfc3339_now(now),
                "hash_algorithm": hash_algorithm,
            },
            "duplicate_groups": duplicate_groups,
            "statistics": {
                "total_duplicate_files": result.total_duplicate_files,
                "deletable_files": result.deletable_files,
                "potential_space_savings": result.potential_space_savings,
                "hardlinks_skipped": 0 if include_hardlinks else hardlinks_detected,
                "hardlinks_detected": hardlinks_detected,
                "failed_files": result.failure_count,
            },
        }

    @staticmethod
    def export_json(
            result: DeduplicationResult,
            base_path: str,
            output_path: str,
            relative: bool = False,
            hash_algorithm: str = "xxhash",
            include_hardlinks: bool = False
    ) -> Path:
        """Writes the report as indented UTF-8 JSON and returns the output path."""
        report = ReportService.build_report(
            result, base_path, relative=relative, hash_algorithm=hash_algorithm,
            include_hardlinks=include_hardlinks)
        path = Path(output_path)
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise RuntimeError(f"Failed to write JSON report: {e}") from e
        logger.info(f"JSON report written to {path}")
        return path

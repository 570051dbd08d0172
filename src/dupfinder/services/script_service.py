"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/script_service.py
Generates a deletion script for the current OS: bash on Linux/macOS, PowerShell on Windows.

The script keeps the first file of every group and removes the others. Nothing is
deleted before the user types "yes", and every removal is guarded by an existence
check so a re-run or a manually removed file does not abort the script.
"""
import logging
import os
import re
import shlex
import stat
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from dupfinder.core.models import DeduplicationResult
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.utils.path_format import PathFormatter

logger = logging.getLogger(__name__)

RULE = "# " + "=" * 76

_CONTROL_CHARS = re.compile("[\x00-\x1f\x7f\x85\u2028\u2029]")


def _comment_safe(value: str) -> str:
    """Text for a "#" comment line: a line break in a file name must not end the comment."""
    return _CONTROL_CHARS.sub("?", value)


def _ps_quote(value: str) -> str:
    """PowerShell single-quoted literal (no variable expansion)."""
    return "'" + value.replace("'", "''") + "'"


class ScriptService:
    @staticmethod
    def is_windows(platform: Optional[str] = None) -> bool:
        return (platform or sys.platform) == "win32"

    @staticmethod
    def generate(
            result: DeduplicationResult,
            base_path: str,
            output_path: str,
            platform: Optional[str] = None
    ) -> Path:
        """
        Writes the deletion script to output_path and returns it.
        The bash variant is made executable.
        """
        path = Path(output_path)
        if ScriptService.is_windows(platform):
            script = ScriptService.powershell_script(result, base_path, path.name)
        else:
            script = ScriptService.bash_script(result, base_path, path.name)

        try:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(script)
            if not ScriptService.is_windows(platform):
                mode = os.stat(path).st_mode
                os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            raise RuntimeError(f"Failed to write deletion script: {e}") from e

        logger.info(f"Deletion script written to {path}")
        return path

    @staticmethod
    def bash_script(result: DeduplicationResult, base_path: str, script_name: str = "delete_duplicates.sh",
                    now: Optional[datetime] = None) -> str:
        base = PathFormatter.absolute(base_path)
        savings = ConvertUtils.bytes_to_human(result.potential_space_savings)
        lines: List[str] = [
            "#!/bin/bash",
            RULE,
            "# DupFinder deletion script",
            f"# Generated: {ConvertUtils.timestamp_to_human(now)}",
            f"# Scan path: {_comment_safe(base)}",
            f"# Duplicate groups: {len(result.groups)}",
            RULE,
            "#",
            "# WARNING: this script deletes duplicate files!",
            "#   The first file of every group is kept, the others are removed.",
            "#   Review the commands below and comment out any line you want to keep.",
            "#",
            f"# Run with: bash {_comment_safe(script_name)}",
            RULE,
            "",
            "set -u",
            "",
            'echo "WARNING: about to delete duplicate files!"',
            f"echo {shlex.quote('Scan path: ' + base)}",
            f'echo "Duplicate groups: {len(result.groups)}"',
            f'echo "Files to delete: {result.deletable_files}"',
            f'echo "Space to free: {savings}"',
            'echo ""',
            'read -r -p "Continue? (yes/no): " confirm',
            'if [ "$confirm" != "yes" ]; then',
            '    echo "Cancelled."',
            "    exit 0",
            "fi",
            "",
            "deleted_count=0",
            "deleted_size=0",
            "failed_count=0",
        ]

        for group_id, group in enumerate(result.groups, 1):
            keep = PathFormatter.absolute(group.kept.path)
            lines += [
                "",
                RULE,
                f"# Group {group_id}: {group.duplicate_count} files ({group.size} bytes each)",
                RULE,
                f"# Keep: {_comment_safe(keep)}",
            ]
            for index, file in enumerate(group.files[1:], 1):
                target = shlex.quote(PathFormatter.absolute(file.path))
                lines += [
                    f"# Delete {index}/{group.deletable_count}",
                    f"if [ -f {target} ]; then",
                    f"    echo \"Deleting: \"{target}",
                    f"    if rm -- {target}; then",
                    "        deleted_count=$((deleted_count + 1))",
                    f"        deleted_size=$((deleted_size + {file.size}))",
                    "    else",
                    f"        echo \"Failed: \"{target}",
                    "        failed_count=$((failed_count + 1))",
                    "    fi",
                    "else",
                    f"    echo \"Missing: \"{target}",
                    "fi",
                ]

        lines += [
            "",
            'echo ""',
            'echo "Deleted: $deleted_count files"',
            'echo "Failed:  $failed_count files"',
            'echo "Freed:   $(numfmt --to=iec-i --suffix=B "$deleted_size" 2>/dev/null || echo "$deleted_size bytes")"',
            "",
        ]
        return "\n".join(lines)

    @staticmethod
    def powershell_script(result: DeduplicationResult, base_path: str, script_name: str = "delete_duplicates.ps1",
                          now: Optional[datetime] = None) -> str:
        base = PathFormatter.absolute(base_path)
        savings = ConvertUtils.bytes_to_human(result.potential_space_savings)
        lines: List[str] = [
            RULE,
            "# DupFinder deletion script (PowerShell)",
            f"# Generated: {ConvertUtils.timestamp_to_human(now)}",
            f"# Scan path: {_comment_safe(base)}",
            f"# Duplicate groups: {len(result.groups)}",
            RULE,
            "#",
            "# WARNING: this script deletes duplicate files!",
            "#   The first file of every group is kept, the others are removed.",
            "#   Review the commands below and comment out any line you want to keep.",
            "#",
            f"# Run with: PowerShell -ExecutionPolicy Bypass -File {_comment_safe(script_name)}",
            RULE,
            "",
            '$ErrorActionPreference = "Stop"',
            "",
            'Write-Host "WARNING: about to delete duplicate files!" -ForegroundColor Yellow',
            f"Write-Host {_ps_quote('Scan path: ' + base)}",
            f'Write-Host "Duplicate groups: {len(result.groups)}"',
            f'Write-Host "Files to delete: {result.deletable_files}"',
            f'Write-Host "Space to free: {savings}"',
            'Write-Host ""',
            '$confirm = Read-Host "Continue? (yes/no)"',
            'if ($confirm -ne "yes") {',
            '    Write-Host "Cancelled." -ForegroundColor Red',
            "    exit 0",
            "}",
            "",
            "$deletedCount = 0",
            "$deletedSize = 0",
            "$failedCount = 0",
        ]

        for group_id, group in enumerate(result.groups, 1):
            keep = PathFormatter.absolute(group.kept.path)
            lines += [
                "",
                RULE,
                f"# Group {group_id}: {group.duplicate_count} files ({group.size} bytes each)",
                RULE,
                f"# Keep: {_comment_safe(keep)}",
            ]
            for index, file in enumerate(group.files[1:], 1):
                target = _ps_quote(PathFormatter.absolute(file.path))
                lines += [
                    f"# Delete {index}/{group.deletable_count}",
                    f"if (Test-Path -LiteralPath {target} -PathType Leaf) {{",
                    f"    Write-Host ('Deleting: ' + {target})",
                    "    try {",
                    f"        Remove-Item -LiteralPath {target} -Force",
                    "        $deletedCount++",
                    f"        $deletedSize += {file.size}",
                    "    } catch {",
                    f"        Write-Host ('Failed: ' + {target}) -ForegroundColor Red",
                    "        $failedCount++",
                    "    }",
                    "} else {",
                    f"    Write-Host ('Missing: ' + {target}) -ForegroundColor Yellow",
                    "}",
                ]

        lines += [
            "",
            'Write-Host ""',
            'Write-Host "Deleted: $deletedCount files" -ForegroundColor Green',
            'Write-Host "Failed:  $failedCount files" -ForegroundColor Red',
            "$sizeInMB = [math]::Round($deletedSize / 1MB, 2)",
            'Write-Host "Freed:   $sizeInMB MB ($deletedSize bytes)" -ForegroundColor Green',
            "",
        ]
        return "\n".join(lines)

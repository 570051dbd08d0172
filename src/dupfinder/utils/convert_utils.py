"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
"""
import re
from datetime import datetime
from typing import Optional

_UNITS = {
    "B": 1,
    "K": 1024, "KB": 1024,
    "M": 1024 ** 2, "MB": 1024 ** 2,
    "G": 1024 ** 3, "GB": 1024 ** 3,
    "T": 1024 ** 4, "TB": 1024 ** 4,
    "P": 1024 ** 5, "PB": 1024 ** 5,
}
_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([KMGTP]?B|[KMGTP])?")


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """
        Convert bytes to human-readable string (e.g., 512 B, 1.50 KB, 3.20 MB).
        Whole bytes are shown without decimals.
        """
        if size_bytes < 0:
            return "0 B"
        if size_bytes < 1024:
            return f"{size_bytes} B"

        size = float(size_bytes)
        for unit in ["KB", "MB", "GB", "TB", "PB"]:
            size /= 1024
            if size < 1024:
                return f"{size:.2f} {unit}"
        return f"{size / 1024:.2f} EB"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Convert a human-readable size to bytes: '1000', '1K', '1.5KB', '2 mb', '1G', ...
        Units are binary (1K = 1024). Raises ValueError for anything else.
        """
        match = _SIZE_RE.fullmatch(size_str.strip().upper())
        if not match:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1.5GB, 2048KB, 1000, 1K, 1M, etc."
            )
        number, unit = match.groups()
        return int(float(number) * _UNITS[unit or "B"])

    @staticmethod
    def is_valid_size_format(size_str: str) -> bool:
        """
        Check if the input string has a valid size format.
        """
        try:
            ConvertUtils.human_to_bytes(size_str)
            return True
        except ValueError:
            return False

    @staticmethod
    def rfc3339_now(now: Optional[datetime] = None) -> str:
        """Local time with UTC offset, e.g. 2025-01-31T14:05:09.123456+01:00."""
        return (now or datetime.now()).astimezone().isoformat()

    @staticmethod
    def timestamp_to_human(now: Optional[datetime] = None, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """Local time formatted for script headers."""
        return (now or datetime.now()).strftime(fmt)

"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/path_format.py
"""
import os


class PathFormatter:
    """
    Formats file paths for display: absolute by default, or "./relative"
    to the scan root when relative display is requested.
    """

    def __init__(self, base_path: str, relative: bool = False):
        self.base_path = self.absolute(base_path)
        self.relative = relative

    @staticmethod
    def absolute(path: str) -> str:
        """Canonical absolute path (symlinks resolved); falls back to the plain absolute path."""
        try:
            return os.path.realpath(path, strict=True)
        except (OSError, TypeError):
            return os.path.abspath(path)

    def display(self, path: str) -> str:
        absolute = self.absolute(path)
        if not self.relative:
            return absolute
        try:
            rel = os.path.relpath(absolute, self.base_path)
        except ValueError:
            # Different drive on Windows
            return absolute
        if rel == os.pardir or rel.startswith(os.pardir + os.sep):
            return absolute
        return "./" + rel.replace(os.sep, "/")

"""File classification and ignore policy.

Decides whether a path is a code file the symbol extractor can process
(anything else is an asset), or a code file that should be kept out of extraction
(vendored, generated, test or declaration files).
"""

import fnmatch
import os
from pathlib import PurePath
from typing import Iterable, Optional, Tuple

from impact_tree.core.models import NodeType


CODE_EXTENSIONS = {".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"}

# Directories to skip
SKIP_DIRS = {
    'node_modules',
    'dist',
    'build',
    'out',
    'coverage',
    '.next',
    '.nuxt',
    '.cache',
    '.git',
    '__generated__',
    'vendor',
    '__tests__',
    '__mocks__',
}

# File name patterns to skip
SKIP_FILE_PATTERNS = (
    '*.test.*',
    '*.spec.*',
    '*.stories.*',
    '*.d.ts',
    '*.min.js',
)


def path_exists(path: str) -> bool:
    """Check that ``path`` is an accessible regular file.

    Never raises: OS errors count as "not accessible".
    """
    try:
        return os.path.isfile(path) and os.access(path, os.R_OK)
    except (OSError, ValueError):
        return False


def is_code_file(path: str) -> bool:
    """True for source files the symbol extractor can process."""
    _, ext = os.path.splitext(path)
    return ext.lower() in CODE_EXTENSIONS


def node_type_for(path: str) -> NodeType:
    return NodeType.CODE if is_code_file(path) else NodeType.ASSET


class FileFilter:
    """Ignore policy for code files.

    Args:
        extra_patterns: Additional glob patterns, matched against the file
            name and against the path relative to ``root``
        root: Project root; directories above it are not checked
    """

    def __init__(self, extra_patterns: Iterable[str] = (), root: Optional[str] = None):
        self.patterns: Tuple[str, ...] = SKIP_FILE_PATTERNS + tuple(extra_patterns)
        self.root = root

    def _relative(self, path: str) -> PurePath:
        pure = PurePath(path)
        if not self.root:
            return pure
        try:
            return pure.relative_to(self.root)
        except ValueError:
            # Outside the root only the file name is checked
            return PurePath(pure.name)

    def should_ignore(self, path: str) -> bool:
        """Check if a code file should be excluded from extraction."""
        relative = self._relative(path)
        parts = relative.parts
        if any(part in SKIP_DIRS for part in parts[:-1]):
            return True

        name = parts[-1] if parts else path
        posix_path = relative.as_posix()
        for pattern in self.patterns:
            if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(posix_path, pattern):
                return True

        return False

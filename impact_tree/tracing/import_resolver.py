"""Import resolution for JavaScript and TypeScript.

Resolves import specifiers to actual file paths on disk.
"""

import os
from pathlib import Path
from typing import Optional, List, Dict, Tuple

from impact_tree.core.models import normalize_path
from impact_tree.tracing.file_filter import path_exists


# Extensions tried after the specifier as written
RESOLVE_EXTENSIONS = ['.ts', '.tsx', '.js', '.jsx', '.mjs', '.cjs']

INDEX_NAMES = ['index.ts', 'index.tsx', 'index.js', 'index.jsx']

# ESM TypeScript projects import './foo.js' for a file named foo.ts
JS_TO_TS_EXTENSIONS = {
    '.js': ['.ts', '.tsx'],
    '.jsx': ['.tsx'],
    '.mjs': ['.mts'],
    '.cjs': ['.cts'],
}


class ImportResolver:
    """Resolves import specifiers to file paths.

    Relative specifiers (``./``, ``../``) resolve against the importing
    file's directory, ``/``-rooted ones against the project root. Bare
    specifiers are packages and are never traced.
    """

    def __init__(self, project_root: Optional[str] = None):
        """Initialize the resolver.

        Args:
            project_root: Root directory of the project for rooted specifiers
        """
        self.project_root = Path(project_root).resolve() if project_root else Path.cwd().resolve()
        self._cache: Dict[Tuple[str, str], Optional[str]] = {}

    def is_traceable(self, specifier: str) -> bool:
        """Bare specifiers (npm packages, aliases) are not traced."""
        return specifier.startswith('./') or specifier.startswith('../') \
            or specifier in ('.', '..') or specifier.startswith('/')

    def _target(self, from_file: str, specifier: str) -> Optional[Path]:
        if not self.is_traceable(specifier):
            return None
        if specifier.startswith('/'):
            return self.project_root / specifier.lstrip('/')
        return Path(from_file).parent / specifier

    def candidate_paths(self, from_file: str, specifier: str) -> List[str]:
        """All paths the specifier may refer to, in resolution order.

        Args:
            from_file: Path to the file containing the import
            specifier: The import specifier as written

        Returns:
            Normalized absolute paths (possibly non-existent); empty for
            untraceable specifiers
        """
        target = self._target(from_file, specifier)
        if target is None:
            return []

        base = str(target)
        candidates = [base]

        stem, ext = os.path.splitext(base)
        for ts_ext in JS_TO_TS_EXTENSIONS.get(ext.lower(), []):
            candidates.append(stem + ts_ext)

        candidates.extend(base + ext for ext in RESOLVE_EXTENSIONS)
        candidates.extend(os.path.join(base, index_name) for index_name in INDEX_NAMES)

        result = []
        for candidate in candidates:
            normalized = normalize_path(candidate)
            if normalized not in result:
                result.append(normalized)
        return result

    def resolve(self, from_file: str, specifier: str) -> Optional[str]:
        """Resolve a specifier to an existing file.

        Args:
            from_file: Path to the file containing the import
            specifier: The import specifier as written

        Returns:
            Absolute normalized path, or None if it cannot or should not
            be traced
        """
        cache_key = (os.path.dirname(from_file), specifier)
        if cache_key in self._cache:
            return self._cache[cache_key]

        path = None
        for candidate in self.candidate_paths(from_file, specifier):
            if path_exists(candidate):
                path = candidate
                break

        self._cache[cache_key] = path
        return path

    def refers_to(self, from_file: str, specifier: str, target_file: str) -> bool:
        """Check whether a specifier points at ``target_file``.

        When nothing on disk matches (the target was deleted, for
        instance) the candidate paths are compared instead.
        """
        resolved = self.resolve(from_file, specifier)
        if resolved is not None:
            return resolved == target_file
        return target_file in self.candidate_paths(from_file, specifier)

    def clear_cache(self):
        """Clear the resolution cache."""
        self._cache.clear()

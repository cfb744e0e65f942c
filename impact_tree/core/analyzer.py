"""Dependency tree builder.

Walks the import graph from an entry file, building one FileNode per
visited file and annotating nodes that are affected by the change set.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from impact_tree.config import DEFAULT_MAX_WORKERS
from impact_tree.core.exceptions import EntryUnreachableError, ParseError
from impact_tree.core.impact import classify, format_reason
from impact_tree.core.models import FileChange, FileNode, NodeType, normalize_path
from impact_tree.tracing.file_filter import FileFilter, node_type_for, path_exists
from impact_tree.tracing.import_resolver import ImportResolver
from impact_tree.tracing.symbol_extractor import ExtractedSymbols, SymbolExtractor

logger = logging.getLogger(__name__)


class VisitedSet:
    """Traversal-wide cycle guard with an atomic insert-if-absent."""

    def __init__(self):
        self._paths = set()
        self._lock = threading.Lock()

    def claim(self, path: str) -> bool:
        """Mark ``path`` visited. Returns False if it already was."""
        with self._lock:
            if path in self._paths:
                return False
            self._paths.add(path)
            return True

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)


@dataclass(frozen=True)
class FileLoad:
    """Result of the I/O done for one file: access check and extraction."""
    exists: bool
    symbols: Optional[ExtractedSymbols] = None
    error: Optional[str] = None


class TreeBuilder:
    """Builds the impact-annotated dependency tree.

    Each node's children are loaded (existence check and symbol
    extraction) concurrently on a thread pool, then assembled depth-first
    in import declaration order, so the tree shape does not depend on
    thread timing. Loads are memoized for the duration of one build.

    Args:
        changes: The change set
        project_root: Root for ``/``-rooted specifiers
        resolver: Import resolver (defaults to one bound to ``project_root``)
        extractor: Symbol extractor
        file_filter: Ignore policy for code files
        max_workers: Size of the I/O thread pool
    """

    def __init__(
        self,
        changes: Sequence[FileChange],
        project_root: Optional[str] = None,
        resolver: Optional[ImportResolver] = None,
        extractor: Optional[SymbolExtractor] = None,
        file_filter: Optional[FileFilter] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.changes = list(changes)
        self.project_root = project_root
        self.resolver = resolver or ImportResolver(project_root)
        self.extractor = extractor or SymbolExtractor()
        self.file_filter = file_filter or FileFilter(root=str(self.resolver.project_root))
        self.max_workers = max(1, max_workers)
        self.warnings: List[str] = []

        self._changes_by_file: Dict[str, FileChange] = {}
        for change in self.changes:
            self._changes_by_file.setdefault(change.changed_file, change)

        self._warnings_lock = threading.Lock()
        self._visited = VisitedSet()
        self._loads: Dict[str, Future] = {}
        self._executor: Optional[ThreadPoolExecutor] = None

    def build(self, entry_file: str) -> FileNode:
        """Build the tree rooted at ``entry_file``.

        Args:
            entry_file: Entry point, absolute or relative to the project root

        Returns:
            Root FileNode

        Raises:
            EntryUnreachableError: If the entry file cannot be accessed
        """
        entry = normalize_path(entry_file, self.project_root)
        if not path_exists(entry):
            raise EntryUnreachableError(entry)

        self.warnings = []
        self._visited = VisitedSet()
        self._loads = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            self._executor = executor
            try:
                return self._visit(entry)
            finally:
                self._executor = None

    def _warn(self, message: str):
        logger.warning(message)
        with self._warnings_lock:
            self.warnings.append(message)

    def _should_extract(self, path: str) -> bool:
        return node_type_for(path) == NodeType.CODE and not self.file_filter.should_ignore(path)

    def _load(self, path: str) -> FileLoad:
        """Access check and, for traceable code files, symbol extraction."""
        if not path_exists(path):
            return FileLoad(exists=False)

        if not self._should_extract(path):
            return FileLoad(exists=True)

        try:
            return FileLoad(exists=True, symbols=self.extractor.extract(path))
        except ParseError as e:
            return FileLoad(exists=True, error=str(e))
        except Exception as e:
            # Degrades to a leaf, like a parse failure
            logger.debug("Extractor failed on %s", path, exc_info=True)
            return FileLoad(exists=True, error=f"{type(e).__name__}: {e}")

    def _schedule(self, path: str) -> Future:
        future = self._loads.get(path)
        if future is None:
            future = self._executor.submit(self._load, path)
            self._loads[path] = future
        return future

    def _visit(self, path: str) -> FileNode:
        node_type = node_type_for(path)

        if not self._visited.claim(path):
            return FileNode(file=path, type=node_type)

        load = self._schedule(path).result()
        if not load.exists:
            self._warn(f"Could not access file {path}")
            return FileNode(file=path, type=NodeType.ASSET)

        node = FileNode(file=path, type=node_type)

        change = self._changes_by_file.get(path)
        if change:
            node.change_type = change.change_type
            node.reason = f"File was {change.change_type.past_tense}"

        if node_type == NodeType.CODE and self._should_extract(path):
            if load.error is not None:
                self._warn(f"Error analyzing file {path}: {load.error}")
                return node

            imports = load.symbols.imports
            node.imports = list(imports)
            node.exports = load.symbols.exports

            affecting = classify(path, imports, self.changes, self.resolver)
            if affecting:
                node.is_affected = True
                node.reason = format_reason(affecting)

            targets = []
            for imp in imports:
                resolved = self.resolver.resolve(path, imp.source)
                if resolved is None:
                    if self.resolver.is_traceable(imp.source):
                        self._warn(f"Could not resolve import '{imp.source}' in {path}")
                    else:
                        logger.debug("Skipping external import '%s' in %s", imp.source, path)
                    continue
                targets.append(resolved)

            # Scatter the children's I/O, then gather in declaration order
            pending = [(target, self._schedule(target)) for target in targets]
            for target, future in pending:
                if not future.result().exists:
                    self._warn(f"Could not access imported file: {target}")
                    continue
                node.children.append(self._visit(target))

        elif node_type == NodeType.ASSET and change:
            node.is_affected = True
            node.reason = f"Asset file was {change.change_type.past_tense}"

        return node


def analyze_project(
    entry_file: str,
    changes: Sequence[FileChange],
    project_root: Optional[str] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    ignore_patterns: Sequence[str] = (),
) -> FileNode:
    """Convenience function: build the impact tree for an entry file.

    Args:
        entry_file: Entry point of the project
        changes: The change set
        project_root: Project root directory (defaults to the cwd)
        max_workers: Size of the I/O thread pool
        ignore_patterns: Extra glob patterns for the ignore policy

    Returns:
        Root FileNode
    """
    builder = TreeBuilder(
        changes,
        project_root=project_root,
        file_filter=FileFilter(ignore_patterns, root=normalize_path(project_root or ".")),
        max_workers=max_workers,
    )
    return builder.build(entry_file)

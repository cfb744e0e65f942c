"""Core data models for impact-tree.

Change records, import records and the dependency tree produced by a
traversal.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, List, FrozenSet, Tuple, Iterator


class Language(Enum):
    """Languages the symbol extractor understands."""
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    UNKNOWN = "unknown"

    @classmethod
    def from_extension(cls, ext: str) -> "Language":
        """Language for an extension such as ``.tsx`` or ``mjs``."""
        ext = ext.lower().lstrip(".")
        if ext in ("ts", "tsx", "mts", "cts"):
            return cls.TYPESCRIPT
        if ext in ("js", "jsx", "mjs", "cjs"):
            return cls.JAVASCRIPT
        return cls.UNKNOWN


class ChangeType(Enum):
    """Kind of file-level change."""
    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"

    @property
    def past_tense(self) -> str:
        return {"add": "added", "modify": "modified", "delete": "deleted"}[self.value]


class NodeType(Enum):
    """Kind of node in the dependency tree."""
    CODE = "code"
    ASSET = "asset"


def normalize_path(path, root: Optional[str] = None) -> str:
    """Return an absolute, normalized path string.

    Relative paths are taken relative to ``root`` (or the current
    directory). The file does not need to exist.
    """
    p = Path(path)
    if not p.is_absolute():
        p = Path(root) / p if root else Path.cwd() / p
    return str(p.resolve())


@dataclass(frozen=True)
class FileChange:
    """One changed file from a change set."""
    changed_file: str
    change_type: ChangeType
    modified_exports: Optional[Tuple[str, ...]] = None

    @property
    def has_export_diff(self) -> bool:
        """True when this is a modify carrying export-level information."""
        return self.change_type == ChangeType.MODIFY and bool(self.modified_exports)

    def to_dict(self) -> dict:
        data = {
            "changedFile": self.changed_file,
            "changeType": self.change_type.value,
        }
        if self.modified_exports:
            data["modifiedExports"] = list(self.modified_exports)
        return data


@dataclass(frozen=True)
class ImportInfo:
    """A single import statement (or re-export / require call).

    ``specifiers`` holds the imported names; ``"*"`` stands for the whole
    module and ``"default"`` for a default import.
    """
    source: str
    specifiers: FrozenSet[str] = frozenset()
    line_number: int = 0

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "specifiers": sorted(self.specifiers),
        }


@dataclass
class FileNode:
    """Traversal result for one file.

    Optional fields left as ``None`` are absent: they are not the same as
    ``False`` or empty and are omitted from :meth:`to_dict`.
    """
    file: str
    type: NodeType
    imports: Optional[List[ImportInfo]] = None
    exports: Optional[FrozenSet[str]] = None
    is_affected: Optional[bool] = None
    change_type: Optional[ChangeType] = None
    reason: Optional[str] = None
    children: List["FileNode"] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return Path(self.file).name

    def iter_nodes(self) -> Iterator["FileNode"]:
        """Yield this node and all descendants, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def affected_files(self) -> List[str]:
        """Unique paths of affected nodes, in pre-order."""
        seen = set()
        result = []
        for node in self.iter_nodes():
            if node.is_affected and node.file not in seen:
                seen.add(node.file)
                result.append(node.file)
        return result

    def to_dict(self) -> dict:
        """Convert to dictionary (for JSON serialization)."""
        data = {
            "file": self.file,
            "type": self.type.value,
        }
        if self.imports is not None:
            data["imports"] = [imp.to_dict() for imp in self.imports]
        if self.exports is not None:
            data["exports"] = sorted(self.exports)
        if self.is_affected is not None:
            data["isAffected"] = self.is_affected
        if self.change_type is not None:
            data["changeType"] = self.change_type.value
        if self.reason is not None:
            data["reason"] = self.reason
        data["children"] = [child.to_dict() for child in self.children]
        return data

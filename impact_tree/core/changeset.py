"""Loading change sets from JSON.

Accepts the document produced by the ``git`` command (and by other
tooling): a list of objects with ``changedFile``, ``changeType`` and an
optional ``modifiedExports`` list. Snake-case keys are accepted too.
"""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from impact_tree.core.exceptions import ChangeSetError
from impact_tree.core.models import ChangeType, FileChange, normalize_path


class FileChangeRecord(BaseModel):
    """Wire shape of a single change."""
    model_config = ConfigDict(populate_by_name=True)

    changed_file: str = Field(alias="changedFile", min_length=1)
    change_type: ChangeType = Field(alias="changeType")
    modified_exports: Optional[List[str]] = Field(default=None, alias="modifiedExports")

    def to_change(self, root: Optional[str] = None) -> FileChange:
        exports = None
        if self.change_type == ChangeType.MODIFY and self.modified_exports:
            exports = tuple(self.modified_exports)
        return FileChange(
            changed_file=normalize_path(self.changed_file, root),
            change_type=self.change_type,
            modified_exports=exports,
        )


def parse_changes(text: str, root: Optional[str] = None) -> List[FileChange]:
    """Parse a JSON change set.

    Args:
        text: JSON document (a list of change objects)
        root: Directory relative ``changedFile`` paths are resolved against

    Returns:
        List of FileChange in document order

    Raises:
        ChangeSetError: If the document is not valid JSON or a record is malformed
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ChangeSetError(f"Change set is not valid JSON: {e}") from e

    if not isinstance(raw, list):
        raise ChangeSetError("Change set must be a JSON list")

    changes = []
    for index, item in enumerate(raw):
        try:
            record = FileChangeRecord.model_validate(item)
        except ValidationError as e:
            raise ChangeSetError(f"Invalid change at index {index}: {e}") from e
        changes.append(record.to_change(root))
    return changes


def load_changes(path: str, root: Optional[str] = None) -> List[FileChange]:
    """Read and parse a JSON change set from a file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ChangeSetError(f"Could not read change set {path}: {e}") from e
    return parse_changes(text, root)


def dump_changes(changes: List[FileChange]) -> str:
    """Serialize changes back to the JSON wire shape."""
    return json.dumps([change.to_dict() for change in changes], indent=2)

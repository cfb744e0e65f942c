"""Impact classification.

Decides which changes reach a file through its imports and explains why.
"""

import os
from dataclasses import dataclass
from typing import List, Sequence

from impact_tree.core.models import ChangeType, FileChange, ImportInfo
from impact_tree.parsers.treesitter_parser import WHOLE_MODULE
from impact_tree.tracing.import_resolver import ImportResolver


@dataclass(frozen=True)
class AffectingImport:
    """A change reaching a file through one import statement."""
    change: FileChange
    imported_specifiers: List[str]


def classify(
    file_path: str,
    imports: Sequence[ImportInfo],
    changes: Sequence[FileChange],
    resolver: ImportResolver,
) -> List[AffectingImport]:
    """Find the changes that affect ``file_path`` through its imports.

    A ``modify`` carrying modified exports only counts when the import
    uses one of them (a whole-module import uses all of them). Any other
    change to an imported file counts unconditionally. Entries are
    produced per (change, import) pair, in change order then import
    order, without deduplication.

    Args:
        file_path: The importing file
        imports: Its imports in declaration order
        changes: The change set
        resolver: Resolver used to match specifiers to changed files

    Returns:
        List of AffectingImport entries
    """
    affecting = []

    for change in changes:
        for imp in imports:
            if not resolver.refers_to(file_path, imp.source, change.changed_file):
                continue

            if change.has_export_diff:
                if WHOLE_MODULE in imp.specifiers:
                    affected = list(change.modified_exports)
                else:
                    modified = set(change.modified_exports)
                    affected = sorted(s for s in imp.specifiers if s in modified)
                if affected:
                    affecting.append(AffectingImport(change, affected))
            else:
                affecting.append(AffectingImport(change, sorted(imp.specifiers)))

    return affecting


def format_reason(affecting: Sequence[AffectingImport]) -> str:
    """Render one explanation line per affecting entry.

    Args:
        affecting: Entries from :func:`classify`, in order

    Returns:
        Newline-joined reason text
    """
    reasons = []

    for entry in affecting:
        change = entry.change
        file_name = os.path.basename(change.changed_file)

        if change.change_type == ChangeType.DELETE:
            reasons.append(f"Imported file '{file_name}' was deleted")
        elif change.change_type == ChangeType.ADD:
            reasons.append(f"New file '{file_name}' was added that is imported")
        elif change.modified_exports and entry.imported_specifiers:
            reasons.append(
                f"Modified exports from '{file_name}': {', '.join(entry.imported_specifiers)}"
            )
        else:
            reasons.append(f"File '{file_name}' content was modified")

    return "\n".join(reasons)

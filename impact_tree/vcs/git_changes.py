"""Change sets from git history.

Computes the code files changed between two revisions and, for modified
files, which exports appeared or disappeared.
"""

import logging
import os
from typing import List, Optional, Set, Tuple

import git

from impact_tree.core.exceptions import ChangeSetError, ParseError
from impact_tree.core.models import ChangeType, FileChange, normalize_path
from impact_tree.tracing.file_filter import is_code_file
from impact_tree.tracing.symbol_extractor import SymbolExtractor

logger = logging.getLogger(__name__)

STATUS_TO_CHANGE = {
    "A": ChangeType.ADD,
    "D": ChangeType.DELETE,
    "M": ChangeType.MODIFY,
}


def open_repo(repo_path: str) -> git.Repo:
    """Open the repository containing ``repo_path``.

    Raises:
        ChangeSetError: If the path is not inside a git repository
    """
    try:
        return git.Repo(repo_path, search_parent_directories=True)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
        raise ChangeSetError(f"Not a git repository: {repo_path}") from e


class GitChangeCollector:
    """Builds a change set from a git revision range.

    Args:
        repo_path: Any path inside the repository
        extractor: Symbol extractor used to diff exports
    """

    def __init__(self, repo_path: str, extractor: Optional[SymbolExtractor] = None):
        self.repo = open_repo(repo_path)
        self.root = self.repo.working_tree_dir
        self.extractor = extractor or SymbolExtractor()

    def _name_status(self, base: str, head: str) -> List[Tuple[str, List[str]]]:
        """(status letter, paths) entries of ``git diff --name-status``.

        Uses NUL-separated output so paths arrive unquoted, whatever
        characters they contain.
        """
        try:
            output = self.repo.git.diff(base, head, "--name-status", "-M", "-z")
        except git.GitCommandError as e:
            raise ChangeSetError(f"git diff {base} {head} failed: {e}") from e

        entries = []
        fields = [f for f in output.split("\0") if f]
        i = 0
        while i < len(fields):
            status = fields[i][0]
            # Renames and copies carry the old and the new path
            count = 2 if status in ("R", "C") else 1
            entries.append((status, fields[i + 1:i + 1 + count]))
            i += 1 + count
        return entries

    def _exports_at(self, revision: str, rel_path: str, abs_path: str) -> Set[str]:
        content = self.repo.git.show(f"{revision}:{rel_path}")
        return set(self.extractor.extract(abs_path, content=content).exports)

    def _modified_exports(self, base: str, head: str, rel_path: str, abs_path: str) -> Optional[tuple]:
        """Exports present on exactly one side of the range, or None if unknown."""
        try:
            previous = self._exports_at(base, rel_path, abs_path)
            current = self._exports_at(head, rel_path, abs_path)
        except (git.GitCommandError, ParseError) as e:
            logger.warning(f"Could not analyze exports for {rel_path}: {e}")
            return None

        changed = sorted(current - previous) + sorted(previous - current)
        return tuple(changed) if changed else None

    def collect(self, base: str = "HEAD^", head: str = "HEAD") -> List[FileChange]:
        """Collect the changes between ``base`` and ``head``.

        Renames become a delete of the old path plus an add of the new
        one; copies become an add. Non-code files are skipped.

        Returns:
            List of FileChange in git's output order

        Raises:
            ChangeSetError: If git cannot diff the range
        """
        changes = []

        for status, paths in self._name_status(base, head):
            if not paths:
                continue

            if status in ("R", "C") and len(paths) == 2:
                old_path, new_path = paths
                if status == "R" and is_code_file(old_path):
                    changes.append(FileChange(self._abs(old_path), ChangeType.DELETE))
                if is_code_file(new_path):
                    changes.append(FileChange(self._abs(new_path), ChangeType.ADD))
                continue

            change_type = STATUS_TO_CHANGE.get(status)
            rel_path = paths[0]
            if change_type is None or not is_code_file(rel_path):
                continue

            abs_path = self._abs(rel_path)
            modified_exports = None
            if change_type == ChangeType.MODIFY:
                modified_exports = self._modified_exports(base, head, rel_path, abs_path)

            changes.append(FileChange(abs_path, change_type, modified_exports))

        return changes

    def _abs(self, rel_path: str) -> str:
        return normalize_path(os.path.join(self.root, rel_path))


def get_commit_changes(
    repo_path: str,
    base: str = "HEAD^",
    head: str = "HEAD",
    extractor: Optional[SymbolExtractor] = None,
) -> List[FileChange]:
    """Convenience function: change set between two revisions."""
    return GitChangeCollector(repo_path, extractor).collect(base, head)

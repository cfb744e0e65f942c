"""Version-control change-set sources."""

from impact_tree.vcs.git_changes import GitChangeCollector, get_commit_changes

__all__ = ["GitChangeCollector", "get_commit_changes"]

"""Exceptions raised by impact-tree."""


class ImpactTreeError(Exception):
    """Base class for all impact-tree errors."""


class EntryUnreachableError(ImpactTreeError):
    """The entry file could not be accessed before traversal started."""

    def __init__(self, entry_file: str):
        self.entry_file = entry_file
        super().__init__(f"Entry file is not accessible: {entry_file}")


class ParseError(ImpactTreeError):
    """A file could not be read or is not valid source."""

    def __init__(self, filepath: str, message: str):
        self.filepath = filepath
        super().__init__(f"{filepath}: {message}")


class ChangeSetError(ImpactTreeError):
    """A change set could not be loaded or computed."""

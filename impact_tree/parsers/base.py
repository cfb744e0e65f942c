"""Interface shared by the source parsers.

A parser turns one file's source into the two facts the tree builder
needs: the import edges leaving the file and the names it exports.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Set

from impact_tree.core.models import Language, ImportInfo


class BaseParser(ABC):
    """Stateful single-file parser.

    Call :meth:`parse` first; the ``extract_*`` methods then report on
    the last source that parsed cleanly and return empty results
    otherwise. Instances are not shared between threads.
    """

    def __init__(self):
        self._source: Optional[str] = None
        self._parsed = False

    @property
    @abstractmethod
    def language(self) -> Language:
        ...

    @property
    def source(self) -> Optional[str]:
        """Source text handed to the last :meth:`parse` call."""
        return self._source

    @property
    def is_parsed(self) -> bool:
        return self._parsed

    @abstractmethod
    def parse(self, source: str, filepath: str = "") -> bool:
        """Parse ``source``; ``filepath`` may select a grammar variant.

        Returns:
            False when the source is not valid for this language
        """

    @abstractmethod
    def extract_imports(self) -> List[ImportInfo]:
        """Import edges in declaration order."""

    @abstractmethod
    def extract_exports(self) -> Set[str]:
        """Exported names, ``"default"`` for a default export."""

    def reset(self):
        self._source = None
        self._parsed = False

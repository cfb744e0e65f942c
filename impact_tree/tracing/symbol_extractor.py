"""Symbol extraction: imports and exports of a source file."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, FrozenSet, Optional

from impact_tree.core.exceptions import ParseError
from impact_tree.core.models import ImportInfo
from impact_tree.parsers.registry import get_parser


@dataclass(frozen=True)
class ExtractedSymbols:
    """Imports (in declaration order) and exported names of one file."""
    imports: List[ImportInfo] = field(default_factory=list)
    exports: FrozenSet[str] = frozenset()


class SymbolExtractor:
    """Extracts import and export information using the parser registry."""

    def extract(self, filepath: str, content: Optional[str] = None) -> ExtractedSymbols:
        """Extract imports and exports from a file.

        Args:
            filepath: Path to the source file (also selects the parser)
            content: Source to parse instead of the file on disk, e.g. a
                previous revision

        Returns:
            ExtractedSymbols for the file

        Raises:
            ParseError: If the file cannot be read or is not valid source
        """
        parser = get_parser(filepath)
        if parser is None:
            raise ParseError(filepath, "no parser for this file type")

        if content is None:
            try:
                content = Path(filepath).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ParseError(filepath, f"could not read file: {e}") from e

        if not parser.parse(content, filepath):
            raise ParseError(filepath, "source contains syntax errors")

        return ExtractedSymbols(
            imports=parser.extract_imports(),
            exports=frozenset(parser.extract_exports()),
        )

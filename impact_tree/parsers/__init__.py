"""Source parsers for JavaScript and TypeScript.

Each parser reports a file's import edges and exported names.
"""

from impact_tree.parsers.base import BaseParser
from impact_tree.parsers.registry import (
    ParserRegistry,
    detect_language,
    get_parser,
    register_parser,
)

__all__ = [
    "BaseParser",
    "ParserRegistry",
    "detect_language",
    "get_parser",
    "register_parser",
]

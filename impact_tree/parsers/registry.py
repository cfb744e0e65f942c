"""Language detection and parser lookup.

Maps file extensions to languages and languages to parser factories.
"""

import os
from typing import Callable, Dict, List, Optional, Union

from impact_tree.core.models import Language
from impact_tree.parsers.base import BaseParser

ParserFactory = Callable[[], BaseParser]


class ParserRegistry:
    """Language to parser-factory mapping.

    Every lookup builds a new parser: the tree builder extracts symbols
    from several threads at once and parsers keep per-file state.
    """

    def __init__(self):
        self._factories: Dict[Language, ParserFactory] = {}

    def register(self, language: Language, factory: ParserFactory):
        self._factories[language] = factory

    def create(self, language: Language) -> Optional[BaseParser]:
        """New parser for ``language``, or None when none is registered."""
        factory = self._factories.get(language)
        return factory() if factory else None

    def supports_file(self, filepath: str) -> bool:
        return detect_language(filepath) in self._factories

    @property
    def languages(self) -> List[Language]:
        return list(self._factories)


_registry = ParserRegistry()


def detect_language(filepath: str) -> Language:
    """Language of a file, judged by its extension."""
    return Language.from_extension(os.path.splitext(filepath)[1])


def get_parser(target: Union[str, Language]) -> Optional[BaseParser]:
    """Parser for a file path or a Language, None if unsupported."""
    language = target if isinstance(target, Language) else detect_language(target)
    return _registry.create(language)


def register_parser(language: Language, factory: ParserFactory):
    """Add or replace the parser factory for ``language``."""
    _registry.register(language, factory)


def get_registry() -> ParserRegistry:
    return _registry


def _register_builtin_parsers():
    from impact_tree.parsers.treesitter_parser import TreeSitterParser

    for language in (Language.JAVASCRIPT, Language.TYPESCRIPT):
        register_parser(language, lambda lang=language: TreeSitterParser(lang))


_register_builtin_parsers()

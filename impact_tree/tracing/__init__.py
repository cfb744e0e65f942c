"""impact-tree tracing - import resolution, symbol extraction and file policy.

This package provides the collaborators the tree builder calls per file:
- Resolving import specifiers to files on disk
- Extracting imports and exports from source files
- Classifying files as code or assets and applying the ignore policy
"""

from impact_tree.tracing.import_resolver import ImportResolver
from impact_tree.tracing.symbol_extractor import SymbolExtractor, ExtractedSymbols
from impact_tree.tracing.file_filter import FileFilter, is_code_file, path_exists

__all__ = [
    "ImportResolver",
    "SymbolExtractor",
    "ExtractedSymbols",
    "FileFilter",
    "is_code_file",
    "path_exists",
]

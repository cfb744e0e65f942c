"""Tree-sitter based parser for JavaScript and TypeScript.

Extracts import edges (static imports, re-exports, ``require`` and
dynamic ``import()`` calls) and exported symbol names.
"""

import os
from functools import lru_cache
from typing import Optional, List, Set, Any

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from impact_tree.core.models import Language, ImportInfo
from impact_tree.parsers.base import BaseParser


# Specifier recorded for imports that pull in the whole module
WHOLE_MODULE = "*"
DEFAULT_EXPORT = "default"

# Declarations whose ``name`` field is the exported name
NAMED_DECLARATIONS = {
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
    "function_signature",
    "module",
    "internal_module",
}

VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}


@lru_cache(maxsize=None)
def _get_tree_sitter_language(grammar: str) -> Any:
    """Get the tree-sitter language object for a grammar name.

    Args:
        grammar: One of 'javascript', 'typescript', 'tsx'

    Returns:
        tree-sitter Language object
    """
    if grammar == "javascript":
        return tree_sitter.Language(tree_sitter_javascript.language())
    if grammar == "tsx":
        return tree_sitter.Language(tree_sitter_typescript.language_tsx())
    return tree_sitter.Language(tree_sitter_typescript.language_typescript())


def _grammar_for(language: Language, filepath: str) -> str:
    if language == Language.TYPESCRIPT:
        if filepath.lower().endswith(".tsx"):
            return "tsx"
        return "typescript"
    return "javascript"


class TreeSitterParser(BaseParser):
    """JavaScript/TypeScript parser using tree-sitter.

    ``parse`` returns False when the source contains syntax errors;
    tree-sitter always produces a tree, so error nodes are checked
    explicitly.
    """

    def __init__(self, language: Language = Language.UNKNOWN):
        # UNKNOWN defers the choice to the extension passed to parse()
        super().__init__()
        self._lang = language
        self._tree: Optional[Any] = None
        self._imports: List[ImportInfo] = []
        self._exports: Set[str] = set()

    @property
    def language(self) -> Language:
        """Return the language this parser handles."""
        return self._lang

    def parse(self, source: str, filepath: str = "") -> bool:
        """Parse source code using tree-sitter.

        Args:
            source: The source code to parse
            filepath: Optional file path, used to pick the grammar

        Returns:
            True if parsing succeeded without syntax errors
        """
        self.reset()
        self._source = source

        if self._lang == Language.UNKNOWN and filepath:
            self._lang = Language.from_extension(os.path.splitext(filepath)[1])

        if self._lang == Language.UNKNOWN:
            return False

        ts_language = _get_tree_sitter_language(_grammar_for(self._lang, filepath))
        parser = tree_sitter.Parser(ts_language)
        self._tree = parser.parse(source.encode("utf-8"))

        if self._tree.root_node.has_error:
            return False

        self._collect(self._tree.root_node)
        self._parsed = True
        return True

    def reset(self):
        """Reset parser state."""
        super().reset()
        self._tree = None
        self._imports = []
        self._exports = set()

    def extract_imports(self) -> List[ImportInfo]:
        """Return all extracted imports, in source order."""
        return self._imports.copy()

    def extract_exports(self) -> Set[str]:
        """Return all exported names."""
        return set(self._exports)

    def _get_node_text(self, node) -> str:
        """Get the text content of a tree-sitter node."""
        return node.text.decode("utf-8")

    def _get_string_value(self, node) -> str:
        text = self._get_node_text(node)
        if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
            return text[1:-1]
        return text

    def _collect(self, root):
        """Walk the tree in source order collecting imports and exports.

        Iterative pre-order: long expression chains nest deeper than the
        interpreter's recursion limit.
        """
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "import_statement":
                self._parse_import_statement(node)
                continue

            if node.type == "export_statement":
                self._parse_export_statement(node)
            elif node.type == "call_expression":
                self._parse_call(node)

            stack.extend(reversed(node.children))

    def _add_import(self, node, source_node, specifiers: Set[str]):
        self._imports.append(ImportInfo(
            source=self._get_string_value(source_node),
            specifiers=frozenset(specifiers),
            line_number=node.start_point[0] + 1,
        ))

    def _parse_import_statement(self, node):
        """Parse ``import ... from 'x'``, ``import 'x'`` and ``import x = require('x')``."""
        source = node.child_by_field_name("source")
        specifiers: Set[str] = set()

        for child in node.children:
            if child.type == "import_clause":
                specifiers.update(self._parse_import_clause(child))
            elif child.type == "import_require_clause":
                source = child.child_by_field_name("source")
                if source is None:
                    source = next((c for c in child.children if c.type == "string"), None)
                specifiers.add(WHOLE_MODULE)

        if source is None:
            return

        self._add_import(node, source, specifiers)

    def _parse_import_clause(self, clause) -> Set[str]:
        names = set()
        for child in clause.children:
            if child.type == "identifier":
                # Default import
                names.add(DEFAULT_EXPORT)
            elif child.type == "namespace_import":
                names.add(WHOLE_MODULE)
            elif child.type == "named_imports":
                for spec in child.children:
                    if spec.type == "import_specifier":
                        name_node = spec.child_by_field_name("name")
                        if name_node is not None:
                            names.add(self._get_string_value(name_node))
        return names

    def _parse_export_statement(self, node):
        """Parse exports; re-exports with a source are also import edges."""
        source = node.child_by_field_name("source")
        child_types = [child.type for child in node.children]

        if source is not None:
            specifiers: Set[str] = set()
            for child in node.children:
                if child.type == "export_clause":
                    for spec in child.children:
                        if spec.type == "export_specifier":
                            name = spec.child_by_field_name("name")
                            alias = spec.child_by_field_name("alias")
                            if name is not None:
                                specifiers.add(self._get_string_value(name))
                                self._exports.add(self._get_string_value(alias or name))
                elif child.type == "namespace_export":
                    specifiers.add(WHOLE_MODULE)
                    named = child.named_children
                    if named:
                        self._exports.add(self._get_string_value(named[-1]))
            if "*" in child_types:
                specifiers.add(WHOLE_MODULE)
            self._add_import(node, source, specifiers)
            return

        if "default" in child_types:
            self._exports.add(DEFAULT_EXPORT)
            return

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._exports.update(self._declaration_names(declaration))
            return

        for child in node.children:
            if child.type == "export_clause":
                for spec in child.children:
                    if spec.type == "export_specifier":
                        name = spec.child_by_field_name("name")
                        alias = spec.child_by_field_name("alias")
                        if name is not None:
                            self._exports.add(self._get_string_value(alias or name))

    def _declaration_names(self, declaration) -> Set[str]:
        if declaration.type in NAMED_DECLARATIONS:
            name = declaration.child_by_field_name("name")
            return {self._get_node_text(name)} if name is not None else set()

        if declaration.type in VARIABLE_DECLARATIONS:
            names = set()
            for declarator in declaration.named_children:
                if declarator.type == "variable_declarator":
                    name = declarator.child_by_field_name("name")
                    if name is not None:
                        names.update(self._binding_names(name))
            return names

        if declaration.type == "ambient_declaration":
            names = set()
            for child in declaration.named_children:
                names.update(self._declaration_names(child))
            return names

        return set()

    def _binding_names(self, node) -> Set[str]:
        """Names bound by an identifier or destructuring pattern."""
        if node.type in ("identifier", "shorthand_property_identifier_pattern"):
            return {self._get_node_text(node)}

        if node.type == "pair_pattern":
            value = node.child_by_field_name("value")
            return self._binding_names(value) if value is not None else set()

        if node.type in ("assignment_pattern", "object_assignment_pattern"):
            left = node.child_by_field_name("left")
            return self._binding_names(left) if left is not None else set()

        names = set()
        if node.type in ("object_pattern", "array_pattern", "rest_pattern"):
            for child in node.named_children:
                names.update(self._binding_names(child))
        return names

    def _parse_call(self, node):
        """Parse ``require('x')`` and dynamic ``import('x')``."""
        function = node.child_by_field_name("function")
        if function is None:
            return

        is_require = function.type == "identifier" and self._get_node_text(function) == "require"
        if not is_require and function.type != "import":
            return

        arguments = node.child_by_field_name("arguments")
        if arguments is None or not arguments.named_children:
            return

        first = arguments.named_children[0]
        if first.type != "string":
            return

        self._add_import(node, first, {WHOLE_MODULE})

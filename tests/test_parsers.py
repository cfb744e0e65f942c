"""Tests for the JavaScript/TypeScript parser system."""

import pytest
from impact_tree.core.models import Language
from impact_tree.parsers.registry import detect_language, get_parser, get_registry
from impact_tree.parsers.treesitter_parser import TreeSitterParser


class TestLanguageDetection:
    """Tests for language detection from file extensions."""

    def test_javascript_extensions(self):
        assert detect_language("app.js") == Language.JAVASCRIPT
        assert detect_language("module.mjs") == Language.JAVASCRIPT
        assert detect_language("common.cjs") == Language.JAVASCRIPT
        assert detect_language("component.jsx") == Language.JAVASCRIPT

    def test_typescript_extensions(self):
        assert detect_language("app.ts") == Language.TYPESCRIPT
        assert detect_language("component.tsx") == Language.TYPESCRIPT
        assert detect_language("module.mts") == Language.TYPESCRIPT

    def test_unknown_extension(self):
        assert detect_language("styles.css") == Language.UNKNOWN
        assert detect_language("noextension") == Language.UNKNOWN


class TestParserRegistry:
    """Tests for parser dispatch."""

    def test_get_parser_by_filepath(self):
        parser = get_parser("src/main.tsx")
        assert isinstance(parser, TreeSitterParser)
        assert parser.language == Language.TYPESCRIPT

    def test_parsers_are_not_shared(self):
        assert get_parser(Language.JAVASCRIPT) is not get_parser(Language.JAVASCRIPT)

    def test_unsupported_file_returns_none(self):
        assert get_parser("logo.svg") is None

    def test_supported_languages(self):
        registry = get_registry()
        assert registry.supports_file("index.js")
        assert not registry.supports_file("main.py")


def _parse(source: str, filepath: str = "test.ts") -> TreeSitterParser:
    parser = get_parser(filepath)
    assert parser.parse(source, filepath) is True
    return parser


class TestImportExtraction:
    """Tests for import extraction."""

    def test_named_default_and_namespace_imports(self):
        parser = _parse('''
import React from 'react';
import { useState, useEffect as useMountEffect } from 'react';
import * as utils from './utils';
''', "app.js")

        imports = parser.extract_imports()
        assert [i.source for i in imports] == ["react", "react", "./utils"]
        assert imports[0].specifiers == frozenset({"default"})
        assert imports[1].specifiers == frozenset({"useState", "useEffect"})
        assert imports[2].specifiers == frozenset({"*"})

    def test_side_effect_import_has_no_specifiers(self):
        parser = _parse("import './styles.css';\n", "app.js")

        imports = parser.extract_imports()
        assert len(imports) == 1
        assert imports[0].source == "./styles.css"
        assert imports[0].specifiers == frozenset()

    def test_default_with_named_imports(self):
        parser = _parse("import Button, { Size } from './Button';\n", "app.tsx")

        assert parser.extract_imports()[0].specifiers == frozenset({"default", "Size"})

    def test_type_only_import(self):
        parser = _parse("import type { Props } from './types';\n")

        imp = parser.extract_imports()[0]
        assert imp.source == "./types"
        assert imp.specifiers == frozenset({"Props"})

    def test_reexports_are_imports(self):
        parser = _parse('''
export { alpha, beta as gamma } from './letters';
export * from './everything';
''')

        imports = parser.extract_imports()
        assert [i.source for i in imports] == ["./letters", "./everything"]
        assert imports[0].specifiers == frozenset({"alpha", "beta"})
        assert imports[1].specifiers == frozenset({"*"})
        assert parser.extract_exports() == {"alpha", "gamma"}

    def test_require_and_dynamic_import(self):
        parser = _parse('''
const fs = require('fs');
const config = require('./config');
async function load() {
    return import('./lazy');
}
''', "server.js")

        imports = parser.extract_imports()
        assert [i.source for i in imports] == ["fs", "./config", "./lazy"]
        assert all(i.specifiers == frozenset({"*"}) for i in imports)

    def test_imports_keep_declaration_order(self):
        parser = _parse('''
import { b } from './b';
import { a } from './a';
import { c } from './c';
''')

        assert [i.source for i in parser.extract_imports()] == ["./b", "./a", "./c"]

    def test_line_numbers(self):
        parser = _parse("\n\nimport { a } from './a';\n")

        assert parser.extract_imports()[0].line_number == 3


class TestExportExtraction:
    """Tests for export extraction."""

    def test_declaration_exports(self):
        parser = _parse('''
export function foo() {}
export class Bar {}
export const one = 1, two = 2;
export let counter = 0;
''', "lib.js")

        assert parser.extract_exports() == {"foo", "Bar", "one", "two", "counter"}

    def test_default_export(self):
        parser = _parse("export default function App() { return null; }\n", "App.jsx")

        assert parser.extract_exports() == {"default"}

    def test_export_clause_uses_alias(self):
        parser = _parse('''
const a = 1;
const b = 2;
export { a, b as renamed };
''')

        assert parser.extract_exports() == {"a", "renamed"}

    def test_typescript_declarations(self):
        parser = _parse('''
export interface Props { name: string }
export type Size = 'sm' | 'lg';
export enum Color { Red, Green }
''')

        assert parser.extract_exports() == {"Props", "Size", "Color"}

    def test_destructured_exports(self):
        parser = _parse("export const { left, right: renamed } = pair;\n", "lib.js")

        assert parser.extract_exports() == {"left", "renamed"}

    def test_long_expression_chain(self):
        chain = " + ".join(f"require('./m{i}')" if i == 2999 else "1" for i in range(3000))
        parser = _parse(f"export const total = {chain};\n", "sum.js")

        assert parser.extract_exports() == {"total"}
        assert [i.source for i in parser.extract_imports()] == ["./m2999"]

    def test_no_exports(self):
        parser = _parse("console.log('hi');\n", "script.js")

        assert parser.extract_exports() == set()


class TestParseFailures:
    """Tests for invalid source."""

    def test_syntax_error_returns_false(self):
        parser = get_parser("broken.ts")
        assert parser.parse("export const = ;\nfunction (", "broken.ts") is False
        assert not parser.is_parsed

    def test_reset_clears_state(self):
        parser = _parse("import { a } from './a';\nexport const b = a;\n")
        parser.reset()
        assert parser.extract_imports() == []
        assert parser.extract_exports() == set()
        assert parser.source is None

    def test_jsx_in_tsx_file(self):
        parser = _parse('''
import { Header } from './Header';
export default function Page() {
    return <Header title="x" />;
}
''', "Page.tsx")

        assert parser.extract_imports()[0].source == "./Header"
        assert parser.extract_exports() == {"default"}

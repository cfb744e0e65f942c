"""Tests for impact classification and reason text."""

import pytest

from impact_tree.core.impact import AffectingImport, classify, format_reason
from impact_tree.core.models import ChangeType, FileChange, ImportInfo
from impact_tree.tracing.import_resolver import ImportResolver


@pytest.fixture
def project(make_project):
    return make_project({
        "src/main.ts": "",
        "src/utils.ts": "",
        "src/other.ts": "",
    })


def _imp(source, *specifiers):
    return ImportInfo(source=source, specifiers=frozenset(specifiers))


class TestClassify:
    """Tests for deciding whether a file is affected."""

    def test_fine_grained_intersection(self, project):
        main = str(project / "src" / "main.ts")
        change = FileChange(str(project / "src" / "utils.ts"), ChangeType.MODIFY, ("foo", "baz"))
        imports = [_imp("./utils", "foo", "bar")]

        affecting = classify(main, imports, [change], ImportResolver(str(project)))
        assert affecting == [AffectingImport(change, ["foo"])]

    def test_fine_grained_disjoint_is_not_affected(self, project):
        main = str(project / "src" / "main.ts")
        change = FileChange(str(project / "src" / "utils.ts"), ChangeType.MODIFY, ("baz",))
        imports = [_imp("./utils", "foo", "bar")]

        assert classify(main, imports, [change], ImportResolver(str(project))) == []

    def test_whole_module_import_uses_every_modified_export(self, project):
        main = str(project / "src" / "main.ts")
        change = FileChange(str(project / "src" / "utils.ts"), ChangeType.MODIFY, ("baz", "bar"))
        imports = [_imp("./utils", "*")]

        affecting = classify(main, imports, [change], ImportResolver(str(project)))
        assert affecting[0].imported_specifiers == ["baz", "bar"]

    def test_modify_without_exports_is_coarse(self, project):
        main = str(project / "src" / "main.ts")
        change = FileChange(str(project / "src" / "utils.ts"), ChangeType.MODIFY)
        imports = [_imp("./utils", "foo")]

        affecting = classify(main, imports, [change], ImportResolver(str(project)))
        assert affecting == [AffectingImport(change, ["foo"])]

    def test_side_effect_import_of_added_file(self, project):
        main = str(project / "src" / "main.ts")
        change = FileChange(str(project / "src" / "utils.ts"), ChangeType.ADD)
        imports = [_imp("./utils")]

        affecting = classify(main, imports, [change], ImportResolver(str(project)))
        assert affecting == [AffectingImport(change, [])]

    def test_deleted_file_is_matched(self, project):
        main = str(project / "src" / "main.ts")
        change = FileChange(str(project / "src" / "removed.ts"), ChangeType.DELETE)
        imports = [_imp("./removed", "thing")]

        affecting = classify(main, imports, [change], ImportResolver(str(project)))
        assert len(affecting) == 1

    def test_unrelated_import(self, project):
        main = str(project / "src" / "main.ts")
        change = FileChange(str(project / "src" / "other.ts"), ChangeType.DELETE)
        imports = [_imp("./utils", "foo"), _imp("react", "useState")]

        assert classify(main, imports, [change], ImportResolver(str(project))) == []

    def test_entries_follow_change_then_import_order(self, project):
        main = str(project / "src" / "main.ts")
        utils = FileChange(str(project / "src" / "utils.ts"), ChangeType.MODIFY)
        other = FileChange(str(project / "src" / "other.ts"), ChangeType.ADD)
        imports = [
            _imp("./other", "x"),
            _imp("./utils", "a"),
            _imp("./utils", "b"),
        ]

        affecting = classify(main, imports, [utils, other], ImportResolver(str(project)))
        assert [(a.change, a.imported_specifiers) for a in affecting] == [
            (utils, ["a"]),
            (utils, ["b"]),
            (other, ["x"]),
        ]


class TestFormatReason:
    """Tests for reason text."""

    def test_deleted(self):
        change = FileChange("/app/src/old.ts", ChangeType.DELETE)
        assert format_reason([AffectingImport(change, ["a"])]) == "Imported file 'old.ts' was deleted"

    def test_added(self):
        change = FileChange("/app/src/new.ts", ChangeType.ADD)
        assert format_reason([AffectingImport(change, [])]) == "New file 'new.ts' was added that is imported"

    def test_modified_exports(self):
        change = FileChange("/app/src/utils.ts", ChangeType.MODIFY, ("bar", "foo"))
        reason = format_reason([AffectingImport(change, ["bar", "foo"])])
        assert reason == "Modified exports from 'utils.ts': bar, foo"

    def test_content_modified(self):
        change = FileChange("/app/src/utils.ts", ChangeType.MODIFY)
        assert format_reason([AffectingImport(change, ["foo"])]) == "File 'utils.ts' content was modified"

    def test_multiple_entries_join_with_newlines(self):
        deleted = FileChange("/app/src/old.ts", ChangeType.DELETE)
        added = FileChange("/app/src/new.ts", ChangeType.ADD)

        reason = format_reason([AffectingImport(deleted, []), AffectingImport(added, [])])
        assert reason.split("\n") == [
            "Imported file 'old.ts' was deleted",
            "New file 'new.ts' was added that is imported",
        ]

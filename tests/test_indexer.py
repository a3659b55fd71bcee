"""
End-to-end tests for indexing runs: crawl, parse, save, then search.
"""

from pathlib import Path

import pytest

from codeindex.exceptions import InvalidRootError
from codeindex.indexer import CodeIndexer, normalize_symbol_path
from codeindex.parser import ParserRegistry
from codeindex.schemas import IndexState, SearchRequest, Symbol, SymbolKind
from codeindex.storage import SQLiteStorage

pytestmark = pytest.mark.integration


@pytest.fixture
def test_class_project(temp_dir):
    root = temp_dir / "src"
    package = root / "com" / "test"
    package.mkdir(parents=True)
    (package / "test_class.py").write_text(
        "class TestClass:\n"
        "    my_field = None\n"
        "\n"
        "    def test_method(self):\n"
        "        my_var = 10\n"
        "        print(my_var)\n"
        "        self.other_method()\n"
        "\n"
        "    def other_method(self):\n"
        "        pass\n"
    )
    (package / "other_class.py").write_text(
        "class OtherClass:\n"
        "    def test_method(self):\n"
        "        pass\n"
    )
    return root


class TestEndToEnd:

    def test_index_and_search(self, test_class_project, db_path):
        report = CodeIndexer(db_path).index(test_class_project)
        assert report.files_indexed == 2
        assert report.files_failed == 0
        assert report.state == IndexState.COMPLETE

        with SQLiteStorage(db_path) as store:
            classes = store.search("TestClass")
            assert any(s.kind == SymbolKind.CLASS and s.name == "TestClass" for s in classes)

            fields = store.search("my_field")
            assert len(fields) == 1
            assert fields[0].kind == SymbolKind.FIELD
            assert fields[0].class_name == "TestClass"

            methods = store.search("test_method")
            assert len(methods) == 2
            assert all(s.kind == SymbolKind.METHOD for s in methods)
            assert {s.class_name for s in methods} == {"TestClass", "OtherClass"}

            variables = store.search("my_var")
            assert any(s.kind == SymbolKind.VARIABLE for s in variables)
            assert all(s.class_name == "TestClass" for s in variables)

            references = store.search("other_method")
            assert {s.kind for s in references} == {SymbolKind.METHOD, SymbolKind.REFERENCE}
            ref = next(s for s in references if s.kind == SymbolKind.REFERENCE)
            assert ref.reference_to == "com.test.test_class.TestClass.other_method"

    def test_container_qualified_search(self, test_class_project, db_path):
        CodeIndexer(db_path).index(test_class_project)
        with SQLiteStorage(db_path) as store:
            results = store.search("TestClass::test_method")
        assert len(results) == 1
        assert results[0].kind == SymbolKind.METHOD
        assert results[0].class_name == "TestClass"

    def test_substring_search(self, db_path):
        with SQLiteStorage(db_path) as store:
            store.save_symbols([
                Symbol(name="Alpha", kind=SymbolKind.CLASS, file_path="F1", line=1, signature="S1"),
                Symbol(name="Beta", kind=SymbolKind.METHOD, file_path="F2", line=2, signature="S2"),
            ])
            results = store.search("lp")
        assert [s.name for s in results] == ["Alpha"]

    def test_mixed_python_and_java_project(self, temp_project, db_path):
        java_dir = temp_project / "src" / "shapes"
        java_dir.mkdir(parents=True)
        (java_dir / "Shape.java").write_text(
            "package shapes;\n"
            "\n"
            "public interface Shape {\n"
            "    double area();\n"
            "}\n"
        )

        report = CodeIndexer(db_path).index(temp_project)

        assert report.files_indexed == 4
        with SQLiteStorage(db_path) as store:
            interfaces = store.search(SearchRequest.build(kinds=["interface"]))
            assert [(s.name, s.file_path, s.package_name) for s in interfaces] == [
                ("Shape", "src/shapes/Shape.java", "shapes"),
            ]
            assert [s.name for s in store.search("Shape::area")] == ["area"]

    def test_indexer_search(self, temp_project, db_path):
        indexer = CodeIndexer(db_path)
        indexer.index(temp_project)
        results = indexer.search(SearchRequest.build(query="find_user", kinds=["method"]))
        assert [s.name for s in results] == ["find_user"]


class TestFilters:

    @pytest.fixture
    def indexed(self, temp_project, db_path):
        CodeIndexer(db_path).index(temp_project)
        with SQLiteStorage(db_path) as store:
            yield store

    def test_kind_and_package_compose(self, indexed):
        request = SearchRequest.build(kinds=["method"], package_name="app.util")
        assert {s.name for s in indexed.search(request)} == {"normalize", "join_parts"}

    def test_class_filter(self, indexed):
        request = SearchRequest.build(kinds=["field"], class_name="UserService")
        assert {s.name for s in indexed.search(request)} == {"cache_size", "repo"}

    def test_glob_filter(self, indexed):
        results = indexed.search(SearchRequest(file_path_glob="app/s*.py"))
        assert results
        assert {s.file_path for s in results} == {"app/service.py"}

    def test_conflicting_filters_match_nothing(self, indexed):
        request = SearchRequest.build(query="find_user", kinds=["class"])
        assert indexed.search(request) == []


class TestLimits:

    def test_default_and_explicit_limit(self, db_path):
        with SQLiteStorage(db_path) as store:
            store.save_symbols([
                Symbol(name="CommonName", kind=SymbolKind.CLASS, file_path=f"F{i}", line=i + 1, signature=f"S{i}")
                for i in range(1100)
            ])
            assert len(store.search("CommonName")) == 1000
            assert len(store.search("CommonName", 10)) == 10


class TestResilience:

    def test_indexing_continues_on_parse_error(self, temp_dir, db_path):
        root = temp_dir / "src"
        root.mkdir()
        (root / "valid.py").write_text("class Valid:\n    pass\n")
        (root / "corrupt.py").write_text("this is not python {\n")

        report = CodeIndexer(db_path).index(root)

        assert report.files_seen == 2
        assert report.files_indexed == 1
        assert report.files_failed == 1
        assert report.failures[0].file_path == "corrupt.py"
        with SQLiteStorage(db_path) as store:
            assert len(store.search("Valid")) == 1

    def test_invalid_root_raises(self, temp_dir, db_path):
        indexer = CodeIndexer(db_path)
        with pytest.raises(InvalidRootError):
            indexer.index(temp_dir / "non_existent")
        assert not db_path.exists()

    def test_runs_append_unless_fresh(self, temp_project, db_path):
        indexer = CodeIndexer(db_path)
        first = indexer.index(temp_project)
        indexer.index(temp_project)
        with SQLiteStorage(db_path) as store:
            assert store.get_stats().total_symbols == 2 * first.symbols_saved

        indexer.index(temp_project, fresh=True)
        with SQLiteStorage(db_path) as store:
            assert store.get_stats().total_symbols == first.symbols_saved


class AbsolutePathParser:
    """Reports symbols with absolute paths, or with a fixed path if one is given."""

    def __init__(self, outside: Path = None):
        self.outside = outside

    def supported_extensions(self):
        return {".py"}

    def parse(self, path, source_root):
        target = self.outside if self.outside is not None else Path(path).absolute()
        return [Symbol(name="Thing", kind=SymbolKind.CLASS, file_path=str(target), line=1)]


class TestPathPortability:

    def test_relative_path_stored(self, temp_dir, db_path):
        root = temp_dir / "project_root"
        root.mkdir()
        (root / "a.py").write_text("class A:\n    pass\n")

        CodeIndexer(db_path).index(root)

        with SQLiteStorage(db_path) as store:
            results = store.search("A")
        assert len(results) == 1
        assert results[0].file_path == "a.py"

    def test_absolute_paths_inside_root_are_relativized(self, temp_dir, db_path):
        root = temp_dir / "project_root"
        (root / "pkg").mkdir(parents=True)
        (root / "pkg" / "mod.py").write_text("x = 1\n")
        registry = ParserRegistry().register(AbsolutePathParser())

        CodeIndexer(db_path, registry).index(root)

        with SQLiteStorage(db_path) as store:
            assert [s.file_path for s in store.get_all()] == ["pkg/mod.py"]

    def test_absolute_paths_outside_root_fail_the_file(self, temp_dir, db_path):
        root = temp_dir / "project_root"
        root.mkdir()
        (root / "mod.py").write_text("x = 1\n")
        registry = ParserRegistry().register(AbsolutePathParser(outside=temp_dir / "elsewhere.py"))

        report = CodeIndexer(db_path, registry).index(root)

        assert report.files_failed == 1
        assert "outside project root" in report.failures[0].error
        with SQLiteStorage(db_path) as store:
            assert store.get_all() == []

    def test_normalize_keeps_relative_symbol(self, temp_dir):
        symbol = Symbol(name="x", kind=SymbolKind.VARIABLE, file_path="a/b.py", line=1)
        assert normalize_symbol_path(symbol, temp_dir) is symbol

    def test_relative_paths_escaping_root_fail_the_file(self, temp_dir, db_path):
        root = temp_dir / "project_root"
        root.mkdir()
        (root / "mod.py").write_text("x = 1\n")
        registry = ParserRegistry().register(AbsolutePathParser(outside=Path("../../etc/x.py")))

        report = CodeIndexer(db_path, registry).index(root)

        assert report.files_failed == 1
        assert "outside project root" in report.failures[0].error
        with SQLiteStorage(db_path) as store:
            assert store.get_all() == []

    @pytest.mark.parametrize("file_path", ["../x.py", "../../etc/x.py", "pkg/../../x.py"])
    def test_normalize_rejects_parent_components(self, temp_dir, file_path):
        symbol = Symbol(name="x", kind=SymbolKind.VARIABLE, file_path=file_path, line=1)
        with pytest.raises(ValueError, match="outside project root"):
            normalize_symbol_path(symbol, temp_dir)

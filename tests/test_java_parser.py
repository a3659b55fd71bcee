"""
Tests for the tree-sitter Java parser.
"""

import pytest

from codeindex.exceptions import ParserError
from codeindex.parser import JavaParser
from codeindex.schemas import SymbolKind

parser = JavaParser()


def _find(symbols, name, kind):
    matches = [s for s in symbols if s.name == name and s.kind == kind]
    assert matches, f"{kind} {name} not found"
    return matches[0]


def _write(root, relative, source):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source)
    return path


class TestDeclarations:

    def test_supported_extensions(self):
        assert parser.supported_extensions() == {".java"}

    def test_class_field_and_method(self, temp_dir):
        path = _write(temp_dir, "io/appform/test/TestClass.java", (
            "package io.appform.test;\n"
            "\n"
            "public class TestClass {\n"
            "    private String name;\n"
            "    \n"
            "    public void hello() {\n"
            "        System.out.println(\"Hello \" + name);\n"
            "    }\n"
            "}\n"
        ))
        symbols = parser.parse(path, temp_dir)
        assert len(symbols) >= 3

        cls = _find(symbols, "TestClass", SymbolKind.CLASS)
        assert cls.package_name == "io.appform.test"
        assert cls.file_path == "io/appform/test/TestClass.java"
        assert cls.line == 3
        assert cls.class_name is None

        method = _find(symbols, "hello", SymbolKind.METHOD)
        assert method.class_name == "TestClass"
        assert method.signature == "hello()"
        assert method.line == 6

        field = _find(symbols, "name", SymbolKind.FIELD)
        assert field.signature == "String name"
        assert field.line == 4

    def test_interface(self, temp_dir):
        path = _write(temp_dir, "shapes/Shape.java", (
            "package shapes;\n"
            "\n"
            "public interface Shape {\n"
            "    double UNIT = 1.0;\n"
            "    double area();\n"
            "}\n"
        ))
        symbols = parser.parse(path, temp_dir)

        shape = _find(symbols, "Shape", SymbolKind.INTERFACE)
        assert shape.line == 3
        assert shape.package_name == "shapes"
        assert not [s for s in symbols if s.kind == SymbolKind.CLASS]
        assert _find(symbols, "area", SymbolKind.METHOD).class_name == "Shape"
        assert _find(symbols, "UNIT", SymbolKind.FIELD).signature == "double UNIT"

    def test_locals_constructors_and_nested_types(self, temp_dir):
        path = _write(temp_dir, "app/Service.java", SERVICE_SOURCE)
        symbols = parser.parse(path, temp_dir)

        constructor = [s for s in symbols if s.kind == SymbolKind.METHOD and s.name == "Service"]
        assert [s.signature for s in constructor] == ["Service(Repo)"]
        assert _find(symbols, "total", SymbolKind.METHOD).signature == "total(List<String>)"
        assert _find(symbols, "repo", SymbolKind.FIELD).signature == "Repo repo"

        total = _find(symbols, "sum", SymbolKind.VARIABLE)
        assert total.line == 13
        assert total.signature == "int sum"
        assert total.class_name == "Service"
        assert _find(symbols, "item", SymbolKind.VARIABLE).signature == "String item"

        assert _find(symbols, "Repo", SymbolKind.CLASS).class_name == "Service"
        assert _find(symbols, "count", SymbolKind.METHOD).class_name == "Repo"

    def test_file_without_package(self, temp_dir):
        path = _write(temp_dir, "Plain.java", "class Plain {}\n")
        symbols = parser.parse(path, temp_dir)
        assert [(s.name, s.kind, s.package_name, s.file_path) for s in symbols] == [
            ("Plain", SymbolKind.CLASS, None, "Plain.java"),
        ]


SERVICE_SOURCE = (
    "package app;\n"
    "\n"
    "import java.util.List;\n"
    "\n"
    "public class Service {\n"
    "    private final Repo repo;\n"
    "\n"
    "    public Service(Repo repo) {\n"
    "        this.repo = repo;\n"
    "    }\n"
    "\n"
    "    public int total(List<String> items) {\n"
    "        int sum = 0;\n"
    "        for (String item : items) {\n"
    "            sum += helper(item);\n"
    "        }\n"
    "        return sum + this.repo.count();\n"
    "    }\n"
    "\n"
    "    private int helper(String value) {\n"
    "        return value.length();\n"
    "    }\n"
    "\n"
    "    static class Repo {\n"
    "        int count() {\n"
    "            return 0;\n"
    "        }\n"
    "    }\n"
    "}\n"
)


class TestReferences:

    @pytest.fixture
    def service_symbols(self, temp_dir):
        return parser.parse(_write(temp_dir, "app/Service.java", SERVICE_SOURCE), temp_dir)

    def test_call_to_own_method(self, service_symbols):
        ref = _find(service_symbols, "helper", SymbolKind.REFERENCE)
        assert ref.reference_to == "app.Service.helper"
        assert ref.line == 15
        assert ref.signature == "sum += helper(item);"

    def test_call_through_field_type(self, service_symbols):
        ref = _find(service_symbols, "count", SymbolKind.REFERENCE)
        assert ref.reference_to == "app.Service.Repo.count"

    def test_call_on_unknown_type_unresolved(self, service_symbols):
        assert _find(service_symbols, "length", SymbolKind.REFERENCE).reference_to is None

    def test_variable_uses(self, service_symbols):
        refs = {(s.name, s.line, s.reference_to) for s in service_symbols
                if s.kind == SymbolKind.REFERENCE and s.name in ("sum", "items", "item")}
        assert ("items", 14, "items") in refs
        assert ("item", 15, "item") in refs
        assert ("sum", 17, "sum") in refs

    def test_imported_types_resolved(self, temp_dir):
        path = _write(temp_dir, "io/appform/test/ExternalTest.java", (
            "package io.appform.test;\n"
            "import org.slf4j.Logger;\n"
            "import org.slf4j.LoggerFactory;\n"
            "\n"
            "public class ExternalTest {\n"
            "    private static final Logger log = LoggerFactory.getLogger(ExternalTest.class);\n"
            "    public void doLog() {\n"
            "        log.info(\"Hello\");\n"
            "    }\n"
            "}\n"
        ))
        symbols = parser.parse(path, temp_dir)
        targets = {s.reference_to for s in symbols if s.kind == SymbolKind.REFERENCE}
        assert "org.slf4j.LoggerFactory.getLogger" in targets
        assert "org.slf4j.Logger.info" in targets

        log_use = _find(symbols, "log", SymbolKind.REFERENCE)
        assert log_use.line == 8
        assert log_use.reference_to == "io.appform.test.ExternalTest.log"

    def test_field_use_and_unresolved_call(self, temp_dir):
        path = _write(temp_dir, "io/appform/test/TestClass.java", (
            "package io.appform.test;\n"
            "public class TestClass {\n"
            "    private String name;\n"
            "    public void hello() {\n"
            "        System.out.println(\"Hello \" + name);\n"
            "    }\n"
            "}\n"
        ))
        symbols = parser.parse(path, temp_dir)
        assert _find(symbols, "println", SymbolKind.REFERENCE).reference_to is None
        assert _find(symbols, "name", SymbolKind.REFERENCE).reference_to == "io.appform.test.TestClass.name"

    def test_static_import(self, temp_dir):
        path = _write(temp_dir, "Util.java", (
            "import static java.util.Collections.emptyList;\n"
            "\n"
            "class Util {\n"
            "    Object make() {\n"
            "        return emptyList();\n"
            "    }\n"
            "}\n"
        ))
        ref = _find(parser.parse(path, temp_dir), "emptyList", SymbolKind.REFERENCE)
        assert ref.reference_to == "java.util.Collections.emptyList"
        assert ref.class_name == "Util"

    def test_enum_constant_use(self, temp_dir):
        path = _write(temp_dir, "Color.java", (
            "enum Color {\n"
            "    RED, GREEN;\n"
            "\n"
            "    Color next() {\n"
            "        return RED;\n"
            "    }\n"
            "}\n"
        ))
        symbols = parser.parse(path, temp_dir)
        assert _find(symbols, "Color", SymbolKind.CLASS).line == 1
        ref = _find(symbols, "RED", SymbolKind.REFERENCE)
        assert ref.line == 5
        assert ref.reference_to == "Color.RED"


class TestFailures:

    def test_syntax_error(self, temp_dir):
        path = _write(temp_dir, "Broken.java", "public class Broken {\n    void oops( {\n}\n")
        with pytest.raises(ParserError) as exc_info:
            parser.parse(path, temp_dir)
        assert exc_info.value.file_path == "Broken.java"
        assert "syntax error" in str(exc_info.value)

    def test_undecodable_file(self, temp_dir):
        path = temp_dir / "Binary.java"
        path.write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(ParserError, match="could not read"):
            parser.parse(path, temp_dir)

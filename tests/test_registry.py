from pathlib import Path

import pytest

from codeindex.parser import JavaParser, Parser, ParserRegistry, PythonParser, default_registry
from codeindex.schemas import Symbol, SymbolKind

pytestmark = pytest.mark.fast


class StubParser:
    def __init__(self, label, extensions):
        self.label = label
        self._extensions = set(extensions)

    def supported_extensions(self):
        return set(self._extensions)

    def parse(self, path, source_root):
        return [Symbol(name=self.label, kind=SymbolKind.CLASS, file_path=Path(path).name, line=1)]


def test_stub_satisfies_protocol():
    assert isinstance(StubParser("x", {".x"}), Parser)
    assert isinstance(PythonParser(), Parser)


def test_first_registered_parser_wins():
    first = StubParser("first", {".java"})
    second = StubParser("second", {".java", ".kt"})
    registry = ParserRegistry().register(first).register(second)

    assert registry.parser_for("src/Main.java") is first
    assert registry.parser_for(Path("src/Main.kt")) is second


def test_unknown_suffix_has_no_parser():
    registry = ParserRegistry().register(StubParser("x", {".java"}))
    assert registry.parser_for("README.md") is None
    assert registry.parser_for("Makefile") is None


def test_supported_extensions_union():
    registry = ParserRegistry()
    registry.register(StubParser("a", {".java"}))
    registry.register(StubParser("b", {".kt", ".java"}))
    assert registry.supported_extensions() == {".java", ".kt"}
    assert len(registry) == 2


def test_default_registry_handles_python():
    registry = default_registry()
    assert isinstance(registry.parser_for("pkg/mod.py"), PythonParser)
    assert ".py" in registry.supported_extensions()


def test_default_registry_handles_java():
    registry = default_registry()
    assert isinstance(registry.parser_for("src/Main.java"), JavaParser)
    assert isinstance(JavaParser(), Parser)
    assert registry.supported_extensions() >= {".py", ".java"}

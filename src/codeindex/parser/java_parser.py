"""
Java support built on tree-sitter.

Declarations map to CLASS, INTERFACE, METHOD, FIELD and VARIABLE symbols.
Method calls and plain uses of known fields and variables become REFERENCE
symbols. ``reference_to`` is resolved from the file alone: types declared in
it, single-type and static imports, and the declared types of fields,
parameters and locals.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser

from codeindex.exceptions import ParserError
from codeindex.logging_config import logger
from codeindex.schemas import Symbol, SymbolKind
from .config import (
    JAVA_CLASS_NODES,
    JAVA_EXTENSIONS,
    JAVA_FIELD_NODES,
    JAVA_INTERFACE_NODES,
    JAVA_METHOD_NODES,
    JAVA_NON_VALUE_PARENTS,
    SOURCE_ENCODING,
)
from .python_parser import relative_file_path

TYPE_NODES = JAVA_CLASS_NODES | JAVA_INTERFACE_NODES


def _text(node: Node) -> str:
    return node.text.decode(SOURCE_ENCODING)


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _same(a: Optional[Node], b: Node) -> bool:
    return a is not None and a.id == b.id


def _type_name(node: Optional[Node]) -> Optional[str]:
    """Base name of a type node: 'List<String>' -> 'List', 'Foo[]' -> 'Foo'."""
    if node is None:
        return None
    if node.type in ("type_identifier", "scoped_type_identifier"):
        return _text(node)
    if node.type == "generic_type" and node.named_children:
        return _type_name(node.named_children[0])
    if node.type == "array_type":
        return _type_name(node.child_by_field_name("element"))
    return None


def _first_error_line(node: Node) -> int:
    if node.type == "ERROR" or node.is_missing:
        return _line(node)
    for child in node.children:
        if child.has_error:
            return _first_error_line(child)
    return _line(node)


class JavaParser:
    """
    Extracts declarations, calls and name uses from Java source.
    """

    def __init__(self):
        self._parser = Parser()
        self._parser.language = Language(tsjava.language())

    def supported_extensions(self) -> Set[str]:
        return set(JAVA_EXTENSIONS)

    def parse(self, path: Path, source_root: Path) -> List[Symbol]:
        path = Path(path)
        source_root = Path(source_root)
        file_path = relative_file_path(path, source_root)

        try:
            content = path.read_text(encoding=SOURCE_ENCODING)
        except (OSError, UnicodeDecodeError) as e:
            raise ParserError(file_path, f"could not read file: {e}") from e

        root = self._parser.parse(content.encode(SOURCE_ENCODING)).root_node
        if root.has_error:
            raise ParserError(file_path, f"syntax error near line {_first_error_line(root)}")

        collector = _JavaSymbolCollector(file_path, content.splitlines())
        collector.collect(root)
        logger.debug(f"tree-sitter parser extracted {len(collector.symbols)} symbols from {file_path}")
        return collector.symbols


@dataclass
class _TypeScope:
    name: str
    qualified: str
    methods: Set[str] = field(default_factory=set)
    # field name -> base type name, None when primitive or unknown
    fields: Dict[str, Optional[str]] = field(default_factory=dict)


class _JavaSymbolCollector:
    """
    Walks one compilation unit, tracking enclosing types and the variables
    visible in the current method.
    """

    def __init__(self, file_path: str, lines: List[str]):
        self.file_path = file_path
        self.lines = lines
        self.package: Optional[str] = None
        self.imports: Dict[str, str] = {}
        self.static_imports: Dict[str, str] = {}
        self.declared_types: Dict[str, str] = {}
        self.symbols: List[Symbol] = []
        self.type_stack: List[_TypeScope] = []
        self.variables: Dict[str, Optional[str]] = {}

    def collect(self, root: Node) -> None:
        for child in root.named_children:
            if child.type == "package_declaration":
                self.package = _dotted_name(child)
            elif child.type == "import_declaration":
                self._record_import(child)
        self._record_declared_types(root, self.package)
        self._visit(root)

    # ---- file-level tables ----

    def _record_import(self, node: Node) -> None:
        name = _dotted_name(node)
        if name is None or any(child.type == "asterisk" for child in node.children):
            return
        simple = name.rsplit(".", 1)[-1]
        if any(child.type == "static" for child in node.children):
            self.static_imports[simple] = name
        else:
            self.imports[simple] = name

    def _record_declared_types(self, node: Node, outer: Optional[str]) -> None:
        for child in node.named_children:
            if child.type not in TYPE_NODES:
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            name = _text(name_node)
            qualified = f"{outer}.{name}" if outer else name
            self.declared_types.setdefault(name, qualified)
            body = child.child_by_field_name("body")
            if body is not None:
                self._record_declared_types(body, qualified)

    def _qualify_type(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        head, _, rest = name.partition(".")
        for table in (self.declared_types, self.imports):
            if head in table:
                return f"{table[head]}.{rest}" if rest else table[head]
        # Fully qualified names start with a lower-case package segment
        if rest and head[:1].islower():
            return name
        return None

    def _lookup_variable(self, name: str) -> Optional[Tuple[Optional[str], Optional[str]]]:
        """(owning type or None for locals, declared type) of a visible variable."""
        if name in self.variables:
            return None, self.variables[name]
        for scope in reversed(self.type_stack):
            if name in scope.fields:
                return scope.qualified, scope.fields[name]
        return None

    # ---- traversal ----

    def _visit(self, node: Node) -> None:
        kind = node.type
        if kind in TYPE_NODES:
            self._visit_type(node)
        elif kind in JAVA_METHOD_NODES:
            self._visit_method(node)
        elif kind in JAVA_FIELD_NODES:
            self._visit_declarators(node, SymbolKind.FIELD)
        elif kind == "local_variable_declaration":
            self._visit_declarators(node, SymbolKind.VARIABLE)
        elif kind == "enhanced_for_statement":
            self._visit_enhanced_for(node)
        elif kind == "method_invocation":
            self._visit_call(node)
        elif kind == "identifier":
            self._visit_identifier(node)
        else:
            self._visit_children(node)

    def _visit_children(self, node: Node) -> None:
        for child in node.named_children:
            self._visit(child)

    def _visit_type(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            self._visit_children(node)
            return

        name = _text(name_node)
        kind = SymbolKind.INTERFACE if node.type in JAVA_INTERFACE_NODES else SymbolKind.CLASS
        self._add(name, kind, name_node)

        outer = self.type_stack[-1].qualified if self.type_stack else self.package
        scope = _TypeScope(name, f"{outer}.{name}" if outer else name)
        record_components = node.child_by_field_name("parameters")
        if record_components is not None:
            for param in record_components.named_children:
                declared = _parameter(param)
                if declared is not None:
                    scope.fields[_text(declared[0])] = _type_name(declared[1])
        body = node.child_by_field_name("body")
        if body is not None:
            _record_members(body, scope)

        self.type_stack.append(scope)
        self._visit_children(node)
        self.type_stack.pop()

    def _visit_method(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        params = node.child_by_field_name("parameters")

        outer_variables = self.variables
        self.variables = dict(outer_variables)
        param_types: List[str] = []
        if params is not None:
            for param in params.named_children:
                declared = _parameter(param)
                if declared is None:
                    continue
                param_name, type_node = declared
                type_text = _text(type_node)
                param_types.append(f"{type_text}..." if param.type == "spread_parameter" else type_text)
                self.variables[_text(param_name)] = _type_name(type_node)

        if name_node is not None:
            name = _text(name_node)
            self._add(name, SymbolKind.METHOD, name_node, signature=f"{name}({', '.join(param_types)})")

        body = node.child_by_field_name("body")
        if body is not None:
            self._record_locals(body)
        self._visit_children(node)
        self.variables = outer_variables

    def _record_locals(self, body: Node) -> None:
        pending = [body]
        while pending:
            node = pending.pop()
            if node.type == "local_variable_declaration":
                type_name = _type_name(node.child_by_field_name("type"))
                for declarator in node.children_by_field_name("declarator"):
                    self._remember(declarator.child_by_field_name("name"), type_name)
            elif node.type == "enhanced_for_statement":
                self._remember(node.child_by_field_name("name"), _type_name(node.child_by_field_name("type")))
            elif node.type == "catch_formal_parameter":
                self._remember(node.child_by_field_name("name"), None)
            elif node.type == "class_body":
                # Methods of anonymous classes record their own locals
                continue
            pending.extend(node.named_children)

    def _remember(self, name_node: Optional[Node], type_name: Optional[str]) -> None:
        if name_node is not None:
            self.variables[_text(name_node)] = type_name

    def _visit_declarators(self, node: Node, kind: SymbolKind) -> None:
        type_node = node.child_by_field_name("type")
        type_text = _text(type_node) if type_node is not None else ""
        for declarator in node.children_by_field_name("declarator"):
            name_node = declarator.child_by_field_name("name")
            if name_node is not None:
                name = _text(name_node)
                self._add(name, kind, name_node, signature=f"{type_text} {name}".strip())
        self._visit_children(node)

    def _visit_enhanced_for(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        type_node = node.child_by_field_name("type")
        if name_node is not None:
            name = _text(name_node)
            signature = f"{_text(type_node)} {name}" if type_node is not None else name
            self._add(name, SymbolKind.VARIABLE, name_node, signature=signature)
        self._visit_children(node)

    def _visit_call(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            name = _text(name_node)
            target = self._resolve_call(node.child_by_field_name("object"), name)
            self._add(name, SymbolKind.REFERENCE, name_node, reference_to=target)
        self._visit_children(node)

    def _visit_identifier(self, node: Node) -> None:
        if not _is_value_use(node):
            return
        name = _text(node)
        found = self._lookup_variable(name)
        if found is None:
            return
        owner = found[0]
        self._add(name, SymbolKind.REFERENCE, node, reference_to=f"{owner}.{name}" if owner else name)

    # ---- call resolution ----

    def _resolve_call(self, receiver: Optional[Node], name: str) -> Optional[str]:
        if receiver is None:
            for scope in reversed(self.type_stack):
                if name in scope.methods:
                    return f"{scope.qualified}.{name}"
            return self.static_imports.get(name)

        if receiver.type == "this":
            if self.type_stack and name in self.type_stack[-1].methods:
                return f"{self.type_stack[-1].qualified}.{name}"
            return None

        owner = self._receiver_type(receiver)
        return f"{owner}.{name}" if owner else None

    def _receiver_type(self, receiver: Node) -> Optional[str]:
        if receiver.type == "identifier":
            found = self._lookup_variable(_text(receiver))
            if found is not None:
                return self._qualify_type(found[1])
            # Static call on a type name
            return self._qualify_type(_text(receiver))

        if receiver.type == "field_access":
            target = receiver.child_by_field_name("object")
            member = receiver.child_by_field_name("field")
            if target is None or member is None:
                return None
            if target.type == "this":
                if self.type_stack:
                    return self._qualify_type(self.type_stack[-1].fields.get(_text(member)))
                return None
            text = _text(receiver)
            head = text.split(".", 1)[0]
            if all(part.isidentifier() for part in text.split(".")) and self._lookup_variable(head) is None:
                return self._qualify_type(text)
            return None

        if receiver.type == "object_creation_expression":
            return self._qualify_type(_type_name(receiver.child_by_field_name("type")))
        return None

    # ---- helpers ----

    def _source_line(self, lineno: int) -> Optional[str]:
        if 1 <= lineno <= len(self.lines):
            return self.lines[lineno - 1].strip() or None
        return None

    def _add(
        self,
        name: str,
        kind: SymbolKind,
        anchor: Node,
        signature: Optional[str] = None,
        reference_to: Optional[str] = None,
    ) -> None:
        lineno = _line(anchor)
        self.symbols.append(Symbol(
            name=name,
            kind=kind,
            class_name=self.type_stack[-1].name if self.type_stack else None,
            package_name=self.package,
            file_path=self.file_path,
            line=lineno,
            signature=signature if signature is not None else self._source_line(lineno),
            reference_to=reference_to,
        ))


def _dotted_name(node: Node) -> Optional[str]:
    for child in node.named_children:
        if child.type in ("scoped_identifier", "identifier"):
            return _text(child)
    return None


def _parameter(param: Node) -> Optional[Tuple[Node, Node]]:
    """(name node, type node) of a formal or varargs parameter."""
    if param.type == "formal_parameter":
        name_node = param.child_by_field_name("name")
        type_node = param.child_by_field_name("type")
    elif param.type == "spread_parameter":
        parts = [child for child in param.named_children if child.type != "modifiers"]
        type_node = parts[0] if parts else None
        declarator = next((child for child in parts if child.type == "variable_declarator"), None)
        name_node = declarator.child_by_field_name("name") if declarator is not None else None
    else:
        return None
    if name_node is None or type_node is None:
        return None
    return name_node, type_node


def _record_members(body: Node, scope: _TypeScope) -> None:
    for member in body.named_children:
        if member.type == "enum_body_declarations":
            _record_members(member, scope)
        elif member.type in JAVA_METHOD_NODES:
            name_node = member.child_by_field_name("name")
            if name_node is not None:
                scope.methods.add(_text(name_node))
        elif member.type in JAVA_FIELD_NODES:
            type_name = _type_name(member.child_by_field_name("type"))
            for declarator in member.children_by_field_name("declarator"):
                name_node = declarator.child_by_field_name("name")
                if name_node is not None:
                    scope.fields[_text(name_node)] = type_name
        elif member.type == "enum_constant":
            name_node = member.child_by_field_name("name")
            if name_node is not None:
                scope.fields[_text(name_node)] = scope.name


def _is_value_use(node: Node) -> bool:
    """False for identifiers that name a declaration, member, label or parameter."""
    parent = node.parent
    if parent is None or parent.type in JAVA_NON_VALUE_PARENTS:
        return False
    for field_name in ("name", "field", "key", "parameters"):
        if _same(parent.child_by_field_name(field_name), node):
            return False
    return True

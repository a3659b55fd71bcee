import ast
from pathlib import Path
from typing import Dict, List, Optional, Set

from codeindex.exceptions import ParserError
from codeindex.logging_config import logger
from codeindex.schemas import Symbol, SymbolKind
from .config import INSTANCE_RECEIVERS, PACKAGE_INIT_STEM, PYTHON_EXTENSIONS, SOURCE_ENCODING


def relative_file_path(path: Path, source_root: Path) -> str:
    """
    Path of the file relative to the root, '/'-separated.

    Files outside the root keep their absolute path so the caller can
    reject them.
    """
    try:
        return path.relative_to(source_root).as_posix()
    except ValueError:
        return str(path.absolute())


def module_name(relative_path: str) -> Optional[str]:
    """
    Dotted module path for a root-relative file.

    'pkg/mod.py' -> 'pkg.mod', 'pkg/__init__.py' -> 'pkg'.
    """
    parts = list(Path(relative_path).with_suffix("").parts)
    if parts and parts[-1] == PACKAGE_INIT_STEM:
        parts = parts[:-1]
    if not parts or Path(relative_path).is_absolute():
        return None
    return ".".join(parts)


class PythonParser:
    """
    Extracts declarations and call sites from Python source using the
    standard library ``ast`` module.
    """

    def supported_extensions(self) -> Set[str]:
        return set(PYTHON_EXTENSIONS)

    def parse(self, path: Path, source_root: Path) -> List[Symbol]:
        path = Path(path)
        source_root = Path(source_root)
        file_path = relative_file_path(path, source_root)

        try:
            content = path.read_text(encoding=SOURCE_ENCODING)
        except (OSError, UnicodeDecodeError) as e:
            raise ParserError(file_path, f"could not read file: {e}") from e

        try:
            tree = ast.parse(content, filename=str(path))
        except (SyntaxError, ValueError) as e:
            raise ParserError(file_path, f"syntax error: {e}") from e

        visitor = _SymbolVisitor(file_path, module_name(file_path), content.splitlines(), tree)
        visitor.visit(tree)
        logger.debug(f"AST parser extracted {len(visitor.symbols)} symbols from {file_path}")
        return visitor.symbols


class _SymbolVisitor(ast.NodeVisitor):
    """
    Walks one module, tracking the enclosing class and function scopes.
    """

    def __init__(self, file_path: str, module: Optional[str], lines: List[str], tree: ast.Module):
        self.file_path = file_path
        self.module = module
        self.lines = lines
        self.symbols: List[Symbol] = []
        self.class_stack: List[str] = []
        # "class" or "function" for each open scope, innermost last
        self.scopes: List[str] = []
        self.module_defs = _module_level_definitions(tree)
        self.module_names = self.module_defs | _module_level_assignments(tree)
        self.class_methods = _methods_by_class(tree)

    # ---- helpers ----

    @property
    def current_class(self) -> Optional[str]:
        return self.class_stack[-1] if self.class_stack else None

    def _signature(self, lineno: int) -> Optional[str]:
        if 1 <= lineno <= len(self.lines):
            return self.lines[lineno - 1].strip() or None
        return None

    def _qualified(self, *names: str) -> str:
        if self.module:
            return ".".join((self.module,) + names)
        return ".".join(names)

    def _add(self, name: str, kind: SymbolKind, lineno: int, reference_to: Optional[str] = None) -> None:
        self.symbols.append(Symbol(
            name=name,
            kind=kind,
            class_name=self.current_class,
            package_name=self.module,
            file_path=self.file_path,
            line=lineno,
            signature=self._signature(lineno),
            reference_to=reference_to,
        ))

    # ---- declarations ----

    def visit_ClassDef(self, node: ast.ClassDef):
        self._add(node.name, SymbolKind.CLASS, node.lineno)
        self.class_stack.append(node.name)
        self.scopes.append("class")
        self.generic_visit(node)
        self.scopes.pop()
        self.class_stack.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef):
        self._add(node.name, SymbolKind.METHOD, node.lineno)
        self.scopes.append("function")
        self.generic_visit(node)
        self.scopes.pop()

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef):
        # Treat async functions the same as regular functions
        self.visit_FunctionDef(node)

    def visit_Assign(self, node: ast.Assign):
        for target in node.targets:
            self._record_target(target, node.lineno)
        self.generic_visit(node)

    def visit_AnnAssign(self, node: ast.AnnAssign):
        self._record_target(node.target, node.lineno)
        self.generic_visit(node)

    def _record_target(self, target: ast.expr, lineno: int) -> None:
        scope = self.scopes[-1] if self.scopes else None

        if isinstance(target, (ast.Tuple, ast.List)):
            for element in target.elts:
                self._record_target(element, lineno)
        elif isinstance(target, ast.Starred):
            self._record_target(target.value, lineno)
        elif isinstance(target, ast.Name):
            kind = SymbolKind.FIELD if scope == "class" else SymbolKind.VARIABLE
            self._add(target.id, kind, lineno)
        elif (
            isinstance(target, ast.Attribute)
            and isinstance(target.value, ast.Name)
            and target.value.id in INSTANCE_RECEIVERS
            and scope == "function"
            and self.current_class is not None
        ):
            self._add(target.attr, SymbolKind.FIELD, lineno)

    # ---- references ----

    def visit_Call(self, node: ast.Call):
        func = node.func
        if isinstance(func, ast.Name):
            target = None
            if func.id in self.module_defs:
                target = self._qualified(func.id)
            self._add(func.id, SymbolKind.REFERENCE, node.lineno, target)
        elif isinstance(func, ast.Attribute):
            target = None
            if (
                isinstance(func.value, ast.Name)
                and func.value.id in INSTANCE_RECEIVERS
                and self.current_class is not None
                and func.attr in self.class_methods.get(self.current_class, ())
            ):
                target = self._qualified(self.current_class, func.attr)
            self._add(func.attr, SymbolKind.REFERENCE, node.lineno, target)

        # A called name is already recorded above
        if not isinstance(func, ast.Name):
            self.visit(func)
        for arg in node.args:
            self.visit(arg)
        for keyword in node.keywords:
            self.visit(keyword)

    def visit_Name(self, node: ast.Name):
        # Uses of module-level names outside a call: base classes, callbacks, constants
        if isinstance(node.ctx, ast.Load) and node.id in self.module_names:
            self._add(node.id, SymbolKind.REFERENCE, node.lineno, self._qualified(node.id))


def _module_level_definitions(tree: ast.Module) -> Set[str]:
    return {
        node.name
        for node in tree.body
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef))
    }


def _module_level_assignments(tree: ast.Module) -> Set[str]:
    names: Set[str] = set()
    for node in tree.body:
        if isinstance(node, ast.Assign):
            targets = node.targets
        elif isinstance(node, ast.AnnAssign):
            targets = [node.target]
        else:
            continue
        for target in targets:
            for sub in ast.walk(target):
                if isinstance(sub, ast.Name) and isinstance(sub.ctx, ast.Store):
                    names.add(sub.id)
    return names


def _methods_by_class(tree: ast.Module) -> Dict[str, Set[str]]:
    methods: Dict[str, Set[str]] = {}
    for node in ast.walk(tree):
        if isinstance(node, ast.ClassDef):
            names = methods.setdefault(node.name, set())
            for item in node.body:
                if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    names.add(item.name)
    return methods

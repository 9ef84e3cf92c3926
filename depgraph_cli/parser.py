"""Source front ends that populate an :class:`EntityStore`.

Python is parsed with Tree-sitter when the grammar is installed:
- Error-tolerant parsing (broken / incomplete files still yield entities)
- Raw call text taken straight from the concrete syntax tree

Falls back to Python's built-in ``ast`` module when tree-sitter is unavailable.
Go support lives in :mod:`depgraph_cli.go_parser`.
"""

from __future__ import annotations

import ast
import copy
import importlib
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .entity_store import EntityStore
from .languages import LANGUAGE_MAP
from .models import EntityKind

logger = logging.getLogger(__name__)

SKIP_DIRS: Set[str] = {
    ".venv", "venv", "__pycache__", "node_modules", ".git", "vendor",
    "site-packages", ".tox", ".pytest_cache", "build", "dist",
    ".mypy_cache", ".ruff_cache", "htmlcov", ".eggs", ".depgraph",
}

_DOTTED_NAME = re.compile(r"^[A-Za-z_][\w.]*$")
_SPACED_DOT = re.compile(r"\s*\.\s*")
_WHITESPACE = re.compile(r"\s+")


# ===================================================================
# Shared helpers
# ===================================================================

def load_ts_parser(module_name: str) -> Optional[Any]:
    """Return a tree-sitter parser for the grammar package *module_name*, or None."""
    try:
        from tree_sitter import Language, Parser as TSParser  # type: ignore[import-untyped]
    except ImportError:
        logger.warning(
            "tree-sitter is not installed -- "
            "Tree-sitter parsing unavailable. "
            "Install with: pip install tree-sitter %s",
            module_name.replace("_", "-"),
        )
        return None

    try:
        mod = importlib.import_module(module_name)
        # tree-sitter >=0.22 per-language packages expose a
        # language() function that returns the Language capsule.
        return TSParser(Language(mod.language()))
    except ImportError:
        logger.warning(
            "Grammar package '%s' not installed. Install with: pip install %s",
            module_name, module_name.replace("_", "-"),
        )
    except Exception as exc:
        logger.warning("Could not load tree-sitter grammar %s: %s", module_name, exc)
    return None


def iter_source_files(
    project_root: Path,
    extension: str,
    skip_dirs: Iterable[str] = (),
) -> Iterator[Path]:
    skipped = SKIP_DIRS | set(skip_dirs)
    for file_path in sorted(project_root.rglob(f"*{extension}")):
        rel_parts = file_path.relative_to(project_root).parts[:-1]
        if any(part in skipped or part.endswith(".egg-info") for part in rel_parts):
            continue
        if file_path.is_file():
            yield file_path


def clean_call_text(text: str) -> str:
    """Collapse the layout whitespace of a multi-line call expression."""
    return _WHITESPACE.sub(" ", _SPACED_DOT.sub(".", text)).strip()


def masked_node_text(node: Any, source: bytes, string_types: Sequence[str]) -> str:
    """Text of a tree-sitter *node* with every string literal replaced by ``""``.

    Literal contents would otherwise leak dots and parentheses into the
    call expression.
    """
    spans: List[Tuple[int, int]] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in string_types:
            spans.append((current.start_byte, current.end_byte))
            continue
        stack.extend(current.children)

    pieces: List[bytes] = []
    cursor = node.start_byte
    for start, end in sorted(spans):
        pieces.append(source[cursor:start])
        pieces.append(b'""')
        cursor = end
    pieces.append(source[cursor:node.end_byte])
    return clean_call_text(b"".join(pieces).decode("utf-8", errors="replace"))


def constructor_type(callee_text: str) -> Optional[str]:
    """``Foo(...)`` / ``mod.Foo(...)`` -> the class name; other calls -> None."""
    name = callee_text.split("(", 1)[0].strip()
    if not _DOTTED_NAME.match(name):
        return None
    if name.split(".")[-1][:1].isupper():
        return name
    return None


def annotation_type(annotation: str) -> Optional[str]:
    text = annotation.strip().strip("'\"")
    return text if _DOTTED_NAME.match(text) else None


# ===================================================================
# Abstract Parser Interface
# ===================================================================

class Parser(ABC):
    """Base class for one language front end writing into an entity store."""

    language: str = ""

    def __init__(
        self,
        project_root: Path,
        store: EntityStore,
        skip_dirs: Iterable[str] = (),
    ) -> None:
        self.project_root = project_root
        self.store = store
        self.skip_dirs = set(skip_dirs)

    @abstractmethod
    def parse_file(self, file_path: Path, source: Optional[str] = None) -> Optional[int]:
        """Parse one file; return the id of its module/file entity."""
        ...

    def supports_language(self, language: str) -> bool:
        return language == self.language

    def parse_project(self) -> int:
        """Parse every file of this parser's language; return how many succeeded."""
        parsed = 0
        for ext, lang in LANGUAGE_MAP.items():
            if lang != self.language:
                continue
            for file_path in iter_source_files(self.project_root, ext, self.skip_dirs):
                try:
                    if self.parse_file(file_path) is not None:
                        parsed += 1
                except Exception as exc:
                    logger.warning("Failed to parse %s: %s", file_path, exc)
        return parsed


# ===================================================================
# Python declarations -> entities (shared by both Python backends)
# ===================================================================

@dataclass(frozen=True)
class _PyScope:
    scope_id: int
    container_id: int
    package_parts: Tuple[str, ...] = ()
    class_id: Optional[int] = None
    self_name: Optional[str] = None
    self_class_id: Optional[int] = None


class _PythonEntityBuilder:
    """Declares modules, packages, classes, functions and variables."""

    def __init__(self, store: EntityStore, project_root: Path) -> None:
        self.store = store
        self.project_root = project_root
        self._packages: Dict[Tuple[str, ...], int] = {}

    def module(self, file_path: Path) -> _PyScope:
        rel_path = file_path.relative_to(self.project_root)
        parts = list(rel_path.with_suffix("").parts)
        dir_parts = tuple(parts[:-1])
        is_init = parts[-1] == "__init__"
        module_parts = list(dir_parts) if is_init and dir_parts else parts

        module_id = self.store.declare(
            EntityKind.MODULE,
            module_parts[-1],
            self.package(dir_parts),
            qualname=".".join(module_parts),
            language="python",
            file_path=str(rel_path),
            line=1,
        )
        return _PyScope(scope_id=module_id, container_id=module_id, package_parts=dir_parts)

    def package(self, dir_parts: Tuple[str, ...]) -> Optional[int]:
        if not dir_parts:
            return None
        if dir_parts in self._packages:
            return self._packages[dir_parts]
        package_id = self.store.declare(
            EntityKind.PACKAGE,
            dir_parts[-1],
            self.package(dir_parts[:-1]),
            qualname=".".join(dir_parts),
            language="python",
            file_path=str(Path(*dir_parts)),
        )
        self._packages[dir_parts] = package_id
        return package_id

    def declare_class(self, name: str, scope: _PyScope, line: int) -> _PyScope:
        class_id = self.store.declare(EntityKind.CLASS, name, scope.scope_id, line=line)
        return replace(scope, scope_id=class_id, class_id=class_id, self_name=None, self_class_id=None)

    def declare_function(
        self,
        name: str,
        scope: _PyScope,
        line: int,
        params: Sequence[Tuple[str, Optional[str]]],
    ) -> _PyScope:
        in_class = scope.class_id is not None
        kind = EntityKind.METHOD if in_class else EntityKind.FUNCTION
        function_id = self.store.declare(kind, name, scope.scope_id, line=line)

        self_name: Optional[str] = None
        for position, (param, annotation) in enumerate(params):
            declared = annotation_type(annotation) if annotation else None
            if in_class and position == 0:
                self_name = param
                declared = declared or self.store.get(scope.class_id).name
            self.store.declare(EntityKind.VARIABLE, param, function_id, declared_type=declared, line=line)

        return replace(
            scope,
            scope_id=function_id,
            container_id=function_id,
            class_id=None,
            self_name=self_name,
            self_class_id=scope.class_id if in_class else None,
        )

    def declare_target(self, name: str, scope: _PyScope, line: int, declared: Optional[str]) -> None:
        kind = EntityKind.FIELD if scope.class_id is not None else EntityKind.VARIABLE
        self._declare_binding(kind, name, scope.scope_id, line, declared)

    def declare_self_attribute(self, attr: str, scope: _PyScope, line: int, declared: Optional[str]) -> None:
        if scope.self_class_id is not None:
            self._declare_binding(EntityKind.FIELD, attr, scope.self_class_id, line, declared)

    def _declare_binding(
        self,
        kind: EntityKind,
        name: str,
        scope_id: int,
        line: int,
        declared: Optional[str],
    ) -> None:
        # only a rebinding that brings a new type shadows the earlier variable
        existing = self.store.scopes.lookup(name, scope_id)
        if existing is not None:
            entity = self.store.get(existing)
            if not entity.is_variable or declared in (None, entity.declared_type):
                return
        self.store.declare(kind, name, scope_id, declared_type=declared, line=line)

    def add_call(self, scope: _PyScope, text: str) -> None:
        if text:
            self.store.add_raw_call(scope.container_id, text)

    # -- imports ---------------------------------------------------------

    def import_module(self, scope: _PyScope, dotted: str, alias: Optional[str]) -> None:
        if alias:
            self.store.add_import(scope.scope_id, alias, dotted)
            return
        head = dotted.split(".")[0]
        self.store.add_import(scope.scope_id, head, head)
        if "." in dotted:
            self.store.add_import(scope.scope_id, dotted, dotted)

    def import_from(
        self,
        scope: _PyScope,
        level: int,
        module: str,
        names: Sequence[Tuple[str, Optional[str]]],
    ) -> None:
        base = self._absolute_module(scope.package_parts, level, module)
        for name, alias in names:
            target = f"{base}.{name}" if base else name
            self.store.add_import(scope.scope_id, alias or name, target)

    @staticmethod
    def _absolute_module(package_parts: Tuple[str, ...], level: int, module: str) -> str:
        if level == 0:
            return module
        keep = max(len(package_parts) - (level - 1), 0)
        parts = list(package_parts[:keep])
        if module:
            parts.extend(module.split("."))
        return ".".join(parts)


# ===================================================================
# Tree-sitter Parser (Primary)
# ===================================================================

_PY_STRING_TYPES = ("string", "concatenated_string")


class TreeSitterPythonParser(Parser):
    """Error-tolerant Python front end built on Tree-sitter."""

    language = "python"

    def __init__(
        self,
        project_root: Path,
        store: EntityStore,
        skip_dirs: Iterable[str] = (),
    ) -> None:
        super().__init__(project_root, store, skip_dirs)
        self._parser = load_ts_parser("tree_sitter_python")
        self._builder = _PythonEntityBuilder(store, project_root)
        self._source = b""

    @property
    def available(self) -> bool:
        return self._parser is not None

    def parse_file(self, file_path: Path, source: Optional[str] = None) -> Optional[int]:
        if self._parser is None:
            return None
        if source is None:
            source = file_path.read_text(encoding="utf-8", errors="ignore")

        self._source = source.encode("utf-8")
        tree = self._parser.parse(self._source)
        scope = self._builder.module(file_path)
        self._visit(tree.root_node, scope)
        return scope.scope_id

    # ------------------------------------------------------------------
    # Walker
    # ------------------------------------------------------------------

    def _text(self, node: Any) -> str:
        return self._source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def _visit(self, node: Any, scope: _PyScope) -> None:
        kind = node.type
        if kind == "decorated_definition":
            for child in node.named_children:
                if child.type == "decorator":
                    self._visit(child, scope)
            definition = node.child_by_field_name("definition")
            if definition is not None:
                self._visit(definition, scope)
        elif kind == "function_definition":
            self._visit_function(node, scope)
        elif kind == "class_definition":
            self._visit_class(node, scope)
        elif kind == "import_statement":
            self._visit_import(node, scope)
        elif kind == "import_from_statement":
            self._visit_import_from(node, scope)
        elif kind == "assignment":
            self._visit_assignment(node, scope)
        elif kind == "for_statement":
            left = node.child_by_field_name("left")
            if left is not None:
                self._declare_targets(left, scope, None)
            for child in node.named_children:
                if child is not left:
                    self._visit(child, scope)
        elif kind == "call":
            self._visit_call(node, scope, record=True)
        else:
            for child in node.named_children:
                self._visit(child, scope)

    def _visit_function(self, node: Any, scope: _PyScope) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        params: List[Tuple[str, Optional[str]]] = []
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            for param in parameters.named_children:
                parsed = self._parameter(param, scope)
                if parsed is not None:
                    params.append(parsed)

        inner = self._builder.declare_function(
            self._text(name_node), scope, node.start_point[0] + 1, params,
        )
        body = node.child_by_field_name("body")
        if body is not None:
            self._visit(body, inner)

    def _parameter(self, param: Any, scope: _PyScope) -> Optional[Tuple[str, Optional[str]]]:
        kind = param.type
        if kind == "identifier":
            return self._text(param), None
        if kind in ("list_splat_pattern", "dictionary_splat_pattern"):
            ident = next((c for c in param.named_children if c.type == "identifier"), None)
            return (self._text(ident), None) if ident is not None else None

        annotation_node = param.child_by_field_name("type")
        annotation = self._text(annotation_node) if annotation_node is not None else None
        value = param.child_by_field_name("value")
        if value is not None:
            # defaults are evaluated in the enclosing scope
            self._visit(value, scope)

        name_node = param.child_by_field_name("name")
        if name_node is None:
            name_node = next(
                (c for c in param.named_children if c.type in ("identifier", "list_splat_pattern", "dictionary_splat_pattern")),
                None,
            )
        if name_node is None:
            return None
        if name_node.type != "identifier":
            name_node = next((c for c in name_node.named_children if c.type == "identifier"), None)
            if name_node is None:
                return None
        return self._text(name_node), annotation

    def _visit_class(self, node: Any, scope: _PyScope) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        bases = node.child_by_field_name("superclasses")
        if bases is not None:
            self._visit(bases, scope)
        inner = self._builder.declare_class(self._text(name_node), scope, node.start_point[0] + 1)
        body = node.child_by_field_name("body")
        if body is not None:
            self._visit(body, inner)

    def _visit_import(self, node: Any, scope: _PyScope) -> None:
        for name in node.children_by_field_name("name"):
            if name.type == "aliased_import":
                dotted = name.child_by_field_name("name")
                alias = name.child_by_field_name("alias")
                if dotted is not None:
                    self._builder.import_module(
                        scope, self._text(dotted), self._text(alias) if alias is not None else None,
                    )
            else:
                self._builder.import_module(scope, self._text(name), None)

    def _visit_import_from(self, node: Any, scope: _PyScope) -> None:
        module_node = node.child_by_field_name("module_name")
        if module_node is None:
            return
        level = 0
        module = ""
        if module_node.type == "relative_import":
            for sub in module_node.children:
                if sub.type == "import_prefix":
                    level = self._text(sub).count(".")
                elif sub.type == "dotted_name":
                    module = self._text(sub)
        else:
            module = self._text(module_node)

        names: List[Tuple[str, Optional[str]]] = []
        for name in node.children_by_field_name("name"):
            if name.type == "aliased_import":
                original = name.child_by_field_name("name")
                alias = name.child_by_field_name("alias")
                if original is not None:
                    names.append((self._text(original), self._text(alias) if alias is not None else None))
            else:
                names.append((self._text(name), None))
        if not names:
            logger.debug("Ignoring star import from %r", module)
            return
        self._builder.import_from(scope, level, module, names)

    def _visit_assignment(self, node: Any, scope: _PyScope) -> None:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        annotation = node.child_by_field_name("type")

        declared: Optional[str] = None
        if annotation is not None:
            declared = annotation_type(self._text(annotation))
        elif right is not None and right.type == "call":
            declared = constructor_type(self._text(right))

        if left is not None:
            self._declare_targets(left, scope, declared)
            self._visit(left, scope)
        if right is not None:
            self._visit(right, scope)

    def _declare_targets(self, target: Any, scope: _PyScope, declared: Optional[str]) -> None:
        line = target.start_point[0] + 1
        if target.type == "identifier":
            self._builder.declare_target(self._text(target), scope, line, declared)
        elif target.type == "attribute":
            obj = target.child_by_field_name("object")
            attr = target.child_by_field_name("attribute")
            if obj is not None and attr is not None and obj.type == "identifier" and self._text(obj) == scope.self_name:
                self._builder.declare_self_attribute(self._text(attr), scope, line, declared)
        elif target.type in ("pattern_list", "tuple_pattern", "list_pattern"):
            for child in target.named_children:
                self._declare_targets(child, scope, None)

    def _visit_call(self, node: Any, scope: _PyScope, record: bool) -> None:
        function = node.child_by_field_name("function")
        if function is not None:
            self._visit_callee(function, scope)
        arguments = node.child_by_field_name("arguments")
        if arguments is not None:
            self._visit(arguments, scope)
        if record:
            self._builder.add_call(scope, masked_node_text(node, self._source, _PY_STRING_TYPES))

    def _visit_callee(self, node: Any, scope: _PyScope) -> None:
        """Descend a call chain; receivers that are calls belong to the outer text."""
        if node.type == "call":
            self._visit_call(node, scope, record=False)
        elif node.type == "attribute":
            obj = node.child_by_field_name("object")
            if obj is not None:
                self._visit_callee(obj, scope)
        elif node.type == "subscript":
            value = node.child_by_field_name("value")
            if value is not None:
                self._visit_callee(value, scope)
            for index in node.children_by_field_name("subscript"):
                self._visit(index, scope)
        else:
            self._visit(node, scope)


# ===================================================================
# AST Fallback Parser (when tree-sitter is not installed)
# ===================================================================

class _StringMasker(ast.NodeTransformer):
    """Replace string literals with a bare '""' name so unparsing matches the tree-sitter text."""

    def visit_Constant(self, node: ast.Constant) -> ast.AST:
        if isinstance(node.value, (str, bytes)):
            return ast.copy_location(ast.Name(id='""', ctx=ast.Load()), node)
        return node

    def visit_JoinedStr(self, node: ast.JoinedStr) -> ast.AST:
        return ast.copy_location(ast.Name(id='""', ctx=ast.Load()), node)


def _ast_call_text(node: ast.Call) -> str:
    masked = _StringMasker().visit(copy.deepcopy(node))
    return clean_call_text(ast.unparse(masked))


class ASTFallbackParser(Parser):
    """Pure-Python fallback using the built-in ``ast`` module.

    Only supports Python. Used automatically when tree-sitter is missing.
    """

    language = "python"

    def __init__(
        self,
        project_root: Path,
        store: EntityStore,
        skip_dirs: Iterable[str] = (),
    ) -> None:
        super().__init__(project_root, store, skip_dirs)
        self._builder = _PythonEntityBuilder(store, project_root)

    def parse_file(self, file_path: Path, source: Optional[str] = None) -> Optional[int]:
        if source is None:
            source = file_path.read_text(encoding="utf-8", errors="ignore")
        try:
            tree = ast.parse(source)
        except SyntaxError as exc:
            logger.warning("SyntaxError in %s: %s", file_path, exc)
            return None

        scope = self._builder.module(file_path)
        for stmt in tree.body:
            self._visit(stmt, scope)
        return scope.scope_id

    def _visit(self, node: ast.AST, scope: _PyScope) -> None:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            self._visit_function(node, scope)
        elif isinstance(node, ast.ClassDef):
            self._visit_class(node, scope)
        elif isinstance(node, ast.Import):
            for alias in node.names:
                self._builder.import_module(scope, alias.name, alias.asname)
        elif isinstance(node, ast.ImportFrom):
            names = [(a.name, a.asname) for a in node.names if a.name != "*"]
            if names:
                self._builder.import_from(scope, node.level or 0, node.module or "", names)
        elif isinstance(node, ast.Assign):
            declared = None
            if isinstance(node.value, ast.Call):
                declared = constructor_type(ast.unparse(node.value.func) + "()")
            for target in node.targets:
                self._declare_targets(target, scope, declared)
            self._visit_children(node, scope)
        elif isinstance(node, ast.AnnAssign):
            self._declare_targets(node.target, scope, annotation_type(ast.unparse(node.annotation)))
            if node.value is not None:
                self._visit(node.value, scope)
            self._visit(node.target, scope)
        elif isinstance(node, (ast.For, ast.AsyncFor)):
            self._declare_targets(node.target, scope, None)
            self._visit_children(node, scope)
        elif isinstance(node, ast.Call):
            self._visit_call(node, scope, record=True)
        else:
            self._visit_children(node, scope)

    def _visit_children(self, node: ast.AST, scope: _PyScope) -> None:
        for child in ast.iter_child_nodes(node):
            self._visit(child, scope)

    def _visit_function(self, node: Any, scope: _PyScope) -> None:
        for decorator in node.decorator_list:
            self._visit(decorator, scope)
        for default in list(node.args.defaults) + [d for d in node.args.kw_defaults if d is not None]:
            self._visit(default, scope)

        args = node.args
        ordered = list(args.posonlyargs) + list(args.args)
        if args.vararg is not None:
            ordered.append(args.vararg)
        ordered.extend(args.kwonlyargs)
        if args.kwarg is not None:
            ordered.append(args.kwarg)
        params = [
            (arg.arg, ast.unparse(arg.annotation) if arg.annotation is not None else None)
            for arg in ordered
        ]

        inner = self._builder.declare_function(node.name, scope, node.lineno, params)
        for stmt in node.body:
            self._visit(stmt, inner)

    def _visit_class(self, node: ast.ClassDef, scope: _PyScope) -> None:
        for decorator in node.decorator_list:
            self._visit(decorator, scope)
        for base in list(node.bases) + [kw.value for kw in node.keywords]:
            self._visit(base, scope)
        inner = self._builder.declare_class(node.name, scope, node.lineno)
        for stmt in node.body:
            self._visit(stmt, inner)

    def _declare_targets(self, target: ast.AST, scope: _PyScope, declared: Optional[str]) -> None:
        line = getattr(target, "lineno", 0)
        if isinstance(target, ast.Name):
            self._builder.declare_target(target.id, scope, line, declared)
        elif isinstance(target, ast.Attribute):
            if isinstance(target.value, ast.Name) and target.value.id == scope.self_name:
                self._builder.declare_self_attribute(target.attr, scope, line, declared)
        elif isinstance(target, (ast.Tuple, ast.List)):
            for element in target.elts:
                self._declare_targets(element, scope, None)

    def _visit_call(self, node: ast.Call, scope: _PyScope, record: bool) -> None:
        self._visit_callee(node.func, scope)
        for arg in node.args:
            self._visit(arg, scope)
        for keyword in node.keywords:
            self._visit(keyword.value, scope)
        if record:
            self._builder.add_call(scope, _ast_call_text(node))

    def _visit_callee(self, node: ast.AST, scope: _PyScope) -> None:
        if isinstance(node, ast.Call):
            self._visit_call(node, scope, record=False)
        elif isinstance(node, ast.Attribute):
            self._visit_callee(node.value, scope)
        elif isinstance(node, ast.Subscript):
            self._visit_callee(node.value, scope)
            self._visit(node.slice, scope)
        else:
            self._visit(node, scope)


# ===================================================================
# Project-level dispatch
# ===================================================================

def make_parser(
    language: str,
    project_root: Path,
    store: EntityStore,
    skip_dirs: Iterable[str] = (),
) -> Optional[Parser]:
    """Pick the best available front end for *language*."""
    if language == "python":
        ts = TreeSitterPythonParser(project_root, store, skip_dirs)
        if ts.available:
            logger.info("Using Tree-sitter parser for python")
            return ts
        logger.info("Using AST fallback parser for python")
        return ASTFallbackParser(project_root, store, skip_dirs)
    if language == "go":
        from .go_parser import GoParser

        go = GoParser(project_root, store, skip_dirs)
        if go.available:
            return go
        logger.warning("Go grammar unavailable; skipping .go files")
        return None
    logger.warning("No front end for language '%s'", language)
    return None


class ProjectParser:
    """Runs every requested language front end over one project root."""

    def __init__(
        self,
        project_root: Path,
        store: EntityStore,
        languages: Optional[Sequence[str]] = None,
        skip_dirs: Iterable[str] = (),
    ) -> None:
        self.project_root = project_root
        self.store = store
        self.parsers: Dict[str, Parser] = {}
        for language in languages or ("python", "go"):
            parser = make_parser(language, project_root, store, skip_dirs)
            if parser is not None:
                self.parsers[language] = parser

    def supports_language(self, language: str) -> bool:
        return language in self.parsers

    def parse_project(self) -> Dict[str, int]:
        """Parse all files; return the number of parsed files per language."""
        return {language: parser.parse_project() for language, parser in self.parsers.items()}

"""Go front end built on Tree-sitter (``tree-sitter-go``).

Each directory is one package, each file a File scope below it. Top-level
functions, types, vars and consts are bound in the package scope as well so
they are visible from every file of the package. Methods live under their
file and are attached to the receiver type once the whole project is parsed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .entity_store import EntityStore
from .models import EntityKind
from .parser import Parser, load_ts_parser, masked_node_text

logger = logging.getLogger(__name__)

_GO_STRING_TYPES = ("interpreted_string_literal", "raw_string_literal", "rune_literal")

_BLOCK_STATEMENTS = {
    "for_statement": "for",
    "if_statement": "if",
    "expression_switch_statement": "switch",
    "type_switch_statement": "switch",
    "select_statement": "select",
}

# visited in the current scope, without a block of their own
_STATEMENT_CONTAINERS = {
    "block", "statement_list", "labeled_statement",
    "expression_case", "type_case", "default_case", "communication_case",
}


@dataclass(frozen=True)
class _GoScope:
    scope_id: int
    file_id: int
    package_id: int
    # None at package level: initializer calls there have no owning function
    container_id: Optional[int] = None


class GoParser(Parser):
    """Walks Go syntax trees and declares entities in the shared store."""

    language = "go"

    def __init__(
        self,
        project_root: Path,
        store: EntityStore,
        skip_dirs: Iterable[str] = (),
    ) -> None:
        super().__init__(project_root, store, skip_dirs)
        self._parser = load_ts_parser("tree_sitter_go")
        self._packages: Dict[Tuple[str, ...], int] = {}
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
        root = self._parser.parse(self._source).root_node
        clause = next((c for c in root.named_children if c.type == "package_clause"), None)
        if clause is None:
            logger.warning("No package clause in %s; skipping", file_path)
            return None
        package_name = self._text(clause.named_children[0]) if clause.named_children else ""

        rel_path = file_path.relative_to(self.project_root)
        package_id = self._package(tuple(rel_path.parts[:-1]), package_name)
        file_id = self.store.declare(
            EntityKind.FILE,
            rel_path.name,
            package_id,
            file_path=str(rel_path),
            line=1,
        )
        scope = _GoScope(scope_id=file_id, file_id=file_id, package_id=package_id)
        for child in root.named_children:
            self._visit_top_level(child, scope)
        return file_id

    def _package(self, dir_parts: Tuple[str, ...], package_name: str) -> int:
        if dir_parts in self._packages:
            return self._packages[dir_parts]
        package_id = self.store.declare(
            EntityKind.PACKAGE,
            package_name or (dir_parts[-1] if dir_parts else "main"),
            None,
            qualname=".".join(dir_parts) or package_name,
            language="go",
            file_path=str(Path(*dir_parts)) if dir_parts else ".",
        )
        self._packages[dir_parts] = package_id
        return package_id

    def _text(self, node: Any) -> str:
        return self._source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    @staticmethod
    def _line(node: Any) -> int:
        return node.start_point[0] + 1

    # ------------------------------------------------------------------
    # Top-level declarations
    # ------------------------------------------------------------------

    def _visit_top_level(self, node: Any, scope: _GoScope) -> None:
        kind = node.type
        if kind == "import_declaration":
            self._visit_imports(node, scope)
        elif kind == "function_declaration":
            self._visit_function(node, scope)
        elif kind == "method_declaration":
            self._visit_method(node, scope)
        elif kind == "type_declaration":
            for spec in node.named_children:
                if spec.type in ("type_spec", "type_alias"):
                    self._visit_type_spec(spec, scope)
        elif kind in ("var_declaration", "const_declaration"):
            self._visit_var_declaration(node, scope, top_level=True)

    def _bind_in_package(self, scope: _GoScope, name: str, entity_id: int) -> None:
        if name and name != "_":
            self.store.bind(scope.package_id, name, entity_id)

    def _visit_imports(self, node: Any, scope: _GoScope) -> None:
        specs: List[Any] = []
        for child in node.named_children:
            if child.type == "import_spec":
                specs.append(child)
            elif child.type == "import_spec_list":
                specs.extend(c for c in child.named_children if c.type == "import_spec")

        for spec in specs:
            path_node = spec.child_by_field_name("path")
            if path_node is None:
                continue
            path = self._text(path_node).strip('"`')
            name_node = spec.child_by_field_name("name")
            if name_node is not None:
                if name_node.type != "package_identifier":
                    # dot and blank imports bind no name
                    continue
                alias = self._text(name_node)
            else:
                alias = path.rsplit("/", 1)[-1]
            self.store.add_import(scope.file_id, alias, path.replace("/", "."), suffix_match=True)

    def _visit_function(self, node: Any, scope: _GoScope) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = self._text(name_node)
        function_id = self.store.declare(EntityKind.FUNCTION, name, scope.file_id, line=self._line(node))
        self._bind_in_package(scope, name, function_id)
        self._visit_callable(node, replace(scope, scope_id=function_id, container_id=function_id))

    def _visit_method(self, node: Any, scope: _GoScope) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = self._text(name_node)
        method_id = self.store.declare(EntityKind.METHOD, name, scope.file_id, line=self._line(node))
        inner = replace(scope, scope_id=method_id, container_id=method_id)

        receiver = node.child_by_field_name("receiver")
        if receiver is not None:
            for param_name, type_name in self._parameters(receiver):
                if type_name is None:
                    continue
                if param_name:
                    self.store.declare(
                        EntityKind.VARIABLE, param_name, method_id,
                        declared_type=type_name, line=self._line(receiver),
                    )
                self.store.add_member(scope.file_id, type_name, name, method_id)
        self._visit_callable(node, inner)

    def _visit_callable(self, node: Any, scope: _GoScope) -> None:
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            for param_name, type_name in self._parameters(parameters):
                if param_name:
                    self.store.declare(
                        EntityKind.VARIABLE, param_name, scope.scope_id,
                        declared_type=type_name, line=self._line(parameters),
                    )
        body = node.child_by_field_name("body")
        if body is not None:
            self._visit_statements(body, scope)

    def _parameters(self, parameter_list: Any) -> List[Tuple[str, Optional[str]]]:
        params: List[Tuple[str, Optional[str]]] = []
        for decl in parameter_list.named_children:
            if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            type_node = decl.child_by_field_name("type")
            type_name = self._type_name(type_node) if type_node is not None else None
            names = [self._text(n) for n in decl.children_by_field_name("name")]
            if not names:
                params.append(("", type_name))
            params.extend((n, type_name) for n in names)
        return params

    def _type_name(self, node: Any) -> Optional[str]:
        """``T``, ``*T``, ``pkg.T`` and ``T[K]`` -> the named type; others -> None."""
        if node.type in ("pointer_type", "parenthesized_type"):
            inner = node.named_children[-1] if node.named_children else None
            return self._type_name(inner) if inner is not None else None
        if node.type == "generic_type":
            base = node.child_by_field_name("type")
            return self._type_name(base) if base is not None else None
        if node.type in ("type_identifier", "qualified_type"):
            return self._text(node)
        return None

    def _visit_type_spec(self, spec: Any, scope: _GoScope) -> None:
        name_node = spec.child_by_field_name("name")
        if name_node is None:
            return
        name = self._text(name_node)
        class_id = self.store.declare(EntityKind.CLASS, name, scope.file_id, line=self._line(spec))
        self._bind_in_package(scope, name, class_id)

        type_node = spec.child_by_field_name("type")
        if type_node is None:
            return
        if type_node.type == "struct_type":
            self._visit_struct(type_node, class_id)
        elif type_node.type == "interface_type":
            for elem in type_node.named_children:
                if elem.type in ("method_elem", "method_spec"):
                    method_name = elem.child_by_field_name("name")
                    if method_name is not None:
                        self.store.declare(
                            EntityKind.METHOD, self._text(method_name), class_id, line=self._line(elem),
                        )

    def _visit_struct(self, struct: Any, class_id: int) -> None:
        field_list = next((c for c in struct.named_children if c.type == "field_declaration_list"), None)
        if field_list is None:
            return
        for decl in field_list.named_children:
            if decl.type != "field_declaration":
                continue
            type_node = decl.child_by_field_name("type")
            type_name = self._type_name(type_node) if type_node is not None else None
            names = [self._text(n) for n in decl.children_by_field_name("name")]
            if not names and type_name:
                # embedded field is named after its type
                names = [type_name.split(".")[-1]]
            for field_name in names:
                self.store.declare(
                    EntityKind.FIELD, field_name, class_id,
                    declared_type=type_name, line=self._line(decl),
                )

    def _visit_var_declaration(self, node: Any, scope: _GoScope, top_level: bool = False) -> None:
        specs: List[Any] = []
        for child in node.named_children:
            if child.type in ("var_spec", "const_spec"):
                specs.append(child)
            elif child.type == "var_spec_list":
                specs.extend(c for c in child.named_children if c.type == "var_spec")

        for spec in specs:
            type_node = spec.child_by_field_name("type")
            values = spec.child_by_field_name("value")
            declared = self._type_name(type_node) if type_node is not None else None
            if declared is None and values is not None and len(values.named_children) == 1:
                declared = self._literal_type(values.named_children[0])
            for name_node in spec.children_by_field_name("name"):
                name = self._text(name_node)
                if name == "_":
                    continue
                var_id = self.store.declare(
                    EntityKind.VARIABLE, name, scope.scope_id,
                    declared_type=declared, line=self._line(spec),
                )
                if top_level:
                    self._bind_in_package(scope, name, var_id)
            if values is not None:
                self._visit_expression(values, scope)

    def _literal_type(self, expr: Any) -> Optional[str]:
        """Type of ``T{...}`` or ``&T{...}``; None for any other expression."""
        if expr.type == "unary_expression":
            operand = expr.child_by_field_name("operand")
            if operand is None:
                return None
            expr = operand
        if expr.type == "composite_literal":
            type_node = expr.child_by_field_name("type")
            return self._type_name(type_node) if type_node is not None else None
        return None

    # ------------------------------------------------------------------
    # Function bodies
    # ------------------------------------------------------------------

    def _visit_statements(self, block: Any, scope: _GoScope) -> None:
        for stmt in block.named_children:
            self._visit_statement(stmt, scope)

    def _visit_statement(self, node: Any, scope: _GoScope) -> None:
        kind = node.type
        if kind in _BLOCK_STATEMENTS:
            self._visit_block_statement(node, scope, _BLOCK_STATEMENTS[kind])
        elif kind == "short_var_declaration":
            self._visit_short_var(node, scope)
        elif kind in ("var_declaration", "const_declaration"):
            self._visit_var_declaration(node, scope)
        elif kind in _STATEMENT_CONTAINERS:
            self._visit_statements(node, scope)
        else:
            self._visit_expression(node, scope)

    def _open_block(self, node: Any, scope: _GoScope, label: str) -> _GoScope:
        parent = self.store.get(scope.scope_id)
        block_id = self.store.declare(
            EntityKind.BLOCK,
            "",
            scope.scope_id,
            qualname=f"{parent.qualname}.<{label}:{self._line(node)}>",
            line=self._line(node),
        )
        return replace(scope, scope_id=block_id)

    def _visit_block_statement(self, node: Any, scope: _GoScope, label: str) -> None:
        inner = self._open_block(node, scope, label)
        alternative = node.child_by_field_name("alternative") if label == "if" else None
        for child in node.named_children:
            if alternative is not None and child.id == alternative.id:
                continue
            if child.type == "range_clause":
                self._visit_range_clause(child, inner)
            elif child.type == "for_clause":
                for part in child.named_children:
                    self._visit_statement(part, inner)
            else:
                self._visit_statement(child, inner)

        if alternative is not None:
            if alternative.type == "if_statement":
                self._visit_block_statement(alternative, scope, "if")
            else:
                self._visit_statements(alternative, self._open_block(alternative, scope, "else"))

    def _visit_range_clause(self, clause: Any, scope: _GoScope) -> None:
        left = clause.child_by_field_name("left")
        if left is not None:
            for ident in left.named_children:
                if ident.type == "identifier" and self._text(ident) != "_":
                    self.store.declare(EntityKind.VARIABLE, self._text(ident), scope.scope_id, line=self._line(ident))
        right = clause.child_by_field_name("right")
        if right is not None:
            self._visit_expression(right, scope)

    def _visit_short_var(self, node: Any, scope: _GoScope) -> None:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        names = [c for c in left.named_children if c.type == "identifier"] if left is not None else []
        values = right.named_children if right is not None else []

        for position, ident in enumerate(names):
            name = self._text(ident)
            if name == "_":
                continue
            declared = None
            if len(values) == len(names):
                declared = self._literal_type(values[position])
            self.store.declare(
                EntityKind.VARIABLE, name, scope.scope_id,
                declared_type=declared, line=self._line(ident),
            )
        if right is not None:
            self._visit_expression(right, scope)

    # ------------------------------------------------------------------
    # Expressions and calls
    # ------------------------------------------------------------------

    def _visit_expression(self, node: Any, scope: _GoScope) -> None:
        if node.type == "call_expression":
            self._visit_call(node, scope, record=True)
        elif node.type == "func_literal":
            body = node.child_by_field_name("body")
            if body is not None:
                self._visit_statements(body, scope)
        elif node.type in _BLOCK_STATEMENTS or node.type == "short_var_declaration":
            self._visit_statement(node, scope)
        else:
            for child in node.named_children:
                self._visit_expression(child, scope)

    def _visit_call(self, node: Any, scope: _GoScope, record: bool) -> None:
        function = node.child_by_field_name("function")
        if function is not None:
            self._visit_callee(function, scope)
        arguments = node.child_by_field_name("arguments")
        if arguments is not None:
            self._visit_expression(arguments, scope)
        if record and scope.container_id is not None:
            self.store.add_raw_call(
                scope.container_id, masked_node_text(node, self._source, _GO_STRING_TYPES),
            )

    def _visit_callee(self, node: Any, scope: _GoScope) -> None:
        if node.type == "call_expression":
            self._visit_call(node, scope, record=False)
        elif node.type in ("selector_expression", "index_expression", "type_assertion_expression"):
            operand = node.child_by_field_name("operand")
            if operand is not None:
                self._visit_callee(operand, scope)
            index = node.child_by_field_name("index")
            if index is not None:
                self._visit_expression(index, scope)
        else:
            self._visit_expression(node, scope)

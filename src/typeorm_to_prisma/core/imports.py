"""Rewrite TypeORM imports and NestJS module registrations to reference Prisma."""

import logging
import re

from tree_sitter import Node

from typeorm_to_prisma.core.ast import find_by_shape, same_node, significant_children, string_value
from typeorm_to_prisma.core.mapping import (
    INJECTION_DECORATOR,
    NEST_INTEGRATION_LIBRARY,
    REGISTRAR,
    REGISTRATION_METHODS,
    REPOSITORY_SYMBOLS,
    REPOSITORY_TYPE,
    ROOT_REGISTRATION_METHODS,
    SCHEMA_DECORATOR_SYMBOLS,
    SOURCE_LIBRARY,
)
from typeorm_to_prisma.core.session import TransformContext
from typeorm_to_prisma.errors import CodemodError

logger = logging.getLogger(__name__)

ENTITY_IMPORT_ADVISORY = "// TODO: review this entity import; Prisma generated types may replace it."

_REPOSITORY_PATH = re.compile(r"typeorm/repository", re.IGNORECASE)


def _is_entity_module(path: str) -> bool:
    return path.endswith(".entity") or "/entities/" in path


def _encloses(outer: Node, inner: Node) -> bool:
    if same_node(outer, inner):
        return False
    return outer.start_byte <= inner.start_byte and inner.end_byte <= outer.end_byte


class ImportRewriter:
    def __init__(self, ctx: TransformContext) -> None:
        self._ctx = ctx
        self._ensured: set[str] = set()
        self._registrations = 0

    def rewrite(self) -> None:
        self.rewrite_registrations()
        for statement in self._import_statements():
            path = self._source_path(statement)
            if path is None:
                continue
            if path == SOURCE_LIBRARY:
                self._rewrite_source_library_import(statement)
            elif _REPOSITORY_PATH.search(path):
                self._ctx.editor.remove_statement(statement)
                self._ctx.flags.modules = True
            elif path == NEST_INTEGRATION_LIBRARY:
                self._rewrite_nest_integration_import(statement)
            elif _is_entity_module(path):
                self._ctx.advise(statement, ENTITY_IMPORT_ADVISORY)

    def rewrite_registrations(self) -> int:
        """Replace ``TypeOrmModule.forFeature([...])`` with the Prisma module.

        Root registrations keep the call form with their arguments cleared, so
        registrations nested in their options disappear with them.
        """
        ctx = self._ctx
        sites: list[tuple[Node, str]] = []
        for captures in find_by_shape(ctx.root, "registrations", ctx.language):
            if ctx.text(captures["registrar"][0]) != REGISTRAR:
                continue
            method = ctx.text(captures["method"][0])
            if method in REGISTRATION_METHODS:
                sites.append((captures["call"][0], method))

        module = ctx.settings.module_name
        for call, method in sites:
            if any(_encloses(other, call) for other, _ in sites):
                continue
            try:
                ctx.editor.replace(call, f"{module}()" if method in ROOT_REGISTRATION_METHODS else module)
            except CodemodError as exc:
                logger.warning("Skipping registration at line %d: %s", call.start_point[0] + 1, exc)
                continue
            self._ensure_import(module, ctx.settings.module_path)
            self._registrations += 1
            ctx.flags.modules = True
        return self._registrations

    def _import_statements(self) -> list[Node]:
        return [child for child in self._ctx.root.named_children if child.type == "import_statement"]

    def _source_path(self, statement: Node) -> str | None:
        return string_value(statement.child_by_field_name("source"), self._ctx.source)

    def _rewrite_source_library_import(self, statement: Node) -> None:
        names = self._imported_names(statement)
        dropped: set[str] = set()
        if REPOSITORY_TYPE in names:
            settings = self._ctx.settings
            self._ensure_import(settings.client_service, settings.client_service_path)
            dropped |= REPOSITORY_SYMBOLS
        if names & SCHEMA_DECORATOR_SYMBOLS:
            dropped |= SCHEMA_DECORATOR_SYMBOLS
        if not dropped & names:
            return
        self._drop_specifiers(statement, dropped)
        self._ctx.flags.modules = True

    def _rewrite_nest_integration_import(self, statement: Node) -> None:
        dropped: set[str] = set()
        if self._registrations:
            dropped.add(REGISTRAR)
        if self._ctx.flags.repositories:
            dropped.add(INJECTION_DECORATOR)
        if dropped & self._imported_names(statement):
            self._drop_specifiers(statement, dropped)
            self._ctx.flags.modules = True

    def _imported_names(self, statement: Node) -> set[str]:
        return {self._specifier_name(spec) for spec in self._specifiers(statement)}

    def _specifiers(self, statement: Node) -> list[Node]:
        named = self._named_imports(statement)
        if named is None:
            return []
        return [child for child in significant_children(named) if child.type == "import_specifier"]

    def _specifier_name(self, specifier: Node) -> str:
        name = specifier.child_by_field_name("name")
        if name is None:
            return self._ctx.text(specifier)
        if name.type == "string":
            return string_value(name, self._ctx.source) or ""
        return self._ctx.text(name)

    def _import_clause(self, statement: Node) -> Node | None:
        for child in statement.named_children:
            if child.type == "import_clause":
                return child
        return None

    def _named_imports(self, statement: Node) -> Node | None:
        clause = self._import_clause(statement)
        if clause is None:
            return None
        for child in clause.named_children:
            if child.type == "named_imports":
                return child
        return None

    def _drop_specifiers(self, statement: Node, dropped: set[str]) -> None:
        ctx = self._ctx
        clause = self._import_clause(statement)
        if clause is None:
            return
        kept = [ctx.text(spec) for spec in self._specifiers(statement) if self._specifier_name(spec) not in dropped]
        parts = [ctx.text(child) for child in significant_children(clause) if child.type != "named_imports"]
        if kept:
            parts.append("{ " + ", ".join(kept) + " }")
        if not parts:
            ctx.editor.remove_statement(statement)
            return
        ctx.editor.replace(clause, ", ".join(parts))

    def _quote(self) -> str:
        for statement in self._import_statements():
            source = statement.child_by_field_name("source")
            if source is not None:
                return self._ctx.text(source)[0]
        return "'"

    def _ensure_import(self, symbol: str, path: str) -> None:
        """Insert ``import { symbol } from 'path'`` at the top of the file unless it already exists."""
        if path in self._ensured:
            return
        self._ensured.add(path)
        if any(self._source_path(statement) == path for statement in self._import_statements()):
            return
        quote = self._quote()
        self._ctx.editor.insert_at(0, f"import {{ {symbol} }} from {quote}{path}{quote};\n")
        logger.debug("Added import of %s from %s", symbol, path)


def rewrite_imports(ctx: TransformContext) -> None:
    ImportRewriter(ctx).rewrite()

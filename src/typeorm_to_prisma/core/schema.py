"""Extract Prisma model descriptions from TypeORM entity classes.

Extraction only annotates the source: every entity class keeps its code and
gets an advisory comment pointing at the generated schema, which is meant as
a reference next to ``npx prisma db pull``.
"""

import logging
from collections.abc import Iterator

from tree_sitter import Node

from typeorm_to_prisma.core.ast import (
    CLASS_KINDS,
    FIELD_KINDS,
    class_name,
    decorator_arguments,
    decorator_name,
    decorators_of,
    find_by_kind,
    find_member,
    member_key,
    member_value,
    object_members,
    significant_children,
    string_value,
    type_of,
)
from typeorm_to_prisma.core.mapping import (
    ANNOTATION_TYPE_MAP,
    DEFAULT_SCALAR,
    ENTITY_DECORATOR,
    RELATION_KINDS,
    decorator_role,
    map_column_type,
)
from typeorm_to_prisma.core.session import TransformContext
from typeorm_to_prisma.models import (
    EnumDescriptor,
    FieldDescriptor,
    FieldRole,
    ModelDescriptor,
    RelationDescriptor,
    RelationKind,
)

logger = logging.getLogger(__name__)

UNKNOWN_MODEL = "Unknown"

ENTITY_ADVISORY = (
    "// Reference only: this TypeORM entity is described by the generated Prisma schema. "
    "Prefer `npx prisma db pull` as the source of truth."
)
UNDECLARED_ENUM_ADVISORY = "// TODO: this enum is declared in another module; list its members here."

_NOW_DEFAULTS = frozenset({"current_timestamp", "current_timestamp()", "now()"})
_UUID_DEFAULTS = frozenset({"uuid_generate_v4()", "gen_random_uuid()", "uuid()"})

# enum name -> [(member name, string value or None)]
DeclaredEnums = dict[str, list[tuple[str, str | None]]]


def extract_schema(ctx: TransformContext) -> dict[str, ModelDescriptor]:
    """Describe every ``@Entity`` class of the file and mark it as reference-only."""
    declared_enums = _collect_enum_declarations(ctx)
    classes = sorted(find_by_kind(ctx.root, *CLASS_KINDS), key=lambda n: n.start_byte)

    for class_node in classes:
        entity = _entity_decorator(class_node, ctx.source)
        name = class_name(class_node, ctx.source)
        if entity is None or not name:
            continue

        model = ModelDescriptor(name=name, table_name=_table_name(entity, ctx.source) or name.lower())
        builder = _FieldBuilder(ctx, name, declared_enums)
        for member, decorators in _decorated_members(class_node):
            model.fields.extend(builder.describe(member, decorators))

        ctx.models[name] = model
        ctx.advise(class_node, ENTITY_ADVISORY)
        ctx.flags.entities = True
        logger.debug("Extracted model %s (%d fields)", name, len(model.fields))

    if ctx.models:
        logger.info(
            "Extracted %d entity model(s). The schema is a reference; introspect the database for production use.",
            len(ctx.models),
        )
    return ctx.models


def render_field(field: FieldDescriptor) -> str:
    suffix = "[]" if field.is_list else "?" if field.optional else ""
    attributes: list[str] = []
    if field.role is FieldRole.IDENTITY:
        attributes.append("@id")
    if field.default is not None:
        attributes.append(f"@default({field.default})")
    if field.role is FieldRole.UPDATED_AT:
        attributes.append("@updatedAt")
    if field.unique:
        attributes.append("@unique")
    if field.mapped_name:
        attributes.append(f'@map("{field.mapped_name}")')
    if field.relation is not None:
        attributes.append(f'@relation("{field.relation.relation_name}")')

    line = f"  {field.name} {field.scalar_type}{suffix}"
    if attributes:
        line += " " + " ".join(attributes)
    return line


def render_model(model: ModelDescriptor) -> str:
    lines = [f"model {model.name} {{"]
    lines.extend(render_field(field) for field in model.fields)
    lines.extend(["", f'  @@map("{model.table_name}")', "}"])
    return "\n".join(lines) + "\n"


def render_enum(enum: EnumDescriptor) -> str:
    lines = [f"enum {enum.name} {{"]
    lines.extend(f"  {value}" for value in enum.values)
    if not enum.values:
        lines.append(f"  {UNDECLARED_ENUM_ADVISORY}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _entity_decorator(class_node: Node, source: bytes) -> Node | None:
    for decorator in decorators_of(class_node):
        if decorator_name(decorator, source) == ENTITY_DECORATOR:
            return decorator
    return None


def _table_name(entity: Node, source: bytes) -> str | None:
    args = decorator_arguments(entity)
    if not args:
        return None
    first = args[0]
    if first.type == "string":
        return string_value(first, source)
    if first.type == "object":
        member = find_member(first, "name", source)
        if member is not None:
            return string_value(member_value(member), source)
    return None


def _decorated_members(class_node: Node) -> Iterator[tuple[Node, list[Node]]]:
    body = class_node.child_by_field_name("body")
    if body is None:
        return
    pending: list[Node] = []
    for child in significant_children(body):
        if child.type == "decorator":
            pending.append(child)
            continue
        if child.type in FIELD_KINDS:
            yield child, pending + decorators_of(child)
        pending = []


def _collect_enum_declarations(ctx: TransformContext) -> DeclaredEnums:
    declared: DeclaredEnums = {}
    for declaration in find_by_kind(ctx.root, "enum_declaration"):
        name = declaration.child_by_field_name("name")
        body = declaration.child_by_field_name("body")
        if name is None or body is None:
            continue
        members: list[tuple[str, str | None]] = []
        for child in significant_children(body):
            key = child.child_by_field_name("name") if child.type == "enum_assignment" else child
            if key is None:
                continue
            key_text = string_value(key, ctx.source) if key.type == "string" else ctx.text(key)
            if key_text is None:
                continue
            value = child.child_by_field_name("value") if child.type == "enum_assignment" else None
            members.append((key_text, string_value(value, ctx.source)))
        declared[ctx.text(name)] = members
    return declared


class _FieldBuilder:
    """Turns one decorated class property into field descriptors."""

    def __init__(self, ctx: TransformContext, model_name: str, declared_enums: DeclaredEnums) -> None:
        self._ctx = ctx
        self._source = ctx.source
        self._model = model_name
        self._declared_enums = declared_enums

    def describe(self, member: Node, decorators: list[Node]) -> list[FieldDescriptor]:
        name_node = member.child_by_field_name("name") or member.child_by_field_name("property")
        if name_node is None:
            return []
        name = self._ctx.text(name_node)

        # One schema role per field: the first decorator carrying a role wins.
        for decorator in decorators:
            decorator_id = decorator_name(decorator, self._source)
            role = decorator_role(decorator_id)
            if role is None or role is FieldRole.JOIN or decorator_id is None:
                continue
            args = decorator_arguments(decorator)
            if role is FieldRole.IDENTITY:
                return [self._identity(name, decorator_id, args, member)]
            if role is FieldRole.PLAIN:
                return [self._column(name, args, member)]
            if role is FieldRole.RELATION:
                return self._relation(name, decorator_id, args, member)
            return [self._timestamp(name, role)]
        return []

    def _identity(self, name: str, decorator: str, args: list[Node], member: Node) -> FieldDescriptor:
        if decorator == "PrimaryColumn":
            scalar = self._scalar_for_type(type_of(member))
            type_name = self._declared_type_name(args)
            if type_name is not None:
                scalar = map_column_type(type_name)
            return FieldDescriptor(name=name, scalar_type=scalar, role=FieldRole.IDENTITY)

        strategy = string_value(args[0], self._source) if args else None
        if strategy == "uuid":
            return FieldDescriptor(name=name, scalar_type="String", role=FieldRole.IDENTITY, default="uuid()")
        return FieldDescriptor(name=name, scalar_type="Int", role=FieldRole.IDENTITY, default="autoincrement()")

    def _column(self, name: str, args: list[Node], member: Node) -> FieldDescriptor:
        field = FieldDescriptor(name=name, scalar_type=DEFAULT_SCALAR, role=FieldRole.PLAIN)
        if not args:
            field.scalar_type = self._scalar_for_type(type_of(member))
            return field

        first = args[0]
        type_name = string_value(first, self._source)
        options: Node | None = None
        if type_name is not None:
            field.scalar_type = map_column_type(type_name)
            if len(args) > 1 and args[1].type == "object":
                options = args[1]
        elif first.type == "object":
            options = first

        if options is not None:
            typed = self._apply_column_options(field, options)
            if not typed and type_name is None:
                field.scalar_type = self._scalar_for_type(type_of(member))
        return field

    def _apply_column_options(self, field: FieldDescriptor, options: Node) -> bool:
        """Apply an options object to ``field``; returns whether it named a column type."""
        typed = False
        enum_name: str | None = None
        default_node: Node | None = None
        for member in object_members(options):
            key = member_key(member, self._source)
            value = member_value(member)
            if key is None or value is None:
                continue
            if key == "type":
                type_name = string_value(value, self._source)
                if type_name is not None:
                    field.scalar_type = map_column_type(type_name)
                    typed = True
            elif key == "nullable":
                field.optional = value.type == "true"
            elif key == "unique":
                field.unique = value.type == "true"
            elif key == "array":
                field.is_list = value.type == "true"
            elif key == "name":
                field.mapped_name = string_value(value, self._source)
            elif key == "default":
                default_node = value
            elif key == "enum":
                enum_name = self._enum_reference(field.name, value)

        if enum_name is not None:
            field.scalar_type = enum_name
            typed = True
        if default_node is not None:
            field.default = self._default_expression(default_node, enum_name)
        return typed

    def _default_expression(self, value: Node, enum_name: str | None) -> str | None:
        kind = value.type
        if kind == "string":
            raw = string_value(value, self._source) or ""
            if enum_name is not None:
                return self._enum_member_for(enum_name, raw)
            return f'"{raw}"'
        if kind in ("number", "true", "false"):
            return self._ctx.text(value)
        if kind == "call_expression":
            function = value.child_by_field_name("function")
            if function is not None and self._ctx.text(function) == "Date":
                return "now()"
        if kind == "new_expression":
            constructor = value.child_by_field_name("constructor")
            if constructor is not None and self._ctx.text(constructor) == "Date":
                return "now()"
        if kind == "arrow_function":
            raw = string_value(value.child_by_field_name("body"), self._source)
            if raw is not None:
                lowered = raw.strip().lower()
                if lowered in _NOW_DEFAULTS:
                    return "now()"
                if lowered in _UUID_DEFAULTS:
                    return "uuid()"
        if kind == "member_expression":
            prop = value.child_by_field_name("property")
            if prop is not None:
                return self._ctx.text(prop)
        return None

    def _enum_reference(self, field_name: str, value: Node) -> str | None:
        if value.type == "identifier":
            enum_name = self._ctx.text(value)
            self._register_declared_enum(enum_name)
            return enum_name
        if value.type == "array":
            values = [string_value(element, self._source) for element in significant_children(value)]
            if not values or any(v is None for v in values):
                return None
            enum_name = f"{self._model}{field_name[:1].upper()}{field_name[1:]}"
            self._ctx.enums.setdefault(enum_name, EnumDescriptor(name=enum_name, values=[v for v in values if v]))
            return enum_name
        return None

    def _register_declared_enum(self, enum_name: str) -> None:
        members = self._declared_enums.get(enum_name)
        if members is None:
            logger.warning("Enum %s used by model %s is not declared in this file", enum_name, self._model)
            self._ctx.enums.setdefault(enum_name, EnumDescriptor(name=enum_name))
            return
        self._ctx.enums.setdefault(enum_name, EnumDescriptor(name=enum_name, values=[m for m, _ in members]))

    def _enum_member_for(self, enum_name: str, raw: str) -> str:
        for member, literal in self._declared_enums.get(enum_name, []):
            if literal == raw:
                return member
        return raw

    def _timestamp(self, name: str, role: FieldRole) -> FieldDescriptor:
        if role is FieldRole.CREATED_AT:
            return FieldDescriptor(name=name, scalar_type="DateTime", role=role, default="now()")
        if role is FieldRole.UPDATED_AT:
            return FieldDescriptor(name=name, scalar_type="DateTime", role=role)
        return FieldDescriptor(name=name, scalar_type="DateTime", role=role, optional=True, mapped_name="deleted_at")

    def _relation(self, name: str, decorator: str, args: list[Node], member: Node) -> list[FieldDescriptor]:
        kind = RELATION_KINDS[decorator]
        target = self._relation_target(args, member)
        if target is None:
            logger.warning("Could not resolve the target of relation %s.%s", self._model, name)
            target = UNKNOWN_MODEL

        if kind in (RelationKind.ONE_TO_ONE, RelationKind.MANY_TO_MANY):
            relation_name = f"{self._model}To{target}"
        else:
            relation_name = f"{name}Relation"
        relation = RelationDescriptor(kind=kind, target_model=target, relation_name=relation_name)

        fields = [
            FieldDescriptor(
                name=name,
                scalar_type=target,
                role=FieldRole.RELATION,
                optional=kind is RelationKind.ONE_TO_ONE,
                is_list=kind in (RelationKind.ONE_TO_MANY, RelationKind.MANY_TO_MANY),
                relation=relation,
            )
        ]
        if relation.owns_foreign_key:
            fields.append(FieldDescriptor(name=f"{name}Id", scalar_type="Int", role=FieldRole.PLAIN))
        return fields

    def _relation_target(self, args: list[Node], member: Node) -> str | None:
        if args:
            first = args[0]
            if first.type == "arrow_function":
                body = first.child_by_field_name("body")
                if body is not None and body.type == "identifier":
                    return self._ctx.text(body)
            named = string_value(first, self._source)
            if named:
                return named

        type_node = type_of(member)
        while type_node is not None and type_node.type == "array_type":
            elements = significant_children(type_node)
            type_node = elements[0] if elements else None
        if type_node is not None and type_node.type == "type_identifier":
            return self._ctx.text(type_node)
        return None

    def _declared_type_name(self, args: list[Node]) -> str | None:
        if not args:
            return None
        first = args[0]
        type_name = string_value(first, self._source)
        if type_name is not None:
            return type_name
        if first.type == "object":
            member = find_member(first, "type", self._source)
            if member is not None:
                return string_value(member_value(member), self._source)
        return None

    def _scalar_for_type(self, type_node: Node | None) -> str:
        if type_node is None:
            return DEFAULT_SCALAR
        if type_node.type in ("predefined_type", "type_identifier"):
            name = self._ctx.text(type_node)
            if name in ANNOTATION_TYPE_MAP:
                return ANNOTATION_TYPE_MAP[name]
            if name in self._declared_enums:
                self._register_declared_enum(name)
                return name
            return map_column_type(name)
        if type_node.type == "union_type":
            for part in significant_children(type_node):
                if self._ctx.text(part) in ("null", "undefined"):
                    continue
                return self._scalar_for_type(part)
        return DEFAULT_SCALAR

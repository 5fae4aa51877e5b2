"""The closed table of repository method rewrites.

Each rule names the Prisma method a TypeORM repository method becomes and how
the call arguments are reshaped. Argument transforms receive the argument
nodes and a ``render`` callback (node -> current source text) and return the
new argument texts, or ``None`` to keep the original argument list.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tree_sitter import Node

from typeorm_to_prisma.core.ast import member_value, object_members

Render = Callable[[Node], str]
KeyOf = Callable[[Node], str | None]
ArgumentTransform = Callable[[Sequence[Node], Render, KeyOf], list[str] | None]
MethodChooser = Callable[[Sequence[Node], KeyOf], str]

# findOne options that stay next to the generated ``where``.
FIND_OPTION_KEYS = frozenset({"relations", "select", "order", "skip", "take"})

SAVE_ADVISORY = "// NOTE: `save` may insert or update; verify that the chosen Prisma call matches the intent."
QUERY_BUILDER_ADVISORY = "// TODO: convert this query builder to a Prisma query by hand; it is not rewritten automatically."
QUERY_BUILDER_EXAMPLE = """/*
 Query builder conversion example.

 TypeORM:
   const users = await this.repository
     .createQueryBuilder('user')
     .leftJoinAndSelect('user.profile', 'profile')
     .where('user.isActive = :isActive', { isActive: true })
     .getMany();

 Prisma:
   const users = await this.prisma.user.findMany({
     where: { isActive: true },
     include: { profile: true },
   });
*/"""


@dataclass(frozen=True)
class RewriteRule:
    target_method: str
    transform: ArgumentTransform | None = None
    choose_method: MethodChooser | None = None
    advisories: tuple[str, ...] = ()
    supported: bool = True

    def method_for(self, args: Sequence[Node], key_of: KeyOf) -> str:
        if self.choose_method is not None:
            return self.choose_method(args, key_of)
        return self.target_method

    def arguments_for(self, args: Sequence[Node], render: Render, key_of: KeyOf) -> list[str] | None:
        if self.transform is None:
            return None
        return self.transform(args, render, key_of)


def object_text(entries: Sequence[str]) -> str:
    return "{" + ", ".join(entries) + "}"


def _where(text: str) -> str:
    return object_text([f"where: {text}"])


def _where_id(text: str) -> str:
    return object_text([f"id: {text}"])


def _rest(args: Sequence[Node], render: Render) -> list[str]:
    return [render(arg) for arg in args[1:]]


def _wrap_in_where(args: Sequence[Node], render: Render, key_of: KeyOf) -> list[str] | None:
    if not args:
        return None
    return [_where(render(args[0])), *_rest(args, render)]


def _rename_relations(member: Node, render: Render, key_of: KeyOf) -> str:
    if key_of(member) != "relations":
        return render(member)
    value = member_value(member)
    if value is None or value.type == "shorthand_property_identifier":
        return "include: relations"
    return f"include: {render(value)}"


def _find_one_arguments(args: Sequence[Node], render: Render, key_of: KeyOf) -> list[str] | None:
    if not args or args[0].type != "object":
        return None
    members = object_members(args[0])
    keys = [key_of(member) for member in members]

    if "where" in keys:
        if "relations" not in keys:
            return None
        entries = [_rename_relations(member, render, key_of) for member in members]
    else:
        options = [m for m, k in zip(members, keys) if k in FIND_OPTION_KEYS]
        criteria = [m for m, k in zip(members, keys) if k not in FIND_OPTION_KEYS]
        if not criteria and "relations" not in keys:
            return None
        entries = [_rename_relations(member, render, key_of) for member in options]
        if criteria:
            entries.append(f"where: {object_text([render(m) for m in criteria])}")
    return [object_text(entries), *_rest(args, render)]


def _save_id_member(args: Sequence[Node], key_of: KeyOf) -> Node | None:
    """The ``id`` member of a single object argument, unless it is ``null``/``undefined``."""
    if len(args) != 1 or args[0].type != "object":
        return None
    for member in object_members(args[0]):
        if key_of(member) != "id":
            continue
        value = member_value(member)
        if value is not None and value.type not in ("null", "undefined"):
            return member
    return None


def _save_method(args: Sequence[Node], key_of: KeyOf) -> str:
    return "update" if _save_id_member(args, key_of) is not None else "create"


def _save_arguments(args: Sequence[Node], render: Render, key_of: KeyOf) -> list[str] | None:
    id_member = _save_id_member(args, key_of)
    if id_member is None:
        if len(args) != 1:
            return None
        return [object_text([f"data: {render(args[0])}"])]

    value = member_value(id_member)
    id_text = "id" if id_member.type == "shorthand_property_identifier" or value is None else render(value)
    data = [
        render(member)
        for member in object_members(args[0])
        if (member.start_byte, member.end_byte) != (id_member.start_byte, id_member.end_byte)
    ]
    return [object_text([f"where: {_where_id(id_text)}", f"data: {object_text(data)}"])]


def _update_arguments(args: Sequence[Node], render: Render, key_of: KeyOf) -> list[str] | None:
    if len(args) < 2:
        return None
    criteria, data = args[0], args[1]
    where = render(criteria) if criteria.type == "object" else _where_id(render(criteria))
    return [object_text([f"where: {where}", f"data: {render(data)}"]), *[render(a) for a in args[2:]]]


_ID_LIKE = frozenset({"number", "string", "identifier", "member_expression"})


def _delete_arguments(args: Sequence[Node], render: Render, key_of: KeyOf) -> list[str] | None:
    if not args:
        return None
    first = args[0]
    if first.type in _ID_LIKE:
        return [_where(_where_id(render(first))), *_rest(args, render)]
    if first.type == "object":
        return [_where(render(first)), *_rest(args, render)]
    return None


def _count_arguments(args: Sequence[Node], render: Render, key_of: KeyOf) -> list[str] | None:
    if not args or args[0].type != "object":
        return None
    if any(key_of(member) == "where" for member in object_members(args[0])):
        return None
    return [_where(render(args[0])), *_rest(args, render)]


REWRITE_RULES: dict[str, RewriteRule] = {
    "find": RewriteRule("findMany"),
    "findOne": RewriteRule("findUnique", transform=_find_one_arguments),
    "findOneBy": RewriteRule("findUnique", transform=_wrap_in_where),
    "findBy": RewriteRule("findMany", transform=_wrap_in_where),
    "save": RewriteRule(
        "create",
        transform=_save_arguments,
        choose_method=_save_method,
        advisories=(SAVE_ADVISORY,),
    ),
    "update": RewriteRule("update", transform=_update_arguments),
    "delete": RewriteRule("delete", transform=_delete_arguments),
    "remove": RewriteRule("delete", transform=_delete_arguments),
    "count": RewriteRule("count", transform=_count_arguments),
    "createQueryBuilder": RewriteRule(
        "createQueryBuilder",
        advisories=(QUERY_BUILDER_ADVISORY, QUERY_BUILDER_EXAMPLE),
        supported=False,
    ),
}

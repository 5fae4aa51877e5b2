"""Query helpers over tree-sitter syntax trees.

The parser and its node types belong to ``tree-sitter``; this module only
wraps the lookups the rewrite stages need (find by kind, find by shape and a
handful of accessors for decorators, call arguments and object literals).
"""

from functools import lru_cache
from pathlib import Path
from typing import cast

from tree_sitter import Node, Query, QueryCursor, Tree
from tree_sitter_language_pack import SupportedLanguage, get_language, get_parser

# Node kinds whose children are statements (or class members).
_STATEMENT_CONTAINERS = frozenset({"program", "statement_block", "class_body", "switch_case", "switch_default"})

CLASS_KINDS = ("class_declaration", "abstract_class_declaration", "class")
FIELD_KINDS = ("public_field_definition", "field_definition")


@lru_cache(maxsize=32)
def _load_query(language: str, query_name: str) -> Query:
    queries_dir = Path(__file__).parent.parent / "queries"
    query_path = queries_dir / f"{query_name}.scm"
    if not query_path.exists():
        raise FileNotFoundError(f"Query file not found: {query_path}")
    query_text = query_path.read_text(encoding="utf-8")
    return Query(get_language(cast(SupportedLanguage, language)), query_text)


def parse_source(source_bytes: bytes, language: str) -> Tree:
    parser = get_parser(cast(SupportedLanguage, language))
    return parser.parse(source_bytes)


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def find_by_kind(root: Node, *kinds: str) -> list[Node]:
    """Return nodes of the given kinds in post-order (inner nodes before the nodes enclosing them)."""
    wanted = set(kinds)
    found: list[Node] = []
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, visited = stack.pop()
        if visited:
            if node.type in wanted:
                found.append(node)
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children))
    return found


def find_by_shape(root: Node, query_name: str, language: str) -> list[dict[str, list[Node]]]:
    """Run the named ``queries/*.scm`` pattern and return one capture dict per match."""
    cursor = QueryCursor(_load_query(language, query_name))
    return [captures for _, captures in cursor.matches(root)]


def significant_children(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def argument_nodes(call: Node) -> list[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return []
    return significant_children(arguments)


def object_members(obj: Node) -> list[Node]:
    return significant_children(obj)


def member_key(member: Node, source: bytes) -> str | None:
    """Key of an object literal member, ``None`` for spreads and computed keys."""
    if member.type == "shorthand_property_identifier":
        return node_text(member, source)
    if member.type == "pair":
        key = member.child_by_field_name("key")
        if key is None:
            return None
        if key.type == "string":
            return string_value(key, source)
        if key.type in ("property_identifier", "number"):
            return node_text(key, source)
    return None


def member_value(member: Node) -> Node | None:
    if member.type == "pair":
        return member.child_by_field_name("value")
    if member.type == "shorthand_property_identifier":
        return member
    return None


def find_member(obj: Node, key: str, source: bytes) -> Node | None:
    for member in object_members(obj):
        if member_key(member, source) == key:
            return member
    return None


def string_value(node: Node | None, source: bytes) -> str | None:
    if node is None or node.type != "string":
        return None
    return node_text(node, source)[1:-1]


def decorators_of(node: Node) -> list[Node]:
    """Decorators attached to a class or field, including those written before ``export``."""
    decorators = [child for child in node.children if child.type == "decorator"]
    parent = node.parent
    if node.type in CLASS_KINDS and parent is not None and parent.type == "export_statement":
        decorators = [child for child in parent.children if child.type == "decorator"] + decorators
    return decorators


def _decorator_expression(decorator: Node) -> Node | None:
    children = significant_children(decorator)
    return children[0] if children else None


def decorator_name(decorator: Node, source: bytes) -> str | None:
    expression = _decorator_expression(decorator)
    if expression is None:
        return None
    if expression.type in ("call_expression", "decorator_call_expression"):
        expression = expression.child_by_field_name("function")
        if expression is None:
            return None
    if expression.type == "identifier":
        return node_text(expression, source)
    if expression.type in ("member_expression", "decorator_member_expression"):
        prop = expression.child_by_field_name("property")
        return node_text(prop, source) if prop is not None else None
    return None


def decorator_arguments(decorator: Node) -> list[Node]:
    expression = _decorator_expression(decorator)
    if expression is None or expression.type not in ("call_expression", "decorator_call_expression"):
        return []
    return argument_nodes(expression)


def type_of(node: Node) -> Node | None:
    """The type node of a field or parameter annotation (``name: Type``)."""
    annotation = node.child_by_field_name("type")
    if annotation is None:
        return None
    if annotation.type == "type_annotation":
        children = significant_children(annotation)
        return children[0] if children else None
    return annotation


def generic_argument(type_node: Node | None, generic_name: str, source: bytes) -> str | None:
    """Return ``X`` for a ``generic_name<X>`` type reference."""
    if type_node is None or type_node.type != "generic_type":
        return None
    name = type_node.child_by_field_name("name")
    if name is None or node_text(name, source) != generic_name:
        return None
    arguments = type_node.child_by_field_name("type_arguments")
    if arguments is None:
        return None
    params = significant_children(arguments)
    if not params or params[0].type not in ("type_identifier", "nested_type_identifier"):
        return None
    return node_text(params[0], source)


def same_node(a: Node | None, b: Node | None) -> bool:
    if a is None or b is None:
        return False
    return (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


def enclosing_statement(node: Node) -> Node:
    current = node
    while current.parent is not None and current.parent.type not in _STATEMENT_CONTAINERS:
        current = current.parent
    return current


def enclosing_class(node: Node) -> Node | None:
    current = node.parent
    while current is not None:
        if current.type in CLASS_KINDS:
            return current
        current = current.parent
    return None


def class_name(class_node: Node, source: bytes) -> str | None:
    name = class_node.child_by_field_name("name")
    return node_text(name, source) if name is not None else None


def line_indent(source: bytes, offset: int) -> str:
    """Whitespace between the start of the line and ``offset``, or ``""`` if other text precedes it."""
    line_start = source.rfind(b"\n", 0, offset) + 1
    prefix = source[line_start:offset]
    if prefix.strip():
        return ""
    return prefix.decode("utf-8")

"""Best-effort inference of the model a repository call operates on.

Resolution is heuristic. A ``None`` answer makes the call-site rewriter fall
back to the configured placeholder model, which has to be fixed by hand.
"""

import logging
import re
from typing import Protocol

from tree_sitter import Node

from typeorm_to_prisma.core.ast import (
    FIELD_KINDS,
    class_name,
    enclosing_class,
    find_by_kind,
    generic_argument,
    node_text,
    same_node,
    type_of,
)
from typeorm_to_prisma.core.mapping import REPOSITORY_TYPE

logger = logging.getLogger(__name__)

_CLASS_SUFFIX = re.compile(r"^(.+)(Service|Controller|Repository)$")


class ModelNameResolver(Protocol):
    def resolve(self, call: Node, source: bytes) -> str | None: ...


def repository_member(call: Node, source: bytes) -> str | None:
    """Name of ``member`` in ``this.member.method(...)``."""
    callee = call.child_by_field_name("function")
    if callee is None or callee.type != "member_expression":
        return None
    receiver = callee.child_by_field_name("object")
    if receiver is None or receiver.type != "member_expression":
        return None
    owner = receiver.child_by_field_name("object")
    prop = receiver.child_by_field_name("property")
    if owner is None or owner.type != "this" or prop is None:
        return None
    return node_text(prop, source)


def declared_repository_entity(class_node: Node, member: str, source: bytes) -> str | None:
    """Entity ``X`` from a ``member: Repository<X>`` field or constructor parameter property."""
    body = class_node.child_by_field_name("body")
    if body is None:
        return None

    for child in body.named_children:
        if child.type not in FIELD_KINDS:
            continue
        name = child.child_by_field_name("name")
        if name is not None and node_text(name, source) == member:
            entity = generic_argument(type_of(child), REPOSITORY_TYPE, source)
            if entity:
                return entity

    for param in find_by_kind(body, "required_parameter", "optional_parameter"):
        if not same_node(enclosing_class(param), class_node):
            continue
        if not any(child.type in ("accessibility_modifier", "readonly") for child in param.children):
            continue
        pattern = param.child_by_field_name("pattern")
        if pattern is not None and node_text(pattern, source) == member:
            entity = generic_argument(type_of(param), REPOSITORY_TYPE, source)
            if entity:
                return entity
    return None


class ConventionModelResolver:
    """Resolve from the enclosing class name, then from the repository member's declared type."""

    def resolve(self, call: Node, source: bytes) -> str | None:
        class_node = enclosing_class(call)
        if class_node is None:
            return None

        name = class_name(class_node, source)
        if name:
            match = _CLASS_SUFFIX.match(name)
            if match:
                return match.group(1)

        member = repository_member(call, source)
        if member is None:
            return None
        entity = declared_repository_entity(class_node, member, source)
        if entity is None:
            logger.debug("No model found for %s.%s", name, member)
        return entity


class MappingModelResolver:
    """Resolve from an explicit class/member to model mapping before delegating."""

    def __init__(self, mapping: dict[str, str], fallback: ModelNameResolver | None = None) -> None:
        self._mapping = mapping
        self._fallback = fallback

    def resolve(self, call: Node, source: bytes) -> str | None:
        class_node = enclosing_class(call)
        if class_node is not None:
            name = class_name(class_node, source)
            if name in self._mapping:
                return self._mapping[name]
        member = repository_member(call, source)
        if member is not None and member in self._mapping:
            return self._mapping[member]
        if self._fallback is None:
            return None
        return self._fallback.resolve(call, source)


def build_resolver(mapping: dict[str, str]) -> ModelNameResolver:
    convention = ConventionModelResolver()
    if mapping:
        return MappingModelResolver(mapping, fallback=convention)
    return convention

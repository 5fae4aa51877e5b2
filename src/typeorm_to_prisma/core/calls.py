"""Rewrite TypeORM repository usage into Prisma client calls."""

import logging
import re

from tree_sitter import Node

from typeorm_to_prisma.core.ast import (
    argument_nodes,
    decorator_name,
    decorators_of,
    find_by_kind,
    find_by_shape,
    generic_argument,
    member_key,
    node_text,
    type_of,
)
from typeorm_to_prisma.core.mapping import INJECTION_DECORATOR, REPOSITORY_TYPE
from typeorm_to_prisma.core.rules import REWRITE_RULES, RewriteRule
from typeorm_to_prisma.core.session import TransformContext
from typeorm_to_prisma.errors import CodemodError

logger = logging.getLogger(__name__)


def model_accessor(model: str, model_case: str) -> str:
    if model_case == "camel" and model:
        return model[:1].lower() + model[1:]
    return model


class CallSiteRewriter:
    """Rewrites ``this.<repository>.<method>(...)`` calls through the rule table."""

    def __init__(self, ctx: TransformContext) -> None:
        self._ctx = ctx
        self._member_pattern = re.compile(ctx.settings.repository_member_pattern)

    def rewrite(self) -> int:
        rewritten = self.rewrite_injections()
        calls = []
        for captures in find_by_shape(self._ctx.root, "repository_calls", self._ctx.language):
            call = captures["call"][0]
            member = self._ctx.text(captures["member"][0])
            if self._member_pattern.match(member) and not self._is_client_access(captures["receiver"][0]):
                calls.append(call)

        # Inner calls first so enclosing rewrites render their arguments with the inner result.
        calls.sort(key=lambda n: (n.end_byte, -n.start_byte))
        for call in calls:
            try:
                if self.rewrite_call(call):
                    rewritten += 1
            except CodemodError as exc:
                logger.warning("Skipping call at line %d: %s", call.start_point[0] + 1, exc)
        return rewritten

    def _is_client_access(self, receiver: Node) -> bool:
        """True for ``<owner>.<client_member>.<Model>``, the shape a rewritten call already has."""
        owner = receiver.child_by_field_name("object")
        if owner is None or owner.type != "member_expression":
            return False
        prop = owner.child_by_field_name("property")
        return prop is not None and self._ctx.text(prop) == self._ctx.settings.client_member

    def rewrite_call(self, call: Node) -> bool:
        ctx = self._ctx
        callee = call.child_by_field_name("function")
        if callee is None:
            return False
        method_node = callee.child_by_field_name("property")
        receiver = callee.child_by_field_name("object")
        if method_node is None or receiver is None:
            return False

        rule = REWRITE_RULES.get(ctx.text(method_node))
        if rule is None:
            return False

        if not rule.supported:
            inserted = [ctx.advise(call, advisory) for advisory in rule.advisories]
            if any(inserted):
                ctx.flags.services = True
            return False

        owner = receiver.child_by_field_name("object")
        if owner is None:
            return False
        self._apply(call, callee, owner, rule)
        for advisory in rule.advisories:
            ctx.advise(call, advisory)
        ctx.flags.services = True
        return True

    def _apply(self, call: Node, callee: Node, owner: Node, rule: RewriteRule) -> None:
        ctx = self._ctx
        args = argument_nodes(call)

        def key_of(member: Node) -> str | None:
            return member_key(member, ctx.source)

        model = ctx.resolver.resolve(call, ctx.source)
        if model is None:
            logger.warning(
                "Could not infer the model for the call at line %d; using '%s'",
                call.start_point[0] + 1,
                ctx.settings.placeholder_model,
            )
            model = ctx.settings.placeholder_model
        else:
            model = model_accessor(model, ctx.settings.model_case)

        method = rule.method_for(args, key_of)
        new_args = rule.arguments_for(args, ctx.editor.render, key_of)

        client = f"{ctx.editor.render(owner)}.{ctx.settings.client_member}.{model}"
        ctx.editor.replace(callee, f"{client}.{method}")
        if new_args is not None:
            arguments = call.child_by_field_name("arguments")
            if arguments is not None:
                ctx.editor.replace(arguments, "(" + ", ".join(new_args) + ")")

    def rewrite_injections(self) -> int:
        """Swap ``Repository<X>`` constructor parameters for one client service parameter."""
        ctx = self._ctx
        rewritten = 0
        for method in find_by_kind(ctx.root, "method_definition"):
            name = method.child_by_field_name("name")
            params = method.child_by_field_name("parameters")
            if name is None or params is None or ctx.text(name) != "constructor":
                continue

            repository_params = [
                param
                for param in params.named_children
                if param.type in ("required_parameter", "optional_parameter") and self._is_repository_param(param)
            ]
            if not repository_params:
                continue

            try:
                first, *others = repository_params
                ctx.editor.replace(first, self._client_parameter(first))
                for param in others:
                    ctx.editor.remove_list_item(param)
            except CodemodError as exc:
                logger.warning("Skipping constructor at line %d: %s", method.start_point[0] + 1, exc)
                continue
            ctx.flags.repositories = True
            rewritten += 1
        return rewritten

    def _is_repository_param(self, param: Node) -> bool:
        if generic_argument(type_of(param), REPOSITORY_TYPE, self._ctx.source) is not None:
            return True
        return any(decorator_name(d, self._ctx.source) == INJECTION_DECORATOR for d in decorators_of(param))

    def _client_parameter(self, param: Node) -> str:
        modifiers = [
            node_text(child, self._ctx.source)
            for child in param.children
            if child.type in ("accessibility_modifier", "readonly")
        ]
        if not modifiers or modifiers[0] == "readonly":
            modifiers.insert(0, "private")
        settings = self._ctx.settings
        return f"{' '.join(modifiers)} {settings.client_member}: {settings.client_service}"


def rewrite_call_sites(ctx: TransformContext) -> int:
    return CallSiteRewriter(ctx).rewrite()

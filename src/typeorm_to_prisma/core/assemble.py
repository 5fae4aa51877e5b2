from collections.abc import Iterable

from typeorm_to_prisma.core.ports.sink import SchemaSink
from typeorm_to_prisma.core.schema import render_enum, render_model
from typeorm_to_prisma.core.session import TransformContext
from typeorm_to_prisma.models import EnumDescriptor, ModelDescriptor, TransformResult

SCHEMA_PREAMBLE = """// Prisma schema generated from TypeORM entities.
// Review it against `npx prisma db pull` before relying on it.

generator client {{
  provider = "prisma-client-js"
}}

datasource db {{
  provider = "{provider}"
  url      = env("DATABASE_URL")
}}

"""


def render_schema_document(
    models: Iterable[ModelDescriptor],
    enums: Iterable[EnumDescriptor] = (),
    provider: str = "postgresql",
) -> str:
    """Preamble, then enum fragments, then model fragments, each in the given order."""
    parts = [SCHEMA_PREAMBLE.format(provider=provider)]
    parts.extend(render_enum(enum) + "\n" for enum in enums)
    parts.extend(render_model(model) + "\n" for model in models)
    return "".join(parts)


def assemble(
    ctx: TransformContext,
    original: str,
    sink: SchemaSink | None = None,
    path: str | None = None,
) -> TransformResult:
    """Build the pass result; the original text is returned untouched when no rewrite fired."""
    changed = ctx.flags.any()
    output = ctx.editor.print() if changed else original

    document: str | None = None
    if ctx.models:
        document = render_schema_document(
            ctx.models.values(), ctx.enums.values(), provider=ctx.settings.datasource_provider
        )
        if sink is not None:
            sink.write(path, document)

    return TransformResult(
        output=output,
        changed=changed and output != original,
        flags=ctx.flags.model_copy(),
        models=list(ctx.models.values()),
        enums=list(ctx.enums.values()),
        schema_document=document,
        advisories=ctx.advisories if changed else 0,
    )

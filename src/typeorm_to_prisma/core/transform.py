"""One transformation pass: schema extraction, call-site rewriting, import rewriting."""

import logging

from typeorm_to_prisma.config import CodemodSettings, load_settings
from typeorm_to_prisma.core.assemble import assemble
from typeorm_to_prisma.core.ast import parse_source
from typeorm_to_prisma.core.calls import rewrite_call_sites
from typeorm_to_prisma.core.context import ModelNameResolver, build_resolver
from typeorm_to_prisma.core.editor import SourceEditor
from typeorm_to_prisma.core.imports import rewrite_imports
from typeorm_to_prisma.core.languages import normalize_language
from typeorm_to_prisma.core.ports.sink import SchemaSink
from typeorm_to_prisma.core.schema import extract_schema
from typeorm_to_prisma.core.session import TransformContext
from typeorm_to_prisma.models import TransformResult

logger = logging.getLogger(__name__)


def transform_source(
    source: str,
    language: str = "typescript",
    settings: CodemodSettings | None = None,
    sink: SchemaSink | None = None,
    path: str | None = None,
    resolver: ModelNameResolver | None = None,
) -> TransformResult:
    """Transform one TypeScript source unit.

    Returns the input string itself when no rewrite applied.
    """
    settings = settings or load_settings()
    resolved_language = normalize_language(language)
    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes, resolved_language)
    if tree.root_node.has_error:
        logger.warning("%s has syntax errors; rewriting what could be parsed", path or "<source>")

    ctx = TransformContext(
        source=source_bytes,
        tree=tree,
        language=resolved_language,
        settings=settings,
        resolver=resolver or build_resolver(settings.model_mapping),
        editor=SourceEditor(source_bytes),
    )
    extract_schema(ctx)
    rewrite_call_sites(ctx)
    rewrite_imports(ctx)
    return assemble(ctx, source, sink=sink, path=path)

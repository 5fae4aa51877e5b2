"""FastMCP server exposing the codemod as tools."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from typeorm_to_prisma.config import CodemodSettings, load_settings
from typeorm_to_prisma.core.transform import transform_source


def run_transform(code: str, language: str, settings: CodemodSettings) -> dict[str, Any]:
    result = transform_source(code, language=language, settings=settings)
    return {
        "output": result.output,
        "changed": result.changed,
        "flags": result.flags.model_dump(),
        "models": [model.name for model in result.models],
        "advisories": result.advisories,
        "schema": result.schema_document,
    }


def run_schema_extraction(code: str, language: str, settings: CodemodSettings) -> str | None:
    return transform_source(code, language=language, settings=settings).schema_document


def create_mcp_server(settings: CodemodSettings | None = None) -> FastMCP:
    """Create a FastMCP server that transforms code with the given settings."""
    settings = settings or load_settings()

    mcp = FastMCP(
        "typeorm-to-prisma",
        instructions="Rewrite TypeORM repository code into Prisma client code and extract Prisma schemas.",
    )

    @mcp.tool()
    def transform_code(code: str, language: str = "typescript") -> dict[str, Any]:
        """Rewrite a TypeScript snippet from TypeORM to Prisma."""
        return run_transform(code, language, settings)

    @mcp.tool()
    def extract_schema(code: str, language: str = "typescript") -> str:
        """Render the Prisma schema for the entity classes in a snippet."""
        document = run_schema_extraction(code, language, settings)
        if document is None:
            return "No entity classes found."
        return document

    return mcp

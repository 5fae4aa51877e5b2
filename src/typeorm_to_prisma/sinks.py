"""Destinations for the schema documents produced by a transformation pass."""

import logging
from pathlib import Path

from typeorm_to_prisma.core.assemble import render_schema_document
from typeorm_to_prisma.models import EnumDescriptor, ModelDescriptor, TransformResult

logger = logging.getLogger(__name__)


class LoggingSchemaSink:
    def write(self, path: str | None, document: str) -> None:
        logger.info("Generated Prisma schema for %s:\n%s", path or "<source>", document)


class CollectingSchemaSink:
    def __init__(self) -> None:
        self.documents: list[tuple[str | None, str]] = []

    def write(self, path: str | None, document: str) -> None:
        self.documents.append((path, document))


class SchemaFileWriter:
    """Merges the models of many files into one ``schema.prisma``.

    Models and enums keep the order in which they were first seen; a later
    definition with an already seen name is dropped with a warning. An enum
    placeholder from a file that only imports the enum gives way to a later
    declaration.
    """

    def __init__(self, provider: str = "postgresql") -> None:
        self._provider = provider
        self._models: dict[str, ModelDescriptor] = {}
        self._enums: dict[str, EnumDescriptor] = {}

    @property
    def model_names(self) -> list[str]:
        return list(self._models)

    def add(self, result: TransformResult, path: str | None = None) -> None:
        for model in result.models:
            if model.name in self._models:
                logger.warning("Model %s from %s was already collected; keeping the first", model.name, path)
                continue
            self._models[model.name] = model
        for enum in result.enums:
            known = self._enums.get(enum.name)
            if known is None or (not known.values and enum.values):
                self._enums[enum.name] = enum

    def render(self) -> str | None:
        if not self._models:
            return None
        return render_schema_document(self._models.values(), self._enums.values(), provider=self._provider)

    def write(self, target: Path) -> bool:
        document = self.render()
        if document is None:
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(document, encoding="utf-8")
        logger.info("Wrote %d model(s) to %s", len(self._models), target)
        return True

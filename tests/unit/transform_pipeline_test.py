"""Unit tests for the full transformation pass."""

import pytest

from typeorm_to_prisma.core.transform import transform_source
from typeorm_to_prisma.errors import UnsupportedLanguageError
from typeorm_to_prisma.sinks import CollectingSchemaSink


class TestNoOp:
    @pytest.mark.parametrize(
        "source",
        [
            "",
            "export const answer = 42;\n",
            "import { Injectable } from '@nestjs/common';\n\n@Injectable()\nexport class Clock {\n  now() {\n"
            "    return new Date();\n  }\n}\n",
            "class Cache {\n  get(key) {\n    return this.store.find(key);\n  }\n}\n",
        ],
    )
    def test_output_is_input(self, source: str) -> None:
        result = transform_source(source)
        assert not result.changed
        assert not result.flags.any()
        assert result.output == source

    def test_unsupported_language(self) -> None:
        with pytest.raises(UnsupportedLanguageError):
            transform_source("x = 1\n", language="python")


class TestService:
    def test_service_is_rewritten(self, user_service_source: str) -> None:
        result = transform_source(user_service_source)
        assert result.changed
        assert result.flags.services
        assert result.flags.repositories
        assert result.flags.modules
        assert not result.flags.entities
        assert "return this.prisma.User.findMany();" in result.output
        assert "return this.prisma.User.findUnique({where: { id }});" in result.output
        assert "private readonly prisma: PrismaService,\n  ) {}" in result.output
        assert "Repository" not in result.output


class TestIdempotence:
    def test_service(self, user_service_source: str) -> None:
        once = transform_source(user_service_source).output
        again = transform_source(once)
        assert not again.changed
        assert again.output == once

    def test_module(self, user_module_source: str) -> None:
        once = transform_source(user_module_source).output
        assert transform_source(once).output == once

    def test_entity(self, user_entity_source: str) -> None:
        once = transform_source(user_entity_source)
        again = transform_source(once.output)
        assert not again.changed
        assert again.output == once.output
        assert again.schema_document == once.schema_document

    def test_query_builder(self) -> None:
        source = (
            "class UserService {\n"
            "  list() {\n"
            "    return this.repository.createQueryBuilder('u').getMany();\n"
            "  }\n"
            "}\n"
        )
        once = transform_source(source).output
        again = transform_source(once)
        assert not again.changed
        assert again.output == once

    def test_model_named_like_a_repository(self) -> None:
        source = "class AuditRepositoryService {\n  drop(id) {\n    return this.repository.delete(id);\n  }\n}\n"
        once = transform_source(source).output
        assert "return this.prisma.AuditRepository.delete({where: {id: id}});" in once
        again = transform_source(once)
        assert not again.changed
        assert again.output == once


class TestSchemaSink:
    def test_sink_receives_document(self, user_entity_source: str) -> None:
        sink = CollectingSchemaSink()
        result = transform_source(user_entity_source, sink=sink, path="src/user.entity.ts")
        assert sink.documents == [("src/user.entity.ts", result.schema_document)]

    def test_sink_is_not_called_without_entities(self, user_service_source: str) -> None:
        sink = CollectingSchemaSink()
        transform_source(user_service_source, sink=sink)
        assert sink.documents == []

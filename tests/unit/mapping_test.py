"""Unit tests for the type and decorator mapping tables."""

import pytest

from typeorm_to_prisma.core.mapping import (
    DECORATOR_ROLES,
    RELATION_KINDS,
    SCHEMA_DECORATOR_SYMBOLS,
    decorator_role,
    map_column_type,
)
from typeorm_to_prisma.models import FieldRole, RelationDescriptor, RelationKind


@pytest.mark.parametrize(
    ("column_type", "expected"),
    [
        ("varchar", "String"),
        ("VARCHAR", "String"),
        ("text", "String"),
        ("int", "Int"),
        ("integer", "Int"),
        ("bigint", "BigInt"),
        ("float", "Float"),
        ("decimal", "Decimal"),
        ("boolean", "Boolean"),
        ("timestamp", "DateTime"),
        ("jsonb", "Json"),
        ("geometry", "String"),
    ],
)
def test_map_column_type(column_type: str, expected: str) -> None:
    assert map_column_type(column_type) == expected


class TestDecoratorRoles:
    def test_identity_decorators(self) -> None:
        assert decorator_role("PrimaryGeneratedColumn") is FieldRole.IDENTITY
        assert decorator_role("PrimaryColumn") is FieldRole.IDENTITY

    def test_timestamps(self) -> None:
        assert decorator_role("CreateDateColumn") is FieldRole.CREATED_AT
        assert decorator_role("UpdateDateColumn") is FieldRole.UPDATED_AT
        assert decorator_role("DeleteDateColumn") is FieldRole.DELETED_AT

    def test_unknown_and_missing_names(self) -> None:
        assert decorator_role("Injectable") is None
        assert decorator_role(None) is None

    def test_every_relation_kind_has_a_relation_role(self) -> None:
        for name, kind in RELATION_KINDS.items():
            assert DECORATOR_ROLES[name] is FieldRole.RELATION
            assert kind.value == name

    def test_only_many_to_one_owns_the_foreign_key(self) -> None:
        owners = {
            kind
            for kind in RelationKind
            if RelationDescriptor(kind=kind, target_model="User", relation_name="r").owns_foreign_key
        }
        assert owners == {RelationKind.MANY_TO_ONE}

    def test_schema_symbols_include_entity_marker(self) -> None:
        assert "Entity" in SCHEMA_DECORATOR_SYMBOLS
        assert "JoinColumn" in SCHEMA_DECORATOR_SYMBOLS

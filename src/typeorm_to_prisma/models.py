from enum import Enum

from pydantic import BaseModel, Field


class FieldRole(str, Enum):
    IDENTITY = "identity"
    PLAIN = "plain"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DELETED_AT = "deleted_at"
    RELATION = "relation"
    JOIN = "join"


class RelationKind(str, Enum):
    ONE_TO_ONE = "OneToOne"
    MANY_TO_ONE = "ManyToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_MANY = "ManyToMany"


class RelationDescriptor(BaseModel):
    """Relation to another model, referenced by name only."""

    kind: RelationKind
    target_model: str
    relation_name: str

    @property
    def owns_foreign_key(self) -> bool:
        return self.kind is RelationKind.MANY_TO_ONE


class FieldDescriptor(BaseModel):
    name: str
    scalar_type: str
    role: FieldRole
    optional: bool = False
    unique: bool = False
    is_list: bool = False
    default: str | None = None
    mapped_name: str | None = None
    relation: RelationDescriptor | None = None


class ModelDescriptor(BaseModel):
    name: str
    table_name: str
    fields: list[FieldDescriptor] = Field(default_factory=list)


class EnumDescriptor(BaseModel):
    name: str
    values: list[str] = Field(default_factory=list)


class ChangeFlags(BaseModel):
    entities: bool = False
    repositories: bool = False
    modules: bool = False
    services: bool = False

    def any(self) -> bool:
        return self.entities or self.repositories or self.modules or self.services


class TransformResult(BaseModel):
    output: str
    changed: bool
    flags: ChangeFlags
    models: list[ModelDescriptor] = Field(default_factory=list)
    enums: list[EnumDescriptor] = Field(default_factory=list)
    schema_document: str | None = None
    advisories: int = 0


class MigrationReport(BaseModel):
    files_scanned: int = 0
    files_changed: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)
    models: list[str] = Field(default_factory=list)
    schema_path: str | None = None

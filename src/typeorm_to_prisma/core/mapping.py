from typeorm_to_prisma.models import FieldRole, RelationKind

DEFAULT_SCALAR = "String"

COLUMN_TYPE_MAP: dict[str, str] = {
    "string": "String",
    "varchar": "String",
    "character varying": "String",
    "char": "String",
    "nvarchar": "String",
    "text": "String",
    "uuid": "String",
    "number": "Int",
    "int": "Int",
    "int2": "Int",
    "int4": "Int",
    "integer": "Int",
    "smallint": "Int",
    "mediumint": "Int",
    "tinyint": "Int",
    "bigint": "BigInt",
    "int8": "BigInt",
    "float": "Float",
    "double": "Float",
    "double precision": "Float",
    "real": "Float",
    "decimal": "Decimal",
    "numeric": "Decimal",
    "boolean": "Boolean",
    "bool": "Boolean",
    "date": "DateTime",
    "datetime": "DateTime",
    "time": "DateTime",
    "timestamp": "DateTime",
    "timestamptz": "DateTime",
    "json": "Json",
    "jsonb": "Json",
    "simple-json": "Json",
    "simple-array": "String[]",
    "bytea": "Bytes",
    "blob": "Bytes",
}

# TypeScript annotation names checked before the column table.
ANNOTATION_TYPE_MAP: dict[str, str] = {
    "string": "String",
    "number": "Int",
    "boolean": "Boolean",
    "Date": "DateTime",
}

DECORATOR_ROLES: dict[str, FieldRole] = {
    "PrimaryGeneratedColumn": FieldRole.IDENTITY,
    "PrimaryColumn": FieldRole.IDENTITY,
    "Column": FieldRole.PLAIN,
    "CreateDateColumn": FieldRole.CREATED_AT,
    "UpdateDateColumn": FieldRole.UPDATED_AT,
    "DeleteDateColumn": FieldRole.DELETED_AT,
    "OneToOne": FieldRole.RELATION,
    "ManyToOne": FieldRole.RELATION,
    "OneToMany": FieldRole.RELATION,
    "ManyToMany": FieldRole.RELATION,
    "JoinColumn": FieldRole.JOIN,
    "JoinTable": FieldRole.JOIN,
}

RELATION_KINDS: dict[str, RelationKind] = {kind.value: kind for kind in RelationKind}

ENTITY_DECORATOR = "Entity"
REPOSITORY_TYPE = "Repository"

SOURCE_LIBRARY = "typeorm"
NEST_INTEGRATION_LIBRARY = "@nestjs/typeorm"
REGISTRAR = "TypeOrmModule"
ROOT_REGISTRATION_METHODS = frozenset({"forRoot", "forRootAsync"})
REGISTRATION_METHODS = ROOT_REGISTRATION_METHODS | {"forFeature"}
INJECTION_DECORATOR = "InjectRepository"

REPOSITORY_SYMBOLS = frozenset({REPOSITORY_TYPE, "getRepository"})
SCHEMA_DECORATOR_SYMBOLS = frozenset({ENTITY_DECORATOR, *DECORATOR_ROLES})


def map_column_type(type_name: str) -> str:
    return COLUMN_TYPE_MAP.get(type_name.strip().lower(), DEFAULT_SCALAR)


def decorator_role(decorator_name: str | None) -> FieldRole | None:
    if decorator_name is None:
        return None
    return DECORATOR_ROLES.get(decorator_name)

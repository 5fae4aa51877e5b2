"""Unit tests for entity schema extraction and model rendering."""

from typeorm_to_prisma.core.schema import ENTITY_ADVISORY, UNDECLARED_ENUM_ADVISORY, render_enum, render_model
from typeorm_to_prisma.core.transform import transform_source
from typeorm_to_prisma.models import FieldRole, ModelDescriptor, RelationKind

RELATIONS = """import {
  Entity, PrimaryGeneratedColumn, OneToOne, OneToMany, ManyToOne, ManyToMany, JoinColumn, JoinTable,
} from 'typeorm';

@Entity()
export class User {
  @PrimaryGeneratedColumn()
  id: number;

  @OneToOne(() => Profile)
  @JoinColumn()
  profile: Profile;

  @OneToMany(() => Post, (post) => post.author)
  posts: Post[];

  @ManyToMany(() => Tag)
  @JoinTable()
  tags: Tag[];
}

@Entity()
export class Post {
  @PrimaryGeneratedColumn()
  id: number;

  @ManyToOne(() => User, (user) => user.posts)
  author: User;

  @ManyToOne(() => resolveOwner())
  owner: any;
}
"""

COLUMNS = """@Entity('accounts')
export class Account {
  @PrimaryColumn()
  code: string;

  @Column({ type: 'varchar', nullable: true, unique: true, name: 'display_name' })
  displayName: string;

  @Column({ default: true })
  active: boolean;

  @Column('decimal')
  balance: number;

  @Column({ type: 'timestamp', default: () => 'CURRENT_TIMESTAMP' })
  openedAt: Date;

  @CreateDateColumn()
  createdAt: Date;

  @UpdateDateColumn()
  updatedAt: Date;

  @DeleteDateColumn()
  deletedAt: Date;
}
"""

ENUMS = """export enum Role {
  Admin = 'admin',
  User = 'user',
}

@Entity()
export class Member {
  @PrimaryGeneratedColumn()
  id: number;

  @Column({ type: 'enum', enum: Role, default: 'user' })
  role: Role;

  @Column({ type: 'enum', enum: ['draft', 'live'] })
  status: string;
}
"""

IMPORTED_ENUM = """import { Role } from './role.enum';

@Entity()
export class Member {
  @PrimaryGeneratedColumn()
  id: number;

  @Column({ type: 'enum', enum: Role })
  role: Role;
}
"""


def _model(source: str, name: str) -> ModelDescriptor:
    result = transform_source(source)
    return next(model for model in result.models if model.name == name)


class TestModelRendering:
    def test_uuid_identity_and_plain_string_field(self, user_entity_source: str) -> None:
        result = transform_source(user_entity_source)
        assert [model.name for model in result.models] == ["User"]
        assert render_model(result.models[0]) == (
            "model User {\n"
            "  id String @id @default(uuid())\n"
            "  name String\n"
            "\n"
            '  @@map("user")\n'
            "}\n"
        )

    def test_entity_class_is_annotated_not_removed(self, user_entity_source: str) -> None:
        result = transform_source(user_entity_source)
        assert result.flags.entities
        assert f"{ENTITY_ADVISORY}\n@Entity()\nexport class User {{" in result.output
        assert "@PrimaryGeneratedColumn('uuid')\n  id: string;" in result.output

    def test_schema_document_has_preamble(self, user_entity_source: str) -> None:
        document = transform_source(user_entity_source).schema_document
        assert document is not None
        assert 'provider = "prisma-client-js"' in document
        assert 'provider = "postgresql"' in document
        assert 'url      = env("DATABASE_URL")' in document
        assert document.endswith('  @@map("user")\n}\n\n')

    def test_no_entities_no_document(self) -> None:
        result = transform_source("export class Plain {\n  name: string;\n}\n")
        assert result.models == []
        assert result.schema_document is None


class TestRelations:
    def test_one_to_one_relation_name_uses_owning_class(self) -> None:
        lines = render_model(_model(RELATIONS, "User")).splitlines()
        assert '  profile Profile? @relation("UserToProfile")' in lines

    def test_one_to_many_relation_name_uses_field(self) -> None:
        lines = render_model(_model(RELATIONS, "User")).splitlines()
        assert '  posts Post[] @relation("postsRelation")' in lines

    def test_many_to_many_relation_name_uses_owning_class(self) -> None:
        user = _model(RELATIONS, "User")
        tags = next(field for field in user.fields if field.name == "tags")
        assert tags.relation is not None
        assert tags.relation.kind is RelationKind.MANY_TO_MANY
        assert '  tags Tag[] @relation("UserToTag")' in render_model(user).splitlines()

    def test_many_to_one_adds_foreign_key(self) -> None:
        post = _model(RELATIONS, "Post")
        author = next(field for field in post.fields if field.name == "author")
        assert author.relation is not None
        assert author.relation.kind is RelationKind.MANY_TO_ONE
        assert author.relation.relation_name == "authorRelation"
        lines = render_model(post).splitlines()
        assert '  author User @relation("authorRelation")' in lines
        assert "  authorId Int" in lines

    def test_unresolvable_target_becomes_unknown(self) -> None:
        lines = render_model(_model(RELATIONS, "Post")).splitlines()
        assert '  owner Unknown @relation("ownerRelation")' in lines

    def test_join_decorators_carry_no_field(self) -> None:
        user = _model(RELATIONS, "User")
        assert [field.name for field in user.fields] == ["id", "profile", "posts", "tags"]
        assert user.fields[0].default == "autoincrement()"


class TestColumns:
    def test_table_name_argument(self) -> None:
        assert _model(COLUMNS, "Account").table_name == "accounts"

    def test_rendered_fields(self) -> None:
        lines = render_model(_model(COLUMNS, "Account")).splitlines()
        assert lines[1:9] == [
            "  code String @id",
            '  displayName String? @unique @map("display_name")',
            "  active Boolean @default(true)",
            "  balance Decimal",
            "  openedAt DateTime @default(now())",
            "  createdAt DateTime @default(now())",
            "  updatedAt DateTime @updatedAt",
            '  deletedAt DateTime? @map("deleted_at")',
        ]

    def test_timestamp_roles(self) -> None:
        roles = {field.name: field.role for field in _model(COLUMNS, "Account").fields}
        assert roles["createdAt"] is FieldRole.CREATED_AT
        assert roles["updatedAt"] is FieldRole.UPDATED_AT
        assert roles["deletedAt"] is FieldRole.DELETED_AT


class TestEnums:
    def test_declared_enum(self) -> None:
        result = transform_source(ENUMS)
        role = next(enum for enum in result.enums if enum.name == "Role")
        assert render_enum(role) == "enum Role {\n  Admin\n  User\n}\n"
        assert "  role Role @default(User)" in render_model(result.models[0]).splitlines()

    def test_inline_enum_values(self) -> None:
        result = transform_source(ENUMS)
        status = next(enum for enum in result.enums if enum.name == "MemberStatus")
        assert status.values == ["draft", "live"]
        assert "  status MemberStatus" in render_model(result.models[0]).splitlines()

    def test_enums_render_before_models(self) -> None:
        document = transform_source(ENUMS).schema_document
        assert document is not None
        assert document.index("enum Role {") < document.index("model Member {")

    def test_imported_enum_gets_placeholder(self) -> None:
        result = transform_source(IMPORTED_ENUM)
        assert "  role Role" in render_model(result.models[0]).splitlines()
        document = result.schema_document
        assert document is not None
        assert f"enum Role {{\n  {UNDECLARED_ENUM_ADVISORY}\n}}\n" in document

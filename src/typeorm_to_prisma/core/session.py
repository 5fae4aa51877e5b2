from dataclasses import dataclass, field

from tree_sitter import Node, Tree

from typeorm_to_prisma.config import CodemodSettings
from typeorm_to_prisma.core.context import ModelNameResolver
from typeorm_to_prisma.core.editor import SourceEditor
from typeorm_to_prisma.models import ChangeFlags, EnumDescriptor, ModelDescriptor


@dataclass
class TransformContext:
    """State of one transformation pass over one file."""

    source: bytes
    tree: Tree
    language: str
    settings: CodemodSettings
    resolver: ModelNameResolver
    editor: SourceEditor
    flags: ChangeFlags = field(default_factory=ChangeFlags)
    models: dict[str, ModelDescriptor] = field(default_factory=dict)
    enums: dict[str, EnumDescriptor] = field(default_factory=dict)
    advisories: int = 0

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.editor.text(node)

    def advise(self, node: Node, comment: str) -> bool:
        """Insert an advisory comment before the statement holding ``node``."""
        inserted = self.editor.insert_comment_before(node, comment)
        if inserted:
            self.advisories += 1
        return inserted

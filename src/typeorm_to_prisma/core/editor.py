"""Byte-range edits recorded against an immutable tree-sitter tree."""

from dataclasses import dataclass
from itertools import count

from tree_sitter import Node

from typeorm_to_prisma.core.ast import enclosing_statement, line_indent, node_text
from typeorm_to_prisma.errors import OverlappingEditError


@dataclass(frozen=True)
class TextEdit:
    start: int
    end: int
    replacement: bytes
    order: int

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end

    def inside(self, start: int, end: int) -> bool:
        """True if the edit lies within ``[start, end)``; insertions on either boundary are outside."""
        if self.is_insertion:
            return start < self.start < end
        return start <= self.start and self.end <= end


class SourceEditor:
    """Records replacements and insertions and prints the edited source.

    Edits are kept against the original byte offsets. A replacement drops the
    edits it covers, so an outer rewrite that composes its text through
    :meth:`render` supersedes the inner rewrites it already includes.
    """

    def __init__(self, source: bytes) -> None:
        self.source = source
        self._edits: list[TextEdit] = []
        self._order = count()

    @property
    def changed(self) -> bool:
        return bool(self._edits)

    @property
    def edits(self) -> list[TextEdit]:
        return list(self._edits)

    def text(self, node: Node) -> str:
        return node_text(node, self.source)

    def render(self, node: Node) -> str:
        return self._render_range(node.start_byte, node.end_byte)

    def print(self) -> str:
        return self._render_range(0, len(self.source), include_boundaries=True)

    def replace(self, node: Node, text: str) -> None:
        self.replace_range(node.start_byte, node.end_byte, text)

    def replace_range(self, start: int, end: int, text: str) -> None:
        for edit in self._edits:
            if edit.inside(start, end) or edit.is_insertion:
                continue
            if edit.start < end and start < edit.end:
                raise OverlappingEditError(start, end, edit.start, edit.end)
        self._edits = [edit for edit in self._edits if not edit.inside(start, end)]
        self._edits.append(TextEdit(start, end, text.encode("utf-8"), next(self._order)))

    def insert_at(self, offset: int, text: str) -> None:
        for edit in self._edits:
            if not edit.is_insertion and edit.start < offset < edit.end:
                raise OverlappingEditError(offset, offset, edit.start, edit.end)
        self._edits.append(TextEdit(offset, offset, text.encode("utf-8"), next(self._order)))

    def insert_before(self, node: Node, text: str) -> None:
        self.insert_at(node.start_byte, text)

    def remove(self, node: Node) -> None:
        self.replace(node, "")

    def remove_statement(self, node: Node) -> None:
        """Remove a statement together with its indentation and line break."""
        start = node.start_byte
        end = node.end_byte
        if line_indent(self.source, start) or self.source[start - 1 : start] in (b"\n", b""):
            start = self.source.rfind(b"\n", 0, start) + 1
            newline = self.source.find(b"\n", end)
            if newline != -1 and not self.source[end:newline].strip():
                end = newline + 1
        self.replace_range(start, end, "")

    def remove_list_item(self, node: Node) -> None:
        """Remove an element of a comma separated list along with one adjacent comma."""
        following = node.next_sibling
        if following is not None and following.type == ",":
            after = following.next_sibling
            end = after.start_byte if after is not None else following.end_byte
            self.replace_range(node.start_byte, end, "")
            return
        preceding = node.prev_sibling
        if preceding is not None and preceding.type == ",":
            self.replace_range(preceding.start_byte, node.end_byte, "")
            return
        self.remove(node)

    def insert_comment_before(self, node: Node, comment: str) -> bool:
        """Put ``comment`` on its own line before the statement holding ``node``.

        Returns ``False`` when the same comment already precedes the statement.
        """
        statement = enclosing_statement(node)
        if _normalize(comment) in self._leading_comments(statement):
            return False

        indent = line_indent(self.source, statement.start_byte)
        lines = comment.split("\n")
        body = "\n".join([lines[0], *(indent + line if line else line for line in lines[1:])])
        text = f"{body}\n{indent}"
        encoded = text.encode("utf-8")
        if any(e.is_insertion and e.start == statement.start_byte and e.replacement == encoded for e in self._edits):
            return False
        self.insert_at(statement.start_byte, text)
        return True

    def _leading_comments(self, statement: Node) -> set[str]:
        comments: set[str] = set()
        previous = statement.prev_sibling
        while previous is not None and previous.type == "comment":
            comments.add(_normalize(node_text(previous, self.source)))
            previous = previous.prev_sibling
        return comments

    def _render_range(self, start: int, end: int, include_boundaries: bool = False) -> str:
        selected = [
            edit
            for edit in self._edits
            if edit.inside(start, end) or (include_boundaries and edit.is_insertion and start <= edit.start <= end)
        ]
        selected.sort(key=lambda e: (e.start, 0 if e.is_insertion else 1, e.order))
        out = bytearray()
        cursor = start
        for edit in selected:
            if edit.start > cursor:
                out += self.source[cursor : edit.start]
            out += edit.replacement
            cursor = max(cursor, edit.end)
        out += self.source[cursor:end]
        return out.decode("utf-8")


def _normalize(comment: str) -> str:
    return "\n".join(line.strip() for line in comment.strip().splitlines())

"""Unit tests for the tree-sitter shape queries."""

from pathlib import Path

import pytest
from tree_sitter import Language, Parser, Query, QueryCursor


def _matches(queries_dir: Path, name: str, language: Language, parser: Parser, source: str) -> list[dict[str, str]]:
    query = Query(language, (queries_dir / f"{name}.scm").read_text(encoding="utf-8"))
    encoded = source.encode("utf-8")
    tree = parser.parse(encoded)
    results = []
    for _, captures in QueryCursor(query).matches(tree.root_node):
        results.append(
            {key: encoded[nodes[0].start_byte : nodes[0].end_byte].decode("utf-8") for key, nodes in captures.items()}
        )
    return results


@pytest.mark.parametrize("name", ["repository_calls", "registrations"])
def test_query_files_exist(queries_dir: Path, name: str) -> None:
    assert (queries_dir / f"{name}.scm").exists()


def test_repository_calls(queries_dir: Path, ts_language: Language, ts_parser: Parser) -> None:
    matches = _matches(
        queries_dir, "repository_calls", ts_language, ts_parser, "this.userRepository.findOneBy({ id: 1 });\n"
    )
    assert len(matches) == 1
    assert matches[0]["member"] == "userRepository"
    assert matches[0]["method"] == "findOneBy"
    assert matches[0]["arguments"] == "({ id: 1 })"


def test_repository_calls_ignore_plain_calls(queries_dir: Path, ts_language: Language, ts_parser: Parser) -> None:
    assert _matches(queries_dir, "repository_calls", ts_language, ts_parser, "repository.find();\nfind();\n") == []


def test_registrations(queries_dir: Path, ts_language: Language, ts_parser: Parser) -> None:
    matches = _matches(queries_dir, "registrations", ts_language, ts_parser, "TypeOrmModule.forFeature([User]);\n")
    assert matches == [
        {
            "registrar": "TypeOrmModule",
            "method": "forFeature",
            "arguments": "([User])",
            "call": "TypeOrmModule.forFeature([User])",
        }
    ]

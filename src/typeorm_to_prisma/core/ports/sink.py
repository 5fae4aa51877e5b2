from typing import Protocol


class SchemaSink(Protocol):
    def write(self, path: str | None, document: str) -> None: ...

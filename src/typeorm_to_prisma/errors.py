class CodemodError(Exception):
    """Base class for failures raised by the transformation engine."""


class OverlappingEditError(CodemodError):
    """Two recorded edits cover partially overlapping byte ranges."""

    def __init__(self, start: int, end: int, other_start: int, other_end: int) -> None:
        super().__init__(f"Edit [{start}, {end}) overlaps existing edit [{other_start}, {other_end})")
        self.start = start
        self.end = end
        self.other_start = other_start
        self.other_end = other_end


class UnsupportedLanguageError(CodemodError, ValueError):
    pass

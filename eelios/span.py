"""Source ranges for Eelios tokens and AST nodes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """Half-open range ``[start, end)`` of character offsets in the source."""
    start: int
    end: int

    def __repr__(self) -> str:
        return f"{self.start}..{self.end}"

    def merge(self, other: 'Span') -> 'Span':
        return Span(min(self.start, other.start), max(self.end, other.end))

    def line_and_columns(self, source: str) -> tuple[int, int, int]:
        """Return the 1-based line of ``start`` and the 0-based columns it covers.

        A span that crosses a newline is clipped to the end of its first line.
        """
        line = source.count('\n', 0, self.start) + 1
        line_start = source.rfind('\n', 0, self.start) + 1
        line_end = source.find('\n', self.start)
        if line_end == -1:
            line_end = len(source)
        end = min(self.end, line_end) if line_end > self.start else self.end
        return line, self.start - line_start, end - line_start

    def describe(self, source: str) -> str:
        line, first, last = self.line_and_columns(source)
        return f"Line: {line}, Character: {first + 1}-{last + 1}"

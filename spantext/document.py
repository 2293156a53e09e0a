"""Span-based document model.

A document is an ordered list of lines, each line an ordered list of
spans.  A span is a run of text sharing one ``SpanMeta``.  Every line holds
at least one span; only the sole span of an empty line may have empty text.
"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional

from .meta import SpanMeta, meta_equal


@total_ordering
@dataclass
class Position:
    line: int = 0
    character: int = 0

    def __lt__(self, other):
        if self.line != other.line:
            return self.line < other.line
        return self.character < other.character

    def copy(self) -> "Position":
        return Position(self.line, self.character)


def compare_positions(a: Position, b: Position) -> int:
    """Lexicographic compare on (line, character): -1, 0 or 1."""
    if a < b:
        return -1
    if b < a:
        return 1
    return 0


@dataclass
class Span:
    meta: SpanMeta = field(default_factory=SpanMeta)
    text: str = ""

    def copy(self) -> "Span":
        return Span(self.meta.copy(), self.text)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


class TextDocument:
    lines: list[list[Span]]

    def __init__(self, lines: Optional[list[list[Span]]] = None):
        self.lines = [list(spans) or [Span()] for spans in lines] if lines else [[Span()]]

    @classmethod
    def from_text(cls, text: str, meta: Optional[SpanMeta] = None) -> "TextDocument":
        """Build an unstyled (or uniformly styled) document from plain text."""
        meta = meta or SpanMeta()
        return cls([[Span(meta.copy(), line)] for line in normalize_newlines(text).split("\n")])

    @classmethod
    def from_markup(cls, code: str) -> "TextDocument":
        from .markup import parse_markup
        return parse_markup(code)

    def parse_from_code(self, code: str) -> None:
        """Replace the document content with the parsed markup ``code``."""
        from .markup import parse_markup
        self.lines = parse_markup(code).lines

    def to_markup(self) -> str:
        from .markup import serialize_markup
        return serialize_markup(self)

    # --- Queries ---

    def get_line_count(self) -> int:
        return len(self.lines)

    def get_line_text(self, line: int) -> str:
        return "".join(span.text for span in self.lines[self._clamp_line(line)])

    def get_line_character_count(self, line: int) -> int:
        return len(self.get_line_text(line))

    def get_line_spans(self, line: int) -> list[Span]:
        """Copies of the spans on ``line``; editing them leaves the document intact."""
        return [span.copy() for span in self.lines[self._clamp_line(line)]]

    def get_meta_at(self, line: int, character: int) -> SpanMeta:
        """Style that text typed at the position would receive."""
        position = self.clamp_position(line, character)
        spans = self.lines[position.line]
        index, _ = self._locate_span(spans, position.character)
        return spans[index].meta.copy()

    def get_text(self, start: Position, end: Position) -> str:
        """Plain text between two positions, lines joined with ``\\n``."""
        start = self.clamp_position(start.line, start.character)
        end = self.clamp_position(end.line, end.character)
        if end < start:
            start, end = end, start
        if start.line == end.line:
            return self.get_line_text(start.line)[start.character:end.character]
        parts = [self.get_line_text(start.line)[start.character:]]
        for line in range(start.line + 1, end.line):
            parts.append(self.get_line_text(line))
        parts.append(self.get_line_text(end.line)[:end.character])
        return "\n".join(parts)

    def to_plain_text(self) -> str:
        return "\n".join(self.get_line_text(i) for i in range(len(self.lines)))

    def clamp_position(self, line: int, character: int) -> Position:
        line = self._clamp_line(line)
        character = min(max(character, 0), self.get_line_character_count(line))
        return Position(line, character)

    def _clamp_line(self, line: int) -> int:
        return min(max(line, 0), len(self.lines) - 1)

    @staticmethod
    def _locate_span(spans: list[Span], character: int) -> tuple[int, int]:
        """Find the span holding ``character`` and the offset inside it.

        A position on the boundary between two spans belongs to the span on
        its left, except at column 0 which belongs to the first span.
        """
        count = 0
        for index, span in enumerate(spans):
            length = len(span.text)
            if (character > count or character == 0) and character <= count + length:
                return index, character - count
            count += length
        # Only reachable for positions past the end of the line
        return len(spans) - 1, len(spans[-1].text)

    # --- Mutations ---

    def insert_text(self, text: str, line: int, character: int) -> Position:
        """Insert ``text`` at the position and return the position after it.

        The text takes the style of the span it lands in.  Line breaks split
        that span; the spans that followed the insertion point move to the
        last new line.
        """
        text = normalize_newlines(text)
        position = self.clamp_position(line, character)
        line, character = position.line, position.character
        spans = self.lines[line]
        index, offset = self._locate_span(spans, character)
        span = spans[index]
        span.text = span.text[:offset] + text + span.text[offset:]

        if "\n" not in text:
            return Position(line, character + len(text))

        before_spans = spans[:index]
        after_spans = spans[index + 1:]
        pieces = [Span(span.meta.copy(), piece) for piece in span.text.split("\n")]

        first_line = before_spans + ([pieces[0]] if pieces[0].text or not before_spans else [])
        last_line = ([pieces[-1]] if pieces[-1].text or not after_spans else []) + after_spans
        new_lines = [first_line] + [[piece] for piece in pieces[1:-1]] + [last_line]
        self.lines[line:line + 1] = new_lines

        return Position(line + len(pieces) - 1, len(text) - 1 - text.rfind("\n"))

    def delete_range(self, start_line: int, start_character: int,
                     end_line: int, end_character: int) -> Position:
        """Delete the text between two positions and return the start position.

        Coordinates are clamped into the document.  The start must not come
        after the end; that is a caller error and raises ``ValueError``.
        """
        start = self.clamp_position(start_line, start_character)
        end = self.clamp_position(end_line, end_character)
        if start == end:
            return start
        if end < start:
            raise ValueError(f"delete_range start {start} is after end {end}")

        start_spans = self.lines[start.line]
        start_index, start_offset = self._locate_span(start_spans, start.character)
        start_span = start_spans[start_index]
        before_spans = start_spans[:start_index]

        end_spans = self.lines[end.line]
        end_index, end_offset = self._locate_span(end_spans, end.character)
        end_span = end_spans[end_index]
        after_spans = end_spans[end_index + 1:]

        middle_spans: list[Span] = []
        if start_span is end_span or meta_equal(start_span.meta, end_span.meta):
            combined = Span(start_span.meta, start_span.text[:start_offset] + end_span.text[end_offset:])
            if combined.text:
                middle_spans.append(combined)
        else:
            start_span.text = start_span.text[:start_offset]
            end_span.text = end_span.text[end_offset:]
            middle_spans = [span for span in (start_span, end_span) if span.text]
            kept_start, kept_end = bool(start_span.text), bool(end_span.text)
            if kept_start and not kept_end:
                if after_spans and meta_equal(start_span.meta, after_spans[0].meta):
                    start_span.text += after_spans.pop(0).text
            elif kept_end and not kept_start:
                if before_spans and meta_equal(before_spans[-1].meta, end_span.meta):
                    before_spans[-1].text += end_span.text
                    middle_spans = []

        if not middle_spans and before_spans and after_spans:
            if meta_equal(before_spans[-1].meta, after_spans[0].meta):
                before_spans[-1].text += after_spans.pop(0).text

        new_line = before_spans + middle_spans + after_spans
        if not new_line:
            new_line = [Span(end_span.meta, "")]
        self.lines[start.line] = new_line
        del self.lines[start.line + 1:end.line + 1]

        return start

    def delete_character(self, forward: bool, line: int, character: int) -> Position:
        """Delete one character before (or after) the position.

        At a line edge the line break is deleted instead, joining the lines.
        """
        position = self.clamp_position(line, character)
        start_line, start_character = position.line, position.character
        end_line, end_character = start_line, start_character

        if forward:
            if start_character < self.get_line_character_count(start_line):
                end_character += 1
            elif start_line < len(self.lines) - 1:
                end_line += 1
                end_character = 0
        else:
            if start_character > 0:
                start_character -= 1
            elif start_line > 0:
                start_line -= 1
                start_character = self.get_line_character_count(start_line)

        return self.delete_range(start_line, start_character, end_line, end_character)

    # --- Snapshots ---

    def copy_lines(self) -> list[list[Span]]:
        return [[span.copy() for span in spans] for spans in self.lines]

    def restore_lines(self, lines: list[list[Span]]) -> None:
        self.lines = [[span.copy() for span in spans] for spans in lines] or [[Span()]]

"""Views: the renderer interface and a character-cell renderer for blessed."""

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

from .document import Span, TextDocument
from .meta import Align, SpanMeta

if TYPE_CHECKING:
    from .editor import TextEditor
    from .selection import TextSelection


class TextView(ABC):
    _editor: "Optional[TextEditor]" = None

    @property
    def editor(self) -> "TextEditor":
        assert self._editor
        return self._editor

    @abstractmethod
    def render(self, first_line: Optional[int] = None, last_line: Optional[int] = None):
        """Redraw lines ``first_line`` through ``last_line`` (inclusive).

        ``None`` for either bound means the view should redraw everything,
        which it must also do whenever its own geometry is out of date.
        """


def hex_to_rgb(hex_value: str) -> Optional[tuple[int, int, int]]:
    """Convert ``f00``, ``ff0000`` or ``ff0000ff`` to an RGB tuple (alpha dropped)."""
    if len(hex_value) in (3, 4):
        hex_value = "".join(ch * 2 for ch in hex_value[:3])
    elif len(hex_value) in (6, 8):
        hex_value = hex_value[:6]
    else:
        return None
    try:
        return tuple(int(hex_value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return None


def style_text(term, meta: SpanMeta, text: str) -> str:
    """Wrap ``text`` in the terminal formatting for ``meta``.

    Terminals have no fonts, sizes or strokes; only emphasis and the fill
    color carry over.
    """
    if not text:
        return text
    if meta.fill_color is not None:
        rgb = hex_to_rgb(meta.fill_color.hex)
        if rgb is not None:
            text = term.color_rgb(*rgb)(text)
    attributes = [name for name, on in (("bold", meta.bold), ("italic", meta.italic),
                                        ("underline", meta.underline)) if on]
    if attributes:
        text = getattr(term, "_".join(attributes))(text)
    return text


def align_offset(align: Optional[Align], text_length: int, num_columns: int) -> int:
    free = num_columns - text_length
    if free <= 0 or align in (None, Align.LEFT):
        return 0
    if align == Align.RIGHT:
        return free
    return free // 2


def selection_columns(selection: "TextSelection", line: int, line_length: int) -> Optional[tuple[int, int]]:
    """Selected character range on ``line``, or None."""
    start, end = selection.start, selection.end
    if selection.is_empty() or line < start.line or line > end.line:
        return None
    first = start.character if line == start.line else 0
    last = end.character if line == end.line else line_length
    if first >= last:
        return None
    return first, last


def _split_selection(lo: int, hi: int, selected: Optional[tuple[int, int]]):
    if selected is None:
        return [(lo, hi, False)]
    a, b = selected
    pieces = [(lo, min(hi, a), False), (max(lo, a), min(hi, b), True), (max(lo, b), hi, False)]
    return [piece for piece in pieces if piece[0] < piece[1]]


def render_line(term, spans: list[Span], num_columns: int, scroll_left: int = 0,
                selected: Optional[tuple[int, int]] = None) -> tuple[str, int]:
    """Render one document line into exactly ``num_columns`` cells.

    Returns the formatted string and the column the line's first character
    lands on (non-zero for right or centered lines that fit the view).
    """
    text_length = sum(len(span.text) for span in spans)
    offset = align_offset(spans[0].meta.align if spans else None, text_length, num_columns)
    if offset:
        scroll_left = 0
    visible_start = scroll_left
    visible_end = scroll_left + num_columns - offset

    out = [" " * offset]
    used = offset
    position = 0
    for span in spans:
        span_start, span_end = position, position + len(span.text)
        position = span_end
        lo, hi = max(span_start, visible_start), min(span_end, visible_end)
        if lo >= hi:
            continue
        for seg_lo, seg_hi, is_selected in _split_selection(lo, hi, selected):
            chunk = span.text[seg_lo - span_start:seg_hi - span_start]
            styled = style_text(term, span.meta, chunk)
            if is_selected:
                styled = term.reverse(styled)
            out.append(styled)
            used += len(chunk)
    out.append(" " * max(0, num_columns - used))
    return "".join(out), offset


def render_document(term, document: TextDocument, num_columns: int) -> list[str]:
    """Render every line without selection or scrolling (used for printing)."""
    return [render_line(term, spans, num_columns)[0] for spans in document.lines]


class TerminalTextView(TextView):
    num_rows: int
    num_columns: int
    top_line: int = 0
    scroll_left: int = 0
    visual_cursor_y: int = 0
    visual_cursor_x: int = 0
    caret_visible: bool = False

    def __init__(self, term, num_columns: int = 80, num_rows: int = 24):
        self.term = term
        self.num_columns = num_columns
        self.num_rows = num_rows
        self.lines: list[str] = []
        self.needs_redraw = True

    def render(self, first_line: Optional[int] = None, last_line: Optional[int] = None):
        editor = self.editor
        document = editor.document
        selection = editor.selection
        caret = selection.get_position()

        scrolled = self._scroll_to(caret.line, caret.character)
        full = scrolled or first_line is None or last_line is None or not self.lines
        line_count = document.get_line_count()
        visible = range(self.top_line, min(line_count, self.top_line + self.num_rows))

        if full or len(self.lines) != len(visible):
            self.lines = [self._render_document_line(i) for i in visible]
        else:
            for i in range(max(first_line, visible.start), min(last_line + 1, visible.stop)):
                self.lines[i - self.top_line] = self._render_document_line(i)

        spans = document.lines[caret.line]
        offset = align_offset(spans[0].meta.align, document.get_line_character_count(caret.line),
                              self.num_columns)
        self.visual_cursor_y = caret.line - self.top_line
        self.visual_cursor_x = offset + caret.character - (0 if offset else self.scroll_left)
        self.caret_visible = selection.is_visible and selection.is_blink_visible
        self.needs_redraw = True

    def _render_document_line(self, line: int) -> str:
        editor = self.editor
        document = editor.document
        selected = None
        if editor.selection.is_visible:
            selected = selection_columns(editor.selection, line, document.get_line_character_count(line))
        text, _ = render_line(self.term, document.lines[line], self.num_columns,
                              self.scroll_left, selected)
        return text

    def _scroll_to(self, line: int, character: int) -> bool:
        """Scroll so the caret is visible. Returns True if the view moved."""
        top, left = self.top_line, self.scroll_left
        if line < self.top_line:
            self.top_line = line
        elif line >= self.top_line + self.num_rows:
            self.top_line = line - self.num_rows + 1
        if character < self.scroll_left:
            self.scroll_left = character
        elif character >= self.scroll_left + self.num_columns:
            self.scroll_left = character - self.num_columns + 1
        return (top, left) != (self.top_line, self.scroll_left)

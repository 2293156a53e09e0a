"""Selection and caret model over a ``TextDocument``."""

from typing import Callable, Optional

from .blink import PolledBlinkTimer
from .constants import EditorConstants
from .document import Position, TextDocument, compare_positions


class TextSelection:
    """An ordered pair of positions plus the caret state.

    ``start`` never comes after ``end``.  ``is_active_side_end`` tells which
    of the two the caret tracks while a selection is being extended.  Every
    positional update clamps against the current document, which may have
    shrunk or grown since the last call.
    """

    def __init__(self, document: TextDocument,
                 blink_interval: float = EditorConstants.BLINK_INTERVAL,
                 timer_factory: Optional[Callable] = None,
                 on_change: Optional[Callable[[Optional[int], Optional[int]], None]] = None):
        self.document = document
        self.is_visible = False
        self.is_active_side_end = True
        self.is_blink_visible = True
        self.blink_interval = blink_interval
        # Called as on_change(first_line, last_line); None means everything
        self.on_change = on_change
        self.start = Position(0, 0)
        self.end = Position(0, 0)
        self._timer_factory = timer_factory or PolledBlinkTimer
        self._blink_timer = None

        self.set_position(0, 0)

    @staticmethod
    def compare_position(a: Position, b: Position) -> int:
        return compare_positions(a, b)

    def is_empty(self) -> bool:
        return compare_positions(self.start, self.end) == 0

    def get_position(self) -> Position:
        """The position the caret is drawn at."""
        if self.is_active_side_end:
            return self.end.copy()
        return self.start.copy()

    def set_position(self, line: Optional[int] = None, character: Optional[int] = None,
                     keep_selection: bool = False) -> None:
        """Move the caret, optionally extending the selection.

        A ``None`` coordinate keeps the caret's current value for it.
        """
        current = self.get_position()
        if line is None:
            line = current.line
        if character is None:
            character = current.character
        position = self.document.clamp_position(line, character)

        if keep_selection:
            # Growing from an empty caret, or moving above the start line,
            # drags the start side instead of the end side.
            if (compare_positions(position, self.start) < 0
                    and (self.is_empty() or position.line < self.start.line)):
                self.is_active_side_end = False

            if self.is_active_side_end:
                self.end = position
            else:
                self.start = position

            if compare_positions(self.start, self.end) > 0:
                self.start, self.end = self.end, self.start
                self.is_active_side_end = not self.is_active_side_end
        else:
            self.is_active_side_end = True
            self.start = position
            self.end = position.copy()

        self.is_blink_visible = True
        if self.is_visible:
            self.start_blinking()
        self._notify()

    def collapse_to_start(self) -> None:
        self.set_position(self.start.line, self.start.character)

    def collapse_to_end(self) -> None:
        self.set_position(self.end.line, self.end.character)

    def select_all(self) -> None:
        last_line = self.document.get_line_count() - 1
        self.set_position(0, 0)
        self.set_position(last_line, self.document.get_line_character_count(last_line), True)

    # --- Visibility and blinking ---

    def set_visible(self, is_visible: bool) -> None:
        if self.is_visible == is_visible:
            return
        self.is_visible = is_visible
        if is_visible:
            self.is_blink_visible = True
            self.start_blinking()
        else:
            self.stop_blinking()
        self._notify()

    def start_blinking(self) -> None:
        self.stop_blinking()
        self._blink_timer = self._timer_factory(self.blink_interval, self.blink)
        self._blink_timer.start()

    def stop_blinking(self) -> None:
        if self._blink_timer is not None:
            self._blink_timer.cancel()
            self._blink_timer = None

    def blink(self) -> None:
        self.is_blink_visible = not self.is_blink_visible
        self._notify(min(self.start.line, self.end.line), max(self.start.line, self.end.line))

    def destroy(self) -> None:
        self.stop_blinking()
        self.is_visible = False
        self.on_change = None

    def _notify(self, first_line: Optional[int] = None, last_line: Optional[int] = None) -> None:
        if self.on_change is not None:
            self.on_change(first_line, last_line)

    # --- Directional moves ---

    def move_up(self, length: int = 1, keep_selection: bool = False) -> None:
        position = self.get_position()
        self.set_position(position.line - length, position.character, keep_selection)

    def move_down(self, length: int = 1, keep_selection: bool = False) -> None:
        position = self.get_position()
        self.set_position(position.line + length, position.character, keep_selection)

    def move_left(self, length: int = 1, keep_selection: bool = False) -> None:
        position = self.get_position()
        self.set_position(position.line, position.character - length, keep_selection)

    def move_right(self, length: int = 1, keep_selection: bool = False) -> None:
        position = self.get_position()
        self.set_position(position.line, position.character + length, keep_selection)

    def move_line_start(self, keep_selection: bool = False) -> None:
        position = self.get_position()
        self.set_position(position.line, 0, keep_selection)

    def move_line_end(self, keep_selection: bool = False) -> None:
        position = self.get_position()
        self.set_position(position.line, self.document.get_line_character_count(position.line),
                          keep_selection)

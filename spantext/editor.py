"""Editor controller tying the document, the selection and a view together."""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Callable, Optional, TYPE_CHECKING

from .constants import EditorConstants
from .document import Position, TextDocument
from .font_metrics import FontMetrics, FontMetricsCache
from .keyboard import KeyEvent, KeyType
from .selection import TextSelection
from .settings import EditorSettings
from .undo import EditorSnapshot, UndoEntry, UndoManager

if TYPE_CHECKING:
    from .view import TextView

logger = logging.getLogger(__name__)


class TextEditor:
    """Owns one document and its selection and applies edits to both.

    Rendering and input devices are external: a ``TextView`` is told which
    lines to redraw, and key events arrive already parsed.
    """

    def __init__(self, value: str = "", settings: Optional[EditorSettings] = None,
                 font_metrics: Optional[FontMetricsCache] = None,
                 view: Optional["TextView"] = None,
                 timer_factory: Optional[Callable] = None):
        self.settings = settings or EditorSettings()
        self.font_metrics = font_metrics or FontMetricsCache()
        self.document = TextDocument.from_markup(value)
        self.undo_manager = UndoManager(self.settings.max_undo_entries)
        self.view: Optional["TextView"] = None
        self.filename: Optional[str] = None
        self.modified = False
        self.selection = TextSelection(
            self.document,
            blink_interval=self.settings.blink_interval,
            timer_factory=timer_factory,
            on_change=self.draw,
        )
        if view is not None:
            self.attach_view(view)

    def attach_view(self, view: "TextView") -> None:
        self.view = view
        view._editor = self
        self.draw()

    def draw(self, first_line: Optional[int] = None, last_line: Optional[int] = None) -> None:
        if self.view is not None:
            self.view.render(first_line, last_line)

    # --- Focus and lifecycle ---

    def focus(self) -> None:
        self.selection.set_visible(True)

    def blur(self) -> None:
        self.selection.set_visible(False)

    def destroy(self) -> None:
        """Stop the caret timer and drop caches; the editor is unusable afterwards."""
        self.selection.destroy()
        self.font_metrics.clear()
        self.undo_manager.clear()
        if self.view is not None:
            self.view._editor = None
            self.view = None

    # --- Content ---

    def load_markup(self, code: str) -> None:
        self.document = TextDocument.from_markup(code)
        self.selection.document = self.document
        self.undo_manager.clear()
        self.modified = False
        self.selection.set_position(0, 0)

    def to_markup(self) -> str:
        return self.document.to_markup()

    def get_selected_text(self) -> str:
        return self.document.get_text(self.selection.start, self.selection.end)

    def get_line_metrics(self, line: int) -> FontMetrics:
        """Metrics of the tallest font used on ``line``."""
        defaults = self.settings.meta_defaults
        tallest = None
        for span in self.document.get_line_spans(line):
            metrics = self.font_metrics.get_for_meta(span.meta, defaults)
            if tallest is None or metrics.height > tallest.height:
                tallest = metrics
        return tallest

    # --- Editing ---

    def insert_text_at_current_position(self, text: str) -> Position:
        """Replace the selection (if any) with ``text`` and put the caret after it."""
        # Line breaks and replaced selections are steps of their own
        merges = "\n" not in text and self.selection.is_empty()
        with self._undoable("typing" if merges else None):
            if not self.selection.is_empty():
                self._delete_selection()
            position = self.selection.get_position()
            new_position = self.document.insert_text(text, position.line, position.character)
            self.selection.set_position(new_position.line, new_position.character)
        return new_position

    def delete_character_at_current_position(self, forward: bool = False) -> Position:
        """Delete the selection, or one character next to the caret."""
        with self._undoable("delete" if self.selection.is_empty() else None):
            if self.selection.is_empty():
                position = self.selection.get_position()
                new_position = self.document.delete_character(forward, position.line, position.character)
                self.selection.set_position(new_position.line, new_position.character)
            else:
                new_position = self._delete_selection()
        return new_position

    def _delete_selection(self) -> Position:
        start, end = self.selection.start, self.selection.end
        new_position = self.document.delete_range(start.line, start.character, end.line, end.character)
        self.selection.set_position(new_position.line, new_position.character)
        return new_position

    def undo(self) -> bool:
        return self.undo_manager.undo(self)

    def redo(self) -> bool:
        return self.undo_manager.redo(self)

    def _snapshot(self) -> EditorSnapshot:
        return EditorSnapshot(
            lines=self.document.copy_lines(),
            selection_start=self.selection.start.copy(),
            selection_end=self.selection.end.copy(),
            is_active_side_end=self.selection.is_active_side_end,
        )

    def _apply_snapshot(self, snapshot: EditorSnapshot) -> None:
        self.document.restore_lines(snapshot.lines)
        self.selection.set_position(snapshot.selection_start.line, snapshot.selection_start.character)
        self.selection.set_position(snapshot.selection_end.line, snapshot.selection_end.character, True)
        self.selection.is_active_side_end = snapshot.is_active_side_end
        self.modified = True
        self.draw()

    def _undoable(self, kind: Optional[str]):
        return _UndoRecorder(self, kind)

    # --- Keyboard ---

    def handle_key(self, event: KeyEvent) -> bool:
        """Apply a key event. Returns False when the key is not bound."""
        extend = event.key_type == KeyType.SHIFT_SPECIAL or event.is_shift
        value = event.value

        if event.key_type == KeyType.CTRL:
            if value == 'z':
                self.undo()
            elif value == 'y':
                self.redo()
            elif value == 'a':
                self.undo_manager.break_merge()
                self.selection.select_all()
            else:
                return False
            return True

        if event.key_type == KeyType.REGULAR:
            if not value:
                return False
            self.insert_text_at_current_position(value)
            return True

        if event.key_type not in (KeyType.SPECIAL, KeyType.SHIFT_SPECIAL):
            return False

        moved = True
        if value == 'backspace':
            self.delete_character_at_current_position(False)
            moved = False
        elif value == 'delete':
            self.delete_character_at_current_position(True)
            moved = False
        elif value == 'enter':
            self.insert_text_at_current_position('\n')
            moved = False
        elif value == 'home':
            self.selection.move_line_start(extend)
        elif value == 'end':
            self.selection.move_line_end(extend)
        elif value == 'left':
            if not extend and not self.selection.is_empty():
                self.selection.collapse_to_start()
            else:
                self.selection.move_left(1, extend)
        elif value == 'right':
            if not extend and not self.selection.is_empty():
                self.selection.collapse_to_end()
            else:
                self.selection.move_right(1, extend)
        elif value == 'up':
            self.selection.move_up(1, extend)
        elif value == 'down':
            self.selection.move_down(1, extend)
        else:
            return False
        if moved:
            self.undo_manager.break_merge()
        return True

    # --- Files ---

    def load_file(self, filename: str) -> None:
        """Load a markup file. A missing file starts an empty document."""
        self.filename = filename
        try:
            with open(filename, 'r', encoding=EditorConstants.MARKUP_FILE_ENCODING) as f:
                content = f.read()
        except FileNotFoundError:
            logger.info(f"{filename} does not exist yet, starting empty")
            content = ""
        self.load_markup(content)

    def save_file(self, filename: Optional[str] = None) -> bool:
        """Write the document as markup via a temp file and an atomic rename."""
        filename = filename or self.filename
        if not filename:
            return False
        dir_name = os.path.dirname(os.path.abspath(filename))
        base_name = os.path.basename(filename)
        temp_filename = None
        try:
            with tempfile.NamedTemporaryFile(
                mode='w',
                encoding=EditorConstants.MARKUP_FILE_ENCODING,
                dir=dir_name,
                prefix=EditorConstants.ATOMIC_SAVE_PREFIX + base_name,
                suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                delete=False,
            ) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(self.to_markup())
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_filename, filename)
        except OSError as e:
            logger.warning(f"Could not save {filename}: {e}")
            if temp_filename is not None:
                try:
                    os.remove(temp_filename)
                except OSError:
                    pass
            return False
        self.filename = filename
        self.modified = False
        return True


class _UndoRecorder:
    """Context manager recording one edit in the undo history."""

    def __init__(self, editor: TextEditor, kind: Optional[str]):
        self.editor = editor
        self.kind = kind
        self.before: Optional[EditorSnapshot] = None

    def __enter__(self):
        self.before = self.editor._snapshot()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            return False
        after = self.editor._snapshot()
        if after.lines != self.before.lines:
            self.editor.undo_manager.record(UndoEntry(self.before, after, self.kind))
            self.editor.modified = True
        return False

"""Snapshot-based undo history for the editor."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .constants import EditorConstants
from .document import Position, Span

if TYPE_CHECKING:
    from .editor import TextEditor


@dataclass
class EditorSnapshot:
    lines: list[list[Span]]
    selection_start: Position
    selection_end: Position
    is_active_side_end: bool = True


@dataclass
class UndoEntry:
    before: EditorSnapshot
    after: EditorSnapshot
    # Entries of the same kind ("typing", "delete") recorded back to back
    # merge into one step; None never merges.
    kind: Optional[str] = None


class UndoManager:
    def __init__(self, max_entries: int = EditorConstants.MAX_UNDO_ENTRIES):
        self._undo_stack: list[UndoEntry] = []
        self._redo_stack: list[UndoEntry] = []
        self._max_entries = max_entries
        self._merge_open = False

    def clear(self):
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._merge_open = False

    def break_merge(self):
        """Start a new step for the next recorded edit (e.g. after the caret moved)."""
        self._merge_open = False

    def record(self, entry: UndoEntry):
        previous = self._undo_stack[-1] if self._undo_stack else None
        if (self._merge_open and previous is not None and entry.kind is not None
                and previous.kind == entry.kind):
            previous.after = entry.after
        else:
            self._undo_stack.append(entry)
            if len(self._undo_stack) > self._max_entries:
                self._undo_stack.pop(0)
        self._merge_open = entry.kind is not None
        # A new edit invalidates redo history
        self._redo_stack.clear()

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def undo(self, editor: "TextEditor") -> bool:
        if not self._undo_stack:
            return False
        entry = self._undo_stack.pop()
        editor._apply_snapshot(entry.before)
        self._redo_stack.append(entry)
        self._merge_open = False
        return True

    def redo(self, editor: "TextEditor") -> bool:
        if not self._redo_stack:
            return False
        entry = self._redo_stack.pop()
        editor._apply_snapshot(entry.after)
        self._undo_stack.append(entry)
        self._merge_open = False
        return True

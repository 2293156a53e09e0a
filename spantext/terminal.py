"""Terminal interface using Blessed for display and input."""

import blessed
from typing import Optional

from .view import TerminalTextView


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False

    @property
    def width(self) -> int:
        return self.term.width

    @property
    def height(self) -> int:
        return self.term.height

    def setup(self):
        """Enter fullscreen mode and prepare terminal."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self.is_fullscreen:
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False

    def get_key(self, timeout: Optional[float] = None):
        """Wait for one keystroke; returns an empty keystroke on timeout."""
        return self.term.inkey(timeout=timeout)

    def draw(self, view: TerminalTextView, status: Optional[str] = None):
        """Draw the view's lines, a status line and the caret."""
        print(self.term.home + self.term.clear, end='')
        for y, line in enumerate(view.lines):
            print(self.term.move(y, 0) + line, end='')

        if status:
            print(self.term.move(self.height - 1, 0) + self.term.reverse(status[:self.width].ljust(self.width)),
                  end='')

        if view.caret_visible:
            print(self.term.move(view.visual_cursor_y, view.visual_cursor_x) + self.term.normal_cursor,
                  end='', flush=True)
        else:
            print(self.term.hide_cursor, end='', flush=True)
        view.needs_redraw = False

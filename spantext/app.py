"""Interactive terminal editor built on TextEditor."""

import sys
import termios
from typing import Optional

from .blink import PolledBlinkTimer
from .constants import EditorConstants
from .editor import TextEditor
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .settings import EditorSettings, get_persistence
from .terminal import TerminalInterface
from .view import TerminalTextView


class EditorApp:
    """Main application controller: input loop, status line, save and quit."""

    def __init__(self, filename: Optional[str] = None, settings: Optional[EditorSettings] = None,
                 terminal: Optional[TerminalInterface] = None):
        self.settings = settings or get_persistence().load_settings()
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.view = TerminalTextView(self.terminal.term)
        self._update_view_size()
        self.blink_timer: Optional[PolledBlinkTimer] = None
        self.editor = TextEditor(settings=self.settings, timer_factory=self._create_timer)
        if filename:
            self.editor.load_file(filename)
        self.editor.attach_view(self.view)
        self.running = False
        self.status_message: Optional[str] = None

    def _create_timer(self, interval, callback) -> PolledBlinkTimer:
        self.blink_timer = PolledBlinkTimer(interval, callback)
        return self.blink_timer

    def _update_view_size(self):
        self.view.num_columns = max(1, min(self.settings.view_width, self.terminal.width))
        # Last row is the status line
        self.view.num_rows = max(1, self.terminal.height - 1)

    def status_line(self) -> str:
        if self.status_message:
            return f" {self.status_message}"
        name = self.editor.filename or "[untitled]"
        flag = " *" if self.editor.modified else ""
        position = self.editor.selection.get_position()
        return f" {name}{flag}  {position.line + 1}:{position.character + 1}  {EditorConstants.STATUS_HINT}"

    def run(self):
        """Run the main editor loop."""
        self.terminal.setup()
        self.running = True
        try:
            with self.terminal.term.cbreak():
                old_settings = None
                try:
                    # Let Ctrl-S and Ctrl-Q through instead of flow control
                    old_settings = termios.tcgetattr(sys.stdin)
                    new_settings = list(old_settings)
                    new_settings[0] &= ~(termios.IXON | termios.IXOFF)
                    termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
                except (termios.error, AttributeError, OSError):
                    pass
                try:
                    self.editor.focus()
                    self._loop()
                finally:
                    if old_settings is not None:
                        try:
                            termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
                        except (termios.error, OSError):
                            pass
        finally:
            self.editor.destroy()
            self.terminal.cleanup()

    def _loop(self):
        while self.running:
            if self.view.needs_redraw:
                self._update_view_size()
                self.terminal.draw(self.view, self.status_line())

            timeout = self.blink_timer.seconds_until_due() if self.blink_timer else None
            event = self.keyboard.get_key_event(timeout)
            if self.blink_timer is not None:
                self.blink_timer.poll()
            if event is not None:
                self.handle_key_event(event)

    def handle_key_event(self, event: KeyEvent):
        self.status_message = None
        if event.key_type == KeyType.CTRL and event.value == 'q':
            self.running = False
        elif event.key_type == KeyType.CTRL and event.value == 's':
            self.save()
        else:
            self.editor.handle_key(event)
        self.view.needs_redraw = True

    def save(self) -> bool:
        if not self.editor.filename:
            self.status_message = "No file name; start with: spantext FILE"
            return False
        if self.editor.save_file():
            self.status_message = f"Saved {self.editor.filename}"
            return True
        self.status_message = f"Error saving {self.editor.filename}"
        return False

"""Keyboard input handling for blessed keystrokes."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"
    SHIFT_SPECIAL = "shift_special"  # Shift + arrow keys, etc.


@dataclass
class KeyEvent:
    """Represents a parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace')
    raw: str  # The raw key string from blessed
    is_alt: bool = False
    is_ctrl: bool = False
    is_shift: bool = False
    is_sequence: bool = False
    code: Optional[int] = None


# blessed key names (without the KEY_ prefix) -> our names
_KEY_NAMES = {
    'LEFT': 'left', 'RIGHT': 'right', 'UP': 'up', 'DOWN': 'down',
    'HOME': 'home', 'END': 'end', 'ENTER': 'enter', 'BACKSPACE': 'backspace',
    'DELETE': 'delete', 'DC': 'delete', 'PGUP': 'page_up', 'PPAGE': 'page_up',
    'PGDOWN': 'page_down', 'NPAGE': 'page_down', 'INSERT': 'insert', 'IC': 'insert',
    'ESCAPE': 'escape', 'TAB': 'tab',
}

# Legacy terminfo names for shifted keys
_SHIFTED_NAMES = {
    'SLEFT': 'left', 'SRIGHT': 'right', 'SR': 'up', 'SF': 'down',
    'SHOME': 'home', 'SEND': 'end', 'SDC': 'delete',
}


class KeyboardHandler:
    """Turns blessed keystrokes into ``KeyEvent``s."""

    def __init__(self, terminal_interface):
        """Initialize with a terminal interface."""
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Get next key event, or None when the timeout expires."""
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a blessed key into a KeyEvent.

        Args:
            key: blessed.keyboard.Keystroke object

        Returns:
            Parsed KeyEvent
        """
        key_str = str(key)
        name = getattr(key, 'name', None)
        code = getattr(key, 'code', None)
        if not isinstance(code, int):
            code = None

        if getattr(key, 'is_sequence', False) and isinstance(name, str) and name.startswith('KEY_'):
            event = self._parse_key_name(name[4:], key_str)
            if event is not None:
                event.code = code
                return event

        if len(key_str) == 1:
            o = ord(key_str)
            if key_str in ('\r', '\n'):
                return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str)
            if key_str == '\t':
                return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw=key_str)
            if key_str in ('\x08', '\x7f'):
                return KeyEvent(key_type=KeyType.SPECIAL, value='backspace', raw=key_str)
            if key_str == '\x1b':
                return KeyEvent(key_type=KeyType.SPECIAL, value='escape', raw=key_str)
            if 1 <= o <= 26:  # Ctrl-A .. Ctrl-Z
                ch = chr(ord('a') + o - 1)
                return KeyEvent(key_type=KeyType.CTRL, value=ch, raw=key_str, is_ctrl=True)

        # Alt-<char> arrives as ESC followed by the character
        if len(key_str) == 2 and key_str[0] == '\x1b':
            return KeyEvent(key_type=KeyType.ALT, value=key_str[1], raw=key_str, is_alt=True)

        return KeyEvent(key_type=KeyType.REGULAR, value=key_str, raw=key_str)

    @staticmethod
    def _parse_key_name(name: str, raw: str) -> Optional[KeyEvent]:
        if name in _SHIFTED_NAMES:
            return KeyEvent(key_type=KeyType.SHIFT_SPECIAL, value=_SHIFTED_NAMES[name],
                            raw=raw, is_shift=True, is_sequence=True)

        # Newer blessed releases spell modifiers out: KEY_SHIFT_LEFT, KEY_CTRL_ALT_END
        parts = name.split('_')
        mods = set()
        while len(parts) > 1 and parts[0] in ('SHIFT', 'CTRL', 'ALT', 'META'):
            mods.add(parts.pop(0))
        base = _KEY_NAMES.get('_'.join(parts))
        if base is None:
            return None
        if base == 'tab' and not mods:
            return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw=raw)
        if 'ALT' in mods or 'META' in mods:
            return KeyEvent(key_type=KeyType.ALT, value=base, raw=raw, is_alt=True,
                            is_shift='SHIFT' in mods, is_sequence=True)
        if 'CTRL' in mods:
            return KeyEvent(key_type=KeyType.CTRL, value=base, raw=raw, is_ctrl=True,
                            is_shift='SHIFT' in mods, is_sequence=True)
        if 'SHIFT' in mods:
            return KeyEvent(key_type=KeyType.SHIFT_SPECIAL, value=base, raw=raw,
                            is_shift=True, is_sequence=True)
        return KeyEvent(key_type=KeyType.SPECIAL, value=base, raw=raw, is_sequence=True)

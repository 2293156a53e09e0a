"""Constants and configuration defaults for the spantext editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Caret blinking
    BLINK_INTERVAL = 0.5  # Seconds between caret visibility flips

    # Style defaults used by renderers for keys a span leaves unset
    DEFAULT_FONT = "Arial, sans-serif"
    DEFAULT_SIZE = 12
    DEFAULT_KERNING = 0
    DEFAULT_STROKE_WIDTH = 0
    DEFAULT_COLOR_HEX = "000000FF"

    # Editing history
    MAX_UNDO_ENTRIES = 500

    # Terminal shell
    DEFAULT_VIEW_WIDTH = 80
    STATUS_HINT = "Ctrl-S save  Ctrl-Q quit"

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files
    MARKUP_FILE_ENCODING = "utf-8"

"""Spantext CLI entry point.

Allows running via `python -m spantext` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import json
import logging
import os
import sys

from .constants import EditorConstants
from .version import get_version_string

USAGE = "usage: spantext [--version | --render FILE | --dump FILE | FILE]"


def _configure_logging() -> None:
    level = os.environ.get("SPANTEXT_LOG_LEVEL")
    if level:
        logging.basicConfig(level=level.upper(),
                            format="%(asctime)s %(name)s %(levelname)s: %(message)s")


def _read_document(filename: str):
    from .document import TextDocument
    with open(filename, 'r', encoding=EditorConstants.MARKUP_FILE_ENCODING) as f:
        return TextDocument.from_markup(f.read())


def dump_document(document) -> str:
    """JSON listing of every line's spans."""
    lines = [
        [{"text": span.text, "meta": span.meta.to_dict()} for span in spans]
        for spans in document.lines
    ]
    return json.dumps({"lines": lines}, indent=2, ensure_ascii=False)


def render_file(filename: str) -> None:
    import blessed
    from .view import render_document

    document = _read_document(filename)
    term = blessed.Terminal()
    width = min(EditorConstants.DEFAULT_VIEW_WIDTH, term.width)
    for line in render_document(term, document, width):
        print(line.rstrip())


def main() -> None:
    # Very small arg parsing: version, render, dump, or an optional filename
    args = sys.argv[1:]
    _configure_logging()
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return
    if args and args[0] in ("--render", "--dump"):
        if len(args) != 2:
            print(USAGE, file=sys.stderr)
            sys.exit(2)
        try:
            if args[0] == "--render":
                render_file(args[1])
            else:
                print(dump_document(_read_document(args[1])))
        except OSError as e:
            print(f"spantext: cannot read {args[1]}: {e.strerror or e}", file=sys.stderr)
            sys.exit(1)
        return
    if len(args) > 1 or (args and args[0].startswith('-')):
        print(USAGE, file=sys.stderr)
        sys.exit(2)

    # Lazy import to avoid touching the terminal for the modes above
    from .app import EditorApp
    app = EditorApp(args[0] if args else None)
    app.run()


if __name__ == "__main__":  # pragma: no cover
    main()

"""Inline bracket-tag markup for styled documents.

Markup looks like ``[b]bold[/b] and [style size="20px" fill-color="#ff0000"]red[/style]``.
Supported tags are ``b i u s left right center style``; ``\\[``, ``\\]`` and
``\\\\`` stand for literal brackets and backslashes.

Malformed markup never raises.  Unknown tags, unknown style keys and values
that cannot be converted are skipped and recorded as diagnostics.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from .document import Span, TextDocument, normalize_newlines
from .meta import Align, Color, Shadow, SolidColor, SpanMeta, meta_equal

logger = logging.getLogger(__name__)

_ESCAPE_RE = re.compile(r"\\([\\\[\]])")
# A tag ends at the first unescaped closing bracket
_TOKEN_RE = re.compile(r"(?P<escape>\\[\\\[\]])|(?P<tag>\[(?:\\[\\\[\]]|\\(?![\\\[\]])|[^\\\]])*\])")
_STYLE_ARG_RE = re.compile(r'([\w-]+)\s*=\s*("[^"]*"|\S+)')
_NUMBER_RE = re.compile(r"^([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)([a-zA-Z%]*)$")
_HEX_RE = re.compile(r"^(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

# Tag name -> (attribute, value) it sets
FLAG_TAGS = {
    "b": ("bold", True),
    "i": ("italic", True),
    "u": ("underline", True),
    "s": ("strikethrough", True),
    "left": ("align", Align.LEFT),
    "right": ("align", Align.RIGHT),
    "center": ("align", Align.CENTER),
}
TAG_NAMES = tuple(FLAG_TAGS) + ("style",)

# Style tag argument -> attribute, in the order the serializer writes them
STYLE_KEYS = {
    "font": "font",
    "size": "size",
    "fill-color": "fill_color",
    "stroke-color": "stroke_color",
    "stroke-width": "stroke_width",
    "shadow": "shadow",
    "kerning": "kerning",
    "baseline": "baseline",
}
_NUMERIC_ATTRIBUTES = ("size", "stroke_width", "kerning", "baseline")


@dataclass
class StyleDiff:
    """One attribute change made by an opening tag.

    ``old_value`` is filled in when the tag is applied so the closing tag can
    put the attribute back.
    """
    name: str
    value: Any
    old_value: Any = None


@dataclass
class MarkupDiagnostic:
    line: int
    column: int
    message: str


def escape_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")


def unescape_text(text: str) -> str:
    return _ESCAPE_RE.sub(r"\1", text)


def parse_number(value: str) -> Optional[float]:
    """Parse ``12``, ``1.5em`` or ``20px``; the unit is dropped."""
    match = _NUMBER_RE.match(value.strip())
    if not match:
        return None
    return float(match.group(1))


def parse_color(value: str) -> Optional[Color]:
    value = value.strip()
    if not value.startswith("#") or not _HEX_RE.match(value[1:]):
        return None
    return SolidColor(value[1:])


def parse_shadow(value: str) -> Optional[Shadow]:
    """Parse ``<x> <y> [<blur>] [#color]``, e.g. ``2px 2px 4px #00000080``."""
    numbers = []
    color = None
    for token in value.split():
        if token.startswith("#"):
            color = parse_color(token)
            if color is None:
                return None
            continue
        number = parse_number(token)
        if number is None:
            return None
        numbers.append(number)
    if not 2 <= len(numbers) <= 3:
        return None
    blur = numbers[2] if len(numbers) == 3 else 0.0
    return Shadow(offset_x=numbers[0], offset_y=numbers[1], blur=blur, color=color)


class MarkupParser:
    """Parses markup into a ``TextDocument``.

    Each tag name has its own stack of diff lists, so tags of different
    names may interleave while tags of one name close in LIFO order.  The
    running style state carries over from one line to the next.
    """

    def __init__(self):
        self.diagnostics: list[MarkupDiagnostic] = []
        self.tag_stacks: dict[str, list[list[StyleDiff]]] = {}
        self.meta_state = SpanMeta()
        self._reset()

    def _reset(self):
        self.diagnostics = []
        self.tag_stacks = {name: [] for name in TAG_NAMES}
        self.meta_state = SpanMeta()

    def parse(self, code: str) -> TextDocument:
        self._reset()
        source_lines = normalize_newlines(code).split("\n")
        lines = [self._parse_line(i, source_line) for i, source_line in enumerate(source_lines)]
        if self.diagnostics:
            logger.debug("Parsed markup with %d diagnostic(s)", len(self.diagnostics))
        return TextDocument(lines)

    def _parse_line(self, line_number: int, source_line: str) -> list[Span]:
        spans: list[Span] = []
        run = []
        position = 0
        for match in _TOKEN_RE.finditer(source_line):
            run.append(source_line[position:match.start()])
            position = match.end()
            if match.group("escape"):
                run.append(match.group("escape")[1])
                continue
            self._add_run(spans, "".join(run))
            run = []
            self._apply_tag(match.group("tag"), line_number, match.start())
        run.append(source_line[position:])
        self._add_run(spans, "".join(run))
        if not spans:
            spans.append(Span(self.meta_state.copy(), ""))
        return spans

    def _add_run(self, spans: list[Span], text: str) -> None:
        if not text:
            return
        if spans and meta_equal(spans[-1].meta, self.meta_state):
            spans[-1].text += text
        else:
            spans.append(Span(self.meta_state.copy(), text))

    def _apply_tag(self, tag: str, line: int, column: int) -> None:
        closing = tag.startswith("[/")
        contents = (tag[2:-1] if closing else tag[1:-1]).strip()
        parts = contents.split(None, 1)
        name = parts[0].lower() if parts else ""
        arguments = parts[1] if len(parts) > 1 else ""

        stack = self.tag_stacks.get(name)
        if stack is None:
            self._report(line, column, f"Unknown tag {unescape_text(tag)!r} ignored")
            return

        if closing:
            if not stack:
                self._report(line, column, f"Closing tag [/{name}] has no matching opening tag")
                return
            for diff in reversed(stack.pop()):
                self.meta_state.set_attribute(diff.name, diff.old_value)
            return

        diffs = self._tag_diffs(name, arguments, line, column)
        for diff in diffs:
            diff.old_value = self.meta_state.get_attribute(diff.name)
            self.meta_state.set_attribute(diff.name, diff.value)
        stack.append(diffs)

    def _tag_diffs(self, name: str, arguments: str, line: int, column: int) -> list[StyleDiff]:
        if name in FLAG_TAGS:
            attribute, value = FLAG_TAGS[name]
            return [StyleDiff(attribute, value)]

        diffs = []
        for match in _STYLE_ARG_RE.finditer(arguments):
            key = match.group(1).lower()
            raw = match.group(2)
            if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
                raw = raw[1:-1]
            raw = unescape_text(raw)
            attribute = STYLE_KEYS.get(key)
            if attribute is None:
                self._report(line, column, f"Unknown style attribute {key!r} ignored")
                continue
            value = self._convert(attribute, raw)
            if value is None:
                self._report(line, column, f"Invalid value {raw!r} for style attribute {key!r}",
                             level=logging.WARNING)
                continue
            diffs.append(StyleDiff(attribute, value))
        return diffs

    @staticmethod
    def _convert(attribute: str, raw: str) -> Any:
        if attribute == "font":
            # Quotes cannot be written back inside a quoted value
            if '"' in raw:
                return None
            return raw or None
        if attribute in _NUMERIC_ATTRIBUTES:
            return parse_number(raw)
        if attribute in ("fill_color", "stroke_color"):
            return parse_color(raw)
        if attribute == "shadow":
            return parse_shadow(raw)
        return None

    def _report(self, line: int, column: int, message: str, level: int = logging.DEBUG) -> None:
        self.diagnostics.append(MarkupDiagnostic(line, column, message))
        logger.log(level, "Markup line %d column %d: %s", line + 1, column + 1, message)


@dataclass
class _OpenTag:
    name: str
    settings: tuple  # ((attribute, value), ...)

    def opening(self) -> str:
        if self.name != "style":
            return f"[{self.name}]"
        arguments = " ".join(
            f'{key}="{_format_style_value(self.settings_by_attribute[attribute])}"'
            for key, attribute in STYLE_KEYS.items()
            if attribute in self.settings_by_attribute
        )
        return f"[style {arguments}]"

    def closing(self) -> str:
        return f"[/{self.name}]"

    @property
    def settings_by_attribute(self) -> dict:
        return dict(self.settings)


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _format_style_value(value: Any) -> str:
    if isinstance(value, SolidColor):
        return "#" + value.hex
    if isinstance(value, Shadow):
        text = f"{_format_number(value.offset_x)} {_format_number(value.offset_y)} {_format_number(value.blur)}"
        if value.color:
            text += " #" + value.color.hex
        return text
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _format_number(value)
    return escape_text(str(value).replace('"', ""))


class MarkupSerializer:
    """Writes a document as markup with minimal tag transitions.

    Tags stay open across lines, mirroring how the parser carries its style
    state, so an empty line keeps the style it was given.
    """

    def serialize(self, document: TextDocument) -> str:
        open_tags: list[_OpenTag] = []
        out_lines = []
        for spans in document.lines:
            parts = []
            for span in spans:
                parts.append(self._transition(open_tags, span.meta))
                parts.append(escape_text(span.text))
            out_lines.append("".join(parts))

        last_line = document.lines[-1]
        if not (len(last_line) == 1 and not last_line[0].text):
            out_lines[-1] += "".join(tag.closing() for tag in reversed(open_tags))
        return "\n".join(out_lines)

    @staticmethod
    def _transition(open_tags: list[_OpenTag], meta: SpanMeta) -> str:
        target = {name: meta.get_attribute(name) for name in meta.keys()}
        # Flags can only be switched on by markup
        target = {name: value for name, value in target.items() if value is not False}

        keep = 0
        for tag in open_tags:
            if any(target.get(attribute) != value for attribute, value in tag.settings):
                break
            keep += 1
        closing = "".join(tag.closing() for tag in reversed(open_tags[keep:]))
        del open_tags[keep:]

        state = {attribute: value for tag in open_tags for attribute, value in tag.settings}
        missing = {name: value for name, value in target.items() if name not in state}

        new_tags = []
        for tag_name, (attribute, value) in FLAG_TAGS.items():
            if missing.get(attribute) == value:
                new_tags.append(_OpenTag(tag_name, ((attribute, value),)))
                del missing[attribute]
        style_settings = tuple(
            (attribute, missing[attribute]) for attribute in STYLE_KEYS.values() if attribute in missing
        )
        if style_settings:
            new_tags.append(_OpenTag("style", style_settings))

        open_tags.extend(new_tags)
        return closing + "".join(tag.opening() for tag in new_tags)


def parse_markup(code: str) -> TextDocument:
    return MarkupParser().parse(code)


def serialize_markup(document: TextDocument) -> str:
    return MarkupSerializer().serialize(document)

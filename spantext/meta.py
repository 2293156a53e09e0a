"""Style records ("meta") attached to spans.

A ``SpanMeta`` only carries the attributes a run of text sets explicitly.
``None`` means the attribute is absent, so two metas are equal when they
set the same attributes to structurally equal values.  Every value held by
a meta is immutable (enums, numbers, strings and frozen dataclasses), which
makes a field-level copy a complete structural clone.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Optional

from .constants import EditorConstants


class Align(Enum):
    """Horizontal alignment of a line."""
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


@dataclass(frozen=True)
class SolidColor:
    """A flat color given as a hex string without the leading ``#``."""
    hex: str

    @property
    def type(self) -> str:
        return "solid"

    def to_dict(self) -> dict:
        return {"type": self.type, "hex": self.hex}


# Only solid fills exist today; gradients would join this union.
Color = SolidColor


@dataclass(frozen=True)
class Shadow:
    """Drop shadow: offsets and blur in points plus an optional color."""
    offset_x: float = 0.0
    offset_y: float = 0.0
    blur: float = 0.0
    color: Optional[Color] = None

    def to_dict(self) -> dict:
        return {
            "offsetX": self.offset_x,
            "offsetY": self.offset_y,
            "blur": self.blur,
            "color": self.color.to_dict() if self.color else None,
        }


# Python attribute name -> key used in dictionaries and JSON dumps
ATTRIBUTE_KEYS = {
    "bold": "bold",
    "italic": "italic",
    "underline": "underline",
    "strikethrough": "strikethrough",
    "align": "align",
    "font": "font",
    "size": "size",
    "kerning": "kerning",
    "stroke_width": "strokeWidth",
    "fill_color": "fillColor",
    "stroke_color": "strokeColor",
    "shadow": "shadow",
    "baseline": "baseline",
}


@dataclass
class SpanMeta:
    """Style attributes of a span. Unset attributes are ``None``."""
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    strikethrough: Optional[bool] = None
    align: Optional[Align] = None
    font: Optional[str] = None
    size: Optional[float] = None
    kerning: Optional[float] = None
    stroke_width: Optional[float] = None
    fill_color: Optional[Color] = None
    stroke_color: Optional[Color] = None
    shadow: Optional[Shadow] = None
    baseline: Optional[float] = None

    def copy(self) -> "SpanMeta":
        """Return an independent structural clone."""
        return replace(self)

    def get_attribute(self, name: str) -> Any:
        if name not in ATTRIBUTE_KEYS:
            raise KeyError(name)
        return getattr(self, name)

    def set_attribute(self, name: str, value: Any) -> None:
        if name not in ATTRIBUTE_KEYS:
            raise KeyError(name)
        setattr(self, name, value)

    def keys(self) -> set[str]:
        """Names of the attributes this meta sets."""
        return {f.name for f in fields(self) if getattr(self, f.name) is not None}

    def is_plain(self) -> bool:
        return not self.keys()

    def resolve(self, defaults: "SpanMeta") -> "SpanMeta":
        """Return a copy with absent attributes taken from ``defaults``."""
        resolved = self.copy()
        for f in fields(self):
            if getattr(resolved, f.name) is None:
                setattr(resolved, f.name, getattr(defaults, f.name))
        return resolved

    def to_dict(self) -> dict:
        """Present attributes only, with JSON-friendly values."""
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Align):
                value = value.value
            elif isinstance(value, (SolidColor, Shadow)):
                value = value.to_dict()
            out[ATTRIBUTE_KEYS[f.name]] = value
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "SpanMeta":
        """Build a meta from ``to_dict`` output; unknown keys are ignored."""
        by_key = {key: name for name, key in ATTRIBUTE_KEYS.items()}
        meta = cls()
        for key, value in data.items():
            name = by_key.get(key, key if key in ATTRIBUTE_KEYS else None)
            if name is None or value is None:
                continue
            if name == "align":
                value = Align(value)
            elif name in ("fill_color", "stroke_color"):
                value = _color_from_value(value)
            elif name == "shadow":
                value = Shadow(
                    offset_x=value.get("offsetX", 0.0),
                    offset_y=value.get("offsetY", 0.0),
                    blur=value.get("blur", 0.0),
                    color=_color_from_value(value.get("color")),
                )
            setattr(meta, name, value)
        return meta


def _color_from_value(value: Any) -> Optional[Color]:
    if value is None:
        return None
    if isinstance(value, SolidColor):
        return value
    if isinstance(value, str):
        return SolidColor(value.lstrip("#"))
    return SolidColor(value["hex"])


def meta_equal(meta1: SpanMeta, meta2: SpanMeta) -> bool:
    """Field-by-field structural equality of two style records."""
    for f in fields(SpanMeta):
        if getattr(meta1, f.name) != getattr(meta2, f.name):
            return False
    return True


def default_meta() -> SpanMeta:
    """Renderer defaults for attributes a span leaves unset."""
    return SpanMeta(
        font=EditorConstants.DEFAULT_FONT,
        size=EditorConstants.DEFAULT_SIZE,
        kerning=EditorConstants.DEFAULT_KERNING,
        stroke_width=EditorConstants.DEFAULT_STROKE_WIDTH,
        fill_color=SolidColor(EditorConstants.DEFAULT_COLOR_HEX),
        stroke_color=SolidColor(EditorConstants.DEFAULT_COLOR_HEX),
    )

"""Spantext - a span-based rich text document model with an inline markup format."""

__version__ = "0.1.0"

from .document import Position, Span, TextDocument
from .editor import TextEditor
from .markup import MarkupParser, MarkupSerializer, parse_markup, serialize_markup
from .meta import Align, Shadow, SolidColor, SpanMeta
from .selection import TextSelection

__all__ = [
    'Align',
    'MarkupParser',
    'MarkupSerializer',
    'Position',
    'Shadow',
    'SolidColor',
    'Span',
    'SpanMeta',
    'TextDocument',
    'TextEditor',
    'TextSelection',
    'parse_markup',
    'serialize_markup',
]

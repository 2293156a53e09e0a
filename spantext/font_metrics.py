"""Font metrics records and the per-editor cache that holds them.

Measuring a font is the renderer's business; the cache only remembers the
results of the probe it is given so each (family, size) pair is measured
once per editor.
"""

from dataclasses import dataclass
from typing import Callable

from .meta import SpanMeta


@dataclass(frozen=True)
class FontMetrics:
    """Measured dimensions of a font.

    Attributes:
        family: Font family as requested
        size: Font size as requested
        width: Average advance of a glyph
        height: Line height
        baseline: Distance from the top of the line to the baseline
    """
    family: str
    size: float
    width: float
    height: float
    baseline: float


FontProbe = Callable[[str, float], FontMetrics]


def cell_probe(family: str, size: float) -> FontMetrics:
    """Probe for character-cell displays: every glyph is one cell."""
    return FontMetrics(family=family, size=size, width=1, height=1, baseline=1)


class FontMetricsCache:
    """Caches ``FontMetrics`` by (family, size) for one editor."""

    def __init__(self, probe: FontProbe = cell_probe):
        self._probe = probe
        self._entries: dict[tuple[str, float], FontMetrics] = {}

    def get(self, family: str, size: float) -> FontMetrics:
        key = (family, size)
        metrics = self._entries.get(key)
        if metrics is None:
            metrics = self._probe(family, size)
            self._entries[key] = metrics
        return metrics

    def get_for_meta(self, meta: SpanMeta, defaults: SpanMeta) -> FontMetrics:
        resolved = meta.resolve(defaults)
        return self.get(resolved.font, resolved.size)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries

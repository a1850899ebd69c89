"""Text to normalized path conversion.

Glyph outlines come from a :class:`GlyphSource`: either a TrueType/OpenType
font read with ``fontTools`` or the built-in clock-style digits. A
:class:`GlyphCache` loads its source once and keeps an LRU of rendered
strings so repeated previews of the same text are free.

Rendering pipeline per string:

1. lay glyphs out left to right by advance width (font size 200, Y up)
2. split each glyph into strokes and keep its largest-area stroke(s)
3. order all strokes greedily and merge them with grid connectors
4. flip Y, drop near-duplicates, simplify, normalize to the unit square
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

from cachetools import LRUCache
from fontTools.pens.recordingPen import RecordingPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont, TTLibError

from ..config import (
    FONT_PATHS,
    GLYPH_CACHE_SIZE,
    GLYPH_FONT_SIZE,
    MAX_TEXT_LENGTH,
    TEXT_DEDUPE_THRESHOLD,
    TEXT_SIMPLIFY_TOLERANCE,
)
from ..errors import GlyphSourceError, InputValidationError, UnsupportedCharacterError
from ..models import Point2D, Stroke
from .analog_digits import DIGIT_SPACING, get_analog_digit, is_analog_digit_supported
from .normalizer import normalize_path
from .simplifier import remove_duplicates, simplify_path
from .strokes import (
    commands_to_strokes,
    filter_largest_strokes,
    merge_strokes,
    optimize_stroke_order,
)

LOGGER = logging.getLogger(__name__)

__all__ = [
    "Glyph",
    "GlyphSource",
    "FontGlyphSource",
    "AnalogDigitGlyphSource",
    "GlyphCache",
    "validate_text",
    "render_text",
    "text_to_path",
    "text_to_analog_path",
    "get_default_glyph_cache",
    "get_analog_glyph_cache",
]


@dataclass(slots=True)
class Glyph:
    """Outline of one character in raw units, Y up, origin at the pen position."""

    char: str
    strokes: List[Stroke] = field(default_factory=list)
    advance: float = 0.0


class GlyphSource(Protocol):
    name: str

    def glyph(self, char: str) -> Glyph: ...


class FontGlyphSource:
    """Glyphs read from a font file, scaled so one em equals ``font_size``."""

    def __init__(self, font_path: str, font_size: float = GLYPH_FONT_SIZE) -> None:
        self.name = font_path
        self._font = TTFont(font_path)
        self._cmap = self._font.getBestCmap() or {}
        self._glyph_set = self._font.getGlyphSet()
        self._scale = font_size / float(self._font["head"].unitsPerEm)

    @classmethod
    def from_search_path(
        cls, paths: Sequence[str] = tuple(FONT_PATHS), font_size: float = GLYPH_FONT_SIZE
    ) -> "FontGlyphSource":
        """Open the first readable font in ``paths``."""

        for path in paths:
            try:
                source = cls(path, font_size)
            except (OSError, TTLibError, KeyError) as exc:
                LOGGER.warning("Failed to load font from %s: %s", path, exc)
                continue
            LOGGER.info("Loaded font %s", path)
            return source
        raise GlyphSourceError(
            "No font file found. Set ROUTE_PAINTER_FONT_PATHS or add a font "
            "under fonts/ (tried: " + ", ".join(paths) + ")"
        )

    def glyph(self, char: str) -> Glyph:
        glyph_name = self._cmap.get(ord(char))
        if glyph_name is None:
            raise UnsupportedCharacterError(
                f"Character {char!r} is not available in font {self.name}"
            )
        recording = RecordingPen()
        pen = TransformPen(recording, (self._scale, 0, 0, self._scale, 0, 0))
        outline = self._glyph_set[glyph_name]
        outline.draw(pen)
        strokes = commands_to_strokes(recording.value, id_prefix=f"{char}")
        return Glyph(char=char, strokes=strokes, advance=outline.width * self._scale)


class AnalogDigitGlyphSource:
    """Clock-style digits rendered into the same raw space as font glyphs."""

    name = "analog-digits"

    def __init__(self, size: float = GLYPH_FONT_SIZE) -> None:
        self._size = size

    def glyph(self, char: str) -> Glyph:
        if char == " ":
            return Glyph(char=char)
        if not is_analog_digit_supported(char):
            raise UnsupportedCharacterError(
                f"Analog digits only support 0-9 (got {char!r})"
            )
        size = self._size
        # Outlines are Y down in a unit cell; glyph space is Y up.
        points = [Point2D(x * size, (1.0 - y) * size) for x, y in get_analog_digit(char)]
        return Glyph(
            char=char,
            strokes=[Stroke(id=char, points=points)],
            advance=DIGIT_SPACING * size,
        )


def validate_text(text: str) -> str:
    """Return the stripped text or raise :class:`InputValidationError`."""

    stripped = (text or "").strip()
    if not stripped:
        raise InputValidationError("Text cannot be empty")
    if len(stripped) > MAX_TEXT_LENGTH:
        raise InputValidationError(
            f"Text must be at most {MAX_TEXT_LENGTH} characters (got {len(stripped)})"
        )
    return stripped


def render_text(source: GlyphSource, text: str) -> List[Point2D]:
    """Render ``text`` with ``source`` into a normalized single path."""

    strokes: List[Stroke] = []
    pen_x = 0.0
    for index, char in enumerate(text):
        glyph = source.glyph(char)
        for stroke in filter_largest_strokes(glyph.strokes):
            strokes.append(
                Stroke(
                    id=f"{index}:{stroke.id}",
                    points=[Point2D(x + pen_x, y) for x, y in stroke.points],
                )
            )
        pen_x += glyph.advance
    if not strokes:
        raise InputValidationError(f"No path data generated from text {text!r}")

    merged = merge_strokes(optimize_stroke_order(strokes), grid_connectors=True)
    flipped = [Point2D(x, -y) for x, y in merged]
    cleaned = remove_duplicates(flipped, TEXT_DEDUPE_THRESHOLD)
    simplified = simplify_path(cleaned, TEXT_SIMPLIFY_TOLERANCE)
    LOGGER.debug(
        "Rendered %r with %s: %d strokes, %d -> %d points",
        text,
        source.name,
        len(strokes),
        len(merged),
        len(simplified),
    )
    return normalize_path(simplified)


class GlyphCache:
    """Init-once glyph source plus an LRU of rendered paths keyed by text."""

    def __init__(
        self,
        loader: Callable[[], GlyphSource],
        maxsize: int = GLYPH_CACHE_SIZE,
    ) -> None:
        self._loader = loader
        self._source: Optional[GlyphSource] = None
        self._paths: LRUCache[str, tuple[Point2D, ...]] = LRUCache(maxsize=maxsize)
        self._lock = threading.RLock()

    @property
    def is_loaded(self) -> bool:
        return self._source is not None

    def source(self) -> GlyphSource:
        with self._lock:
            if self._source is None:
                self._source = self._loader()
            return self._source

    def preload(self) -> bool:
        """Load the source now; returns ``False`` (and logs) on failure."""

        try:
            self.source()
        except GlyphSourceError as exc:
            LOGGER.warning("Glyph source preload failed: %s", exc)
            return False
        return True

    def get_path(self, text: str) -> List[Point2D]:
        with self._lock:
            cached = self._paths.get(text)
            if cached is not None:
                return list(cached)
            path = render_text(self.source(), text)
            self._paths[text] = tuple(path)
            return path

    def clear(self) -> None:
        with self._lock:
            self._paths.clear()


_default_cache: Optional[GlyphCache] = None
_analog_cache: Optional[GlyphCache] = None
_cache_lock = threading.Lock()


def get_default_glyph_cache() -> GlyphCache:
    """Process-wide cache backed by the first font found in ``FONT_PATHS``."""

    global _default_cache
    with _cache_lock:
        if _default_cache is None:
            _default_cache = GlyphCache(FontGlyphSource.from_search_path)
        return _default_cache


def get_analog_glyph_cache() -> GlyphCache:
    global _analog_cache
    with _cache_lock:
        if _analog_cache is None:
            _analog_cache = GlyphCache(AnalogDigitGlyphSource)
        return _analog_cache


def text_to_path(text: str, cache: Optional[GlyphCache] = None) -> List[Point2D]:
    """Convert ``text`` into a normalized path using a font glyph source."""

    stripped = validate_text(text)
    return (cache or get_default_glyph_cache()).get_path(stripped)


def text_to_analog_path(text: str, cache: Optional[GlyphCache] = None) -> List[Point2D]:
    """Convert a digit string into a normalized path of clock-style digits."""

    stripped = validate_text(text)
    return (cache or get_analog_glyph_cache()).get_path(stripped)

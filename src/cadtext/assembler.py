"""
Assembly of classified glyphs into ordered text lines.
"""

import math
import logging
from dataclasses import dataclass
from itertools import groupby
from typing import List, Sequence

from .exceptions import ValidationError
from .geometry import Extents, Point

logger = logging.getLogger(__name__)

# A gap wider than this fraction of the left glyph's width becomes a space.
WORD_GAP_RATIO = 0.4


@dataclass(frozen=True)
class Glyph:
    extents: Extents
    text: str


@dataclass(frozen=True)
class RecognizedLine:
    text: str
    anchor: Point
    height: float

    @property
    def position(self):
        """Anchor as an (x, y, z) insertion point with z = 0."""
        return (self.anchor.x, self.anchor.y, 0.0)


def row_key(glyph: Glyph, tolerance: float) -> int:
    """Quantized row of a glyph; glyphs with small vertical jitter share a row."""
    return int(round(glyph.extents.min_y / tolerance))


def join_glyphs(glyphs: Sequence[Glyph], gap_ratio: float = WORD_GAP_RATIO) -> str:
    """Concatenate glyph texts, inserting one space at each wide gap."""
    parts = []
    for i, current in enumerate(glyphs):
        parts.append(current.text)
        if i + 1 == len(glyphs):
            break
        gap = glyphs[i + 1].extents.min_x - current.extents.max_x
        if gap > gap_ratio * current.extents.width:
            parts.append(" ")
    return "".join(parts)


def assemble_lines(glyphs: Sequence[Glyph], tolerance: float, gap_ratio: float = WORD_GAP_RATIO) -> List[RecognizedLine]:
    """Group glyphs into lines ordered top-to-bottom, left-to-right.

    Glyphs with blank text or invalid extents are dropped. Rows come from
    ``round(min_y / tolerance)`` in descending order; within a row glyphs
    are ordered by ``min_x``.

    Args:
        glyphs: Classified glyphs in any order
        tolerance: Row quantization step (the clustering tolerance)
        gap_ratio: Word gap threshold as a fraction of glyph width

    Returns:
        Recognized lines; each anchored at its leftmost glyph's min point,
        with height equal to the mean glyph height
    """
    if not math.isfinite(tolerance) or tolerance <= 0:
        raise ValidationError(f"tolerance must be positive, got {tolerance!r}", "tolerance")

    usable = [g for g in glyphs if g.text and g.text.strip() and g.extents.valid]
    ordered = sorted(usable, key=lambda g: (-row_key(g, tolerance), g.extents.min_x))

    lines: List[RecognizedLine] = []
    for row, members in groupby(ordered, key=lambda g: row_key(g, tolerance)):
        row_glyphs = list(members)
        height = sum(g.extents.height for g in row_glyphs) / len(row_glyphs)
        lines.append(RecognizedLine(
            text=join_glyphs(row_glyphs, gap_ratio),
            anchor=row_glyphs[0].extents.min_point,
            height=height,
        ))
        logger.debug(f"Row {row}: '{lines[-1].text}' from {len(row_glyphs)} glyphs")
    return lines

"""
Rasterization of one cluster into a padded square glyph bitmap.
"""

import math
import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np
import cv2

from .clustering import Cluster
from .exceptions import GeometryError, RasterizationError
from .geometry import EPS, Arc, Circle, Extents, Point, Polyline, Primitive, Segment, Spline, sample_spline

logger = logging.getLogger(__name__)

PADDING_RATIO = 0.2
MIN_SIZE = 20
STROKE_DIVISOR = 50

BACKGROUND = 255
INK = 0

# Sub-pixel precision for OpenCV drawing calls (coordinates in 1/16 px).
SHIFT = 4
FIXED = 1 << SHIFT


def glyph_layout(extents: Extents, padding_ratio: float = PADDING_RATIO,
                 min_size: int = MIN_SIZE, scale: float = 1.0) -> Tuple[int, float]:
    """Return (size in pixels, padding in drawing units) for a glyph box."""
    longest = max(extents.width, extents.height)
    padding = padding_ratio * longest
    size = int(math.ceil((longest + 2 * padding) * scale))
    return max(size, min_size), padding


def placement_transform(extents: Extents, padding: float, size: int, scale: float = 1.0) -> np.ndarray:
    """2x3 affine matrix mapping drawing (x, y) to pixel (col, row).

    The origin moves to ``extents.min - padding``. Rows are flipped so that
    larger drawing Y ends up nearer the top of the image.
    """
    ox = extents.min_x - padding
    oy = extents.min_y - padding
    return np.array([
        [scale, 0.0, -ox * scale],
        [0.0, -scale, size + oy * scale],
    ], dtype=np.float64)


def apply_transform(matrix: np.ndarray, points: Sequence[Point]) -> np.ndarray:
    """Map drawing points to pixel coordinates, shape (N, 2)."""
    pts = np.array([[p.x, p.y, 1.0] for p in points], dtype=np.float64).reshape(-1, 3)
    return pts @ matrix.T


def _fixed(pt: np.ndarray) -> Tuple[int, int]:
    return int(round(pt[0] * FIXED)), int(round(pt[1] * FIXED))


def _fixed_array(pts: np.ndarray) -> np.ndarray:
    return np.round(pts * FIXED).astype(np.int32).reshape(-1, 1, 2)


def draw_primitive(canvas: np.ndarray, primitive: Primitive, matrix: np.ndarray, thickness: int) -> None:
    """Stroke one primitive onto ``canvas`` in ink with anti-aliasing.

    Raises:
        GeometryError: if a spline cannot be sampled
        RasterizationError: for a primitive type with no draw rule
    """
    scale = float(matrix[0, 0])
    if isinstance(primitive, Segment):
        p0, p1 = apply_transform(matrix, (primitive.start, primitive.end))
        cv2.line(canvas, _fixed(p0), _fixed(p1), INK, thickness, cv2.LINE_AA, SHIFT)
    elif isinstance(primitive, Circle):
        center = apply_transform(matrix, (primitive.center,))[0]
        radius = int(round(primitive.radius * scale * FIXED))
        cv2.circle(canvas, _fixed(center), radius, INK, thickness, cv2.LINE_AA, SHIFT)
    elif isinstance(primitive, Arc):
        center = apply_transform(matrix, (primitive.center,))[0]
        radius = int(round(primitive.radius * scale * FIXED))
        # Flipped rows turn counter-clockwise drawing angles into negated OpenCV angles.
        start = -(primitive.start_angle + primitive.sweep)
        end = -primitive.start_angle
        cv2.ellipse(canvas, _fixed(center), (radius, radius), 0.0, start, end,
                    INK, thickness, cv2.LINE_AA, SHIFT)
    elif isinstance(primitive, Polyline):
        if len(primitive.vertices) < 2:
            return
        pts = _fixed_array(apply_transform(matrix, primitive.vertices))
        closed = primitive.closed and len(primitive.vertices) > 2
        cv2.polylines(canvas, [pts], closed, INK, thickness, cv2.LINE_AA, SHIFT)
    elif isinstance(primitive, Spline):
        pts = _fixed_array(apply_transform(matrix, sample_spline(primitive)))
        cv2.polylines(canvas, [pts], False, INK, thickness, cv2.LINE_AA, SHIFT)
    else:
        raise RasterizationError("no draw rule", type(primitive).__name__)


def rasterize(cluster: Cluster, padding_ratio: float = PADDING_RATIO, min_size: int = MIN_SIZE,
              stroke_divisor: float = STROKE_DIVISOR, scale: float = 1.0) -> Optional[np.ndarray]:
    """Render a cluster into a white square bitmap with black strokes.

    Args:
        cluster: Primitives forming one glyph candidate
        padding_ratio: Padding as a fraction of the longer glyph side
        min_size: Smallest bitmap side in pixels
        stroke_divisor: Stroke width is ``size / stroke_divisor``, at least 1 px
        scale: Pixels per drawing unit

    Returns:
        uint8 array of shape (size, size), or None when the cluster box is
        invalid or flat in either direction
    """
    extents = cluster.extents
    if not extents.valid or extents.width < EPS or extents.height < EPS:
        logger.debug(f"Skipping cluster of {len(cluster)} with unusable extents {extents}")
        return None

    size, padding = glyph_layout(extents, padding_ratio, min_size, scale)
    matrix = placement_transform(extents, padding, size, scale)
    thickness = max(1, int(round(size / stroke_divisor)))

    canvas = np.full((size, size), BACKGROUND, dtype=np.uint8)
    for primitive in cluster.primitives:
        try:
            draw_primitive(canvas, primitive, matrix, thickness)
        except (GeometryError, RasterizationError) as e:
            logger.warning(f"Primitive not drawn: {e}")
    return canvas


@contextmanager
def rendered_glyph(cluster: Cluster, **kwargs) -> Iterator[Optional[np.ndarray]]:
    """Render a cluster for the ``with`` block that classifies it.

    The block only marks the intended lifetime. The array is freed once the
    caller drops its ``as`` name, so callers must not keep it past the
    block; copy it if it is needed later.
    """
    yield rasterize(cluster, **kwargs)


def validate_bitmap(bitmap: np.ndarray) -> bool:
    """Check that an array is a non-empty single-channel uint8 image."""
    if not isinstance(bitmap, np.ndarray):
        return False
    if bitmap.size == 0:
        return False
    if bitmap.ndim != 2 or bitmap.dtype != np.uint8:
        return False
    return True

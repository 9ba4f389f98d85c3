"""
Clustering tolerance derived from primitive height statistics.
"""

import logging
from typing import List, Sequence

import numpy as np

from .geometry import EPS, Primitive, compute_extents

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1.0
MEDIAN_HEIGHT_SCALE = 0.4
MEAN_HEIGHT_SCALE = 1.5


def primitive_heights(primitives: Sequence[Primitive], min_height: float = EPS) -> List[float]:
    """Heights of the primitives whose extents are valid and taller than ``min_height``."""
    heights = []
    for primitive in primitives:
        ext = compute_extents(primitive)
        if ext.valid and ext.height > min_height:
            heights.append(ext.height)
    return heights


def estimate_tolerance(
    primitives: Sequence[Primitive],
    height_scale: float = MEDIAN_HEIGHT_SCALE,
    default: float = DEFAULT_TOLERANCE,
    min_height: float = EPS,
) -> float:
    """Estimate the clustering distance from the median character height.

    Degenerate primitives (invalid extents or flat boxes) do not take part.
    The median keeps a few oversized primitives, such as leader lines, from
    inflating the result.

    Args:
        primitives: Primitives of one recognition run
        height_scale: Fraction of the median height used as tolerance
        default: Returned when no primitive has a usable height
        min_height: Heights at or below this value are ignored

    Returns:
        Strictly positive tolerance
    """
    heights = primitive_heights(primitives, min_height)
    if not heights:
        logger.debug(f"No usable heights among {len(primitives)} primitives, tolerance={default}")
        return default
    median = float(np.median(heights))
    tolerance = median * height_scale
    if tolerance <= 0:
        return default
    logger.debug(f"Median height {median:.4g} over {len(heights)} primitives, tolerance={tolerance:.4g}")
    return tolerance


def estimate_tolerance_mean(
    primitives: Sequence[Primitive],
    height_scale: float = MEAN_HEIGHT_SCALE,
    default: float = DEFAULT_TOLERANCE,
) -> float:
    """Mean-height tolerance used by the whole-cluster-box policy.

    Every primitive with valid extents counts, flat ones included.
    """
    heights = [ext.height for ext in map(compute_extents, primitives) if ext.valid]
    if not heights:
        return default
    tolerance = float(np.mean(heights)) * height_scale
    return tolerance if tolerance > 0 else default

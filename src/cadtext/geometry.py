"""
Vector primitives and axis-aligned extents.

Primitives are the atomic shapes taken from a drawing: segments, arcs,
circles, polylines and splines. Extents are computed per primitive and
never raise; malformed geometry yields ``Extents.invalid()``.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Tuple, Union

from .exceptions import GeometryError

logger = logging.getLogger(__name__)

EPS = 1e-6

# Intervals sampled along a spline; the sample list holds SPLINE_SAMPLES + 1 points.
SPLINE_SAMPLES = 20


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Extents:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def invalid(cls) -> "Extents":
        return cls(math.inf, math.inf, -math.inf, -math.inf)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "Extents":
        xs: List[float] = []
        ys: List[float] = []
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
        if not xs:
            return cls.invalid()
        # min/max silently skip a NaN that is not first
        if not all(math.isfinite(v) for v in xs + ys):
            return cls.invalid()
        return cls(min(xs), min(ys), max(xs), max(ys))

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.min_x, self.min_y, self.max_x, self.max_y))

    @property
    def valid(self) -> bool:
        return self.is_finite and self.min_x <= self.max_x and self.min_y <= self.max_y

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def has_area(self) -> bool:
        """True when both sides are longer than EPS."""
        return self.valid and self.width >= EPS and self.height >= EPS

    @property
    def min_point(self) -> Point:
        return Point(self.min_x, self.min_y)

    @property
    def max_point(self) -> Point:
        return Point(self.max_x, self.max_y)

    def expanded(self, distance: float) -> "Extents":
        if not self.valid:
            return Extents.invalid()
        return Extents(
            self.min_x - distance, self.min_y - distance,
            self.max_x + distance, self.max_y + distance,
        )

    def union(self, other: "Extents") -> "Extents":
        if not other.valid:
            return self
        if not self.valid:
            return other
        return Extents(
            min(self.min_x, other.min_x), min(self.min_y, other.min_y),
            max(self.max_x, other.max_x), max(self.max_y, other.max_y),
        )

    def overlaps(self, other: "Extents") -> bool:
        """Closed AABB intersection test; False if either box is invalid."""
        if not self.valid or not other.valid:
            return False
        return (
            self.min_x <= other.max_x and self.max_x >= other.min_x
            and self.min_y <= other.max_y and self.max_y >= other.min_y
        )


@dataclass(frozen=True)
class Segment:
    start: Point
    end: Point


@dataclass(frozen=True)
class Arc:
    """Circular arc; angles in degrees, counter-clockwise from +X."""
    center: Point
    radius: float
    start_angle: float
    end_angle: float

    @property
    def sweep(self) -> float:
        sweep = self.end_angle - self.start_angle
        if sweep < 0:
            sweep += 360.0
        return sweep


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float


@dataclass(frozen=True)
class Polyline:
    vertices: Tuple[Point, ...]
    closed: bool = False


@dataclass(frozen=True)
class Spline:
    """Parametric curve evaluated through ``sampler`` over [start_param, end_param]."""
    sampler: Callable[[float], Point] = field(compare=False)
    start_param: float
    end_param: float


Primitive = Union[Segment, Arc, Circle, Polyline, Spline]


def sample_spline(spline: Spline, samples: int = SPLINE_SAMPLES) -> List[Point]:
    """Evaluate the spline at ``samples + 1`` evenly spaced parameters.

    Raises:
        GeometryError: if the sampler fails or returns a non-finite point
    """
    span = spline.end_param - spline.start_param
    points: List[Point] = []
    for i in range(samples + 1):
        t = spline.start_param + span * i / samples
        try:
            p = spline.sampler(t)
        except Exception as e:
            raise GeometryError(f"sampler failed at t={t:.6g}: {e}", "spline") from e
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise GeometryError(f"non-finite point at t={t:.6g}", "spline")
        points.append(p)
    return points


def compute_extents(primitive: Primitive) -> Extents:
    """Axis-aligned bounding box of one primitive.

    Circles and arcs use center +/- radius on both axes; arcs are not
    trimmed to their angle range. Returns ``Extents.invalid()`` for
    geometry that cannot produce a box.
    """
    try:
        if isinstance(primitive, Segment):
            return Extents.from_points((primitive.start, primitive.end))
        if isinstance(primitive, (Circle, Arc)):
            r = primitive.radius
            if not math.isfinite(r) or r < 0:
                return Extents.invalid()
            if isinstance(primitive, Arc) and not (
                math.isfinite(primitive.start_angle) and math.isfinite(primitive.end_angle)
            ):
                return Extents.invalid()
            c = primitive.center
            return Extents.from_points((Point(c.x - r, c.y - r), Point(c.x + r, c.y + r)))
        if isinstance(primitive, Polyline):
            return Extents.from_points(primitive.vertices)
        if isinstance(primitive, Spline):
            return Extents.from_points(sample_spline(primitive))
    except GeometryError as e:
        logger.debug(f"No extents: {e}")
        return Extents.invalid()
    logger.debug(f"No extents for unsupported primitive {type(primitive).__name__}")
    return Extents.invalid()


def union_extents(extents: Iterable[Extents]) -> Extents:
    total = Extents.invalid()
    for ext in extents:
        total = total.union(ext)
    return total

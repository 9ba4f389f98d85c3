"""
Spatial clustering of primitives into glyph candidates.

Two primitives are related when the tolerance-expanded box of one overlaps
the box of the other; clusters are the connected components of that
relation. The default policy expands each frontier primitive's own box,
which keeps the merge radius tied to local glyph scale. Expanding the
accumulated cluster box instead lets a long line of text chain together.
"""

import math
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from .exceptions import ConfigurationError, ValidationError
from .geometry import EPS, Extents, Primitive, compute_extents, union_extents
from .tolerance import (
    DEFAULT_TOLERANCE,
    MEAN_HEIGHT_SCALE,
    MEDIAN_HEIGHT_SCALE,
    estimate_tolerance,
    estimate_tolerance_mean,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cluster:
    primitives: Tuple[Primitive, ...]
    extents: Extents

    def __len__(self) -> int:
        return len(self.primitives)


def _check_tolerance(tolerance: float) -> None:
    if not math.isfinite(tolerance) or tolerance <= 0:
        raise ValidationError(f"tolerance must be positive, got {tolerance!r}", "tolerance")


def _make_cluster(primitives: Sequence[Primitive], extents: Sequence[Extents], members: List[int]) -> Cluster:
    return Cluster(
        primitives=tuple(primitives[i] for i in members),
        extents=union_extents(extents[i] for i in members),
    )


def cluster_primitives(primitives: Sequence[Primitive], tolerance: float) -> List[Cluster]:
    """Partition primitives by breadth-first expansion from each seed.

    The first remaining primitive seeds a cluster. Each dequeued primitive
    has its own extents expanded by ``tolerance``; every remaining primitive
    whose extents overlap that box joins the cluster and is enqueued.
    Primitives with invalid extents neither expand nor match, so they end
    up alone.

    Args:
        primitives: Primitives in input order
        tolerance: Positive expansion distance

    Returns:
        Clusters in emission order
    """
    _check_tolerance(tolerance)
    extents = [compute_extents(p) for p in primitives]
    remaining = list(range(len(primitives)))
    clusters: List[Cluster] = []

    while remaining:
        seed = remaining.pop(0)
        members = [seed]
        queue = deque([seed])
        while queue:
            current = queue.popleft()
            search_box = extents[current].expanded(tolerance)
            if not search_box.valid:
                continue
            kept = []
            for idx in remaining:
                if search_box.overlaps(extents[idx]):
                    members.append(idx)
                    queue.append(idx)
                else:
                    kept.append(idx)
            remaining = kept
        clusters.append(_make_cluster(primitives, extents, members))

    logger.debug(f"{len(primitives)} primitives -> {len(clusters)} clusters (tolerance={tolerance:.4g})")
    return clusters


def cluster_by_box(primitives: Sequence[Primitive], tolerance: float) -> List[Cluster]:
    """Partition primitives by growing the whole cluster box to a fixed point.

    Each pass collects every remaining primitive overlapping the accumulated
    cluster extents expanded by ``tolerance``, then adds them all. Passes
    repeat until one adds nothing.

    Every pair within ``tolerance`` still shares a cluster, but a primitive
    reachable only from a grown box joins or stays apart depending on
    which primitive seeded the cluster, so input order can matter.
    """
    _check_tolerance(tolerance)
    extents = [compute_extents(p) for p in primitives]
    remaining = list(range(len(primitives)))
    clusters: List[Cluster] = []

    while remaining:
        seed = remaining.pop(0)
        members = [seed]
        box = extents[seed] if extents[seed].valid else Extents.invalid()
        while remaining:
            search_box = box.expanded(tolerance)
            found = [idx for idx in remaining if search_box.overlaps(extents[idx])]
            if not found:
                break
            for idx in found:
                members.append(idx)
                box = box.union(extents[idx])
            taken = set(found)
            remaining = [idx for idx in remaining if idx not in taken]
        clusters.append(_make_cluster(primitives, extents, members))

    logger.debug(f"{len(primitives)} primitives -> {len(clusters)} box clusters (tolerance={tolerance:.4g})")
    return clusters


class ClusteringPolicy:
    """Pairs a tolerance estimator with a clustering pass."""

    name = ""

    def __init__(self, height_scale: float, default_tolerance: float = DEFAULT_TOLERANCE):
        self.height_scale = height_scale
        self.default_tolerance = default_tolerance

    def estimate_tolerance(self, primitives: Sequence[Primitive]) -> float:
        raise NotImplementedError

    def cluster(self, primitives: Sequence[Primitive], tolerance: float) -> List[Cluster]:
        raise NotImplementedError


class LocalSeedPolicy(ClusteringPolicy):
    """Median height x 0.4 with per-primitive frontier expansion."""

    name = "local"

    def __init__(self, height_scale: float = MEDIAN_HEIGHT_SCALE, default_tolerance: float = DEFAULT_TOLERANCE,
                 min_height: float = EPS):
        super().__init__(height_scale, default_tolerance)
        self.min_height = min_height

    def estimate_tolerance(self, primitives: Sequence[Primitive]) -> float:
        return estimate_tolerance(primitives, self.height_scale, self.default_tolerance, self.min_height)

    def cluster(self, primitives: Sequence[Primitive], tolerance: float) -> List[Cluster]:
        return cluster_primitives(primitives, tolerance)


class ClusterBoxPolicy(ClusteringPolicy):
    """Mean height x 1.5 with whole-cluster-box expansion.

    Over-merges on lines holding a few oversized primitives; kept for
    comparison with drawings recognized by the earlier behavior.
    """

    name = "cluster-box"

    def __init__(self, height_scale: float = MEAN_HEIGHT_SCALE, default_tolerance: float = DEFAULT_TOLERANCE):
        super().__init__(height_scale, default_tolerance)

    def estimate_tolerance(self, primitives: Sequence[Primitive]) -> float:
        return estimate_tolerance_mean(primitives, self.height_scale, self.default_tolerance)

    def cluster(self, primitives: Sequence[Primitive], tolerance: float) -> List[Cluster]:
        return cluster_by_box(primitives, tolerance)


POLICIES: Dict[str, Callable[..., ClusteringPolicy]] = {
    LocalSeedPolicy.name: LocalSeedPolicy,
    ClusterBoxPolicy.name: ClusterBoxPolicy,
}


def get_policy(name: str, **kwargs) -> ClusteringPolicy:
    """Instantiate a clustering policy by name.

    Raises:
        ConfigurationError: if the name is not registered
    """
    try:
        factory = POLICIES[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown clustering policy '{name}' (choose from {', '.join(sorted(POLICIES))})", "policy"
        ) from None
    return factory(**kwargs)

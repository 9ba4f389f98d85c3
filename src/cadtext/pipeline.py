"""
Recognition pipeline: primitives -> clusters -> glyph bitmaps -> text lines.

The run is synchronous. The classifier is checked before any cluster is
processed; a missing classifier resource aborts the run with no output.
Geometry and per-glyph classification failures only drop the affected
cluster.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from .assembler import Glyph, RecognizedLine, assemble_lines
from .classifier import Classifier
from .clustering import Cluster, ClusteringPolicy, get_policy
from .config import CLUSTERING_CONFIG, RASTER_CONFIG
from .exceptions import ClassificationError, RecognitionCancelledError
from .geometry import Primitive
from .output import lines_to_text
from .rasterizer import rendered_glyph
from .sources import EntitySource, PrimitiveCollection

logger = logging.getLogger(__name__)

GlyphObserver = Callable[[int, Cluster, Optional[np.ndarray], str], None]


@dataclass
class RecognitionResult:
    lines: List[RecognizedLine]
    tolerance: float
    cluster_count: int
    glyph_count: int
    skipped_clusters: int

    @property
    def text(self) -> str:
        return lines_to_text(self.lines)


class TextRecognizer:
    """Runs the recognition pipeline with one classifier and clustering policy.

    Args:
        classifier: Single-character classifier
        policy: Policy name or instance; defaults to CLUSTERING_CONFIG["policy"]
        clustering_config: Overrides for CLUSTERING_CONFIG
        raster_config: Overrides for RASTER_CONFIG
    """

    def __init__(
        self,
        classifier: Classifier,
        policy: Union[str, ClusteringPolicy, None] = None,
        clustering_config: Optional[Dict[str, Any]] = None,
        raster_config: Optional[Dict[str, Any]] = None,
    ):
        self.classifier = classifier
        self.clustering_config = {**CLUSTERING_CONFIG, **(clustering_config or {})}
        self.raster_config = {**RASTER_CONFIG, **(raster_config or {})}
        if policy is None:
            policy = self.clustering_config["policy"]
        if isinstance(policy, str):
            policy = self._make_policy(policy)
        self.policy = policy

    def _make_policy(self, name: str) -> ClusteringPolicy:
        kwargs = {"default_tolerance": self.clustering_config["default_tolerance"]}
        # height_scale and min_height apply to the median policy only
        if name == "local":
            kwargs["height_scale"] = self.clustering_config["height_scale"]
            kwargs["min_height"] = self.clustering_config["min_height"]
        return get_policy(name, **kwargs)

    def _raster_kwargs(self) -> Dict[str, Any]:
        keys = ("padding_ratio", "min_size", "stroke_divisor", "scale")
        return {k: self.raster_config[k] for k in keys if k in self.raster_config}

    def recognize(
        self,
        source: Union[EntitySource, Sequence[Primitive]],
        should_cancel: Optional[Callable[[], bool]] = None,
        on_glyph: Optional[GlyphObserver] = None,
    ) -> RecognitionResult:
        """Recognize text lines drawn by the source's primitives.

        Args:
            source: Entity source or a sequence of primitives
            should_cancel: Polled between clusters; True aborts the run
            on_glyph: Called per cluster with (index, cluster, bitmap, text)

        Raises:
            ClassifierUnavailableError: if the classifier cannot run at all
            RecognitionCancelledError: if should_cancel returned True
        """
        self.classifier.check_ready()

        if not hasattr(source, "get_drawable_primitives"):
            source = PrimitiveCollection(source)
        primitives = source.get_drawable_primitives()
        if not primitives:
            logger.info("No primitives to recognize")
            return RecognitionResult([], self.policy.default_tolerance, 0, 0, 0)

        tolerance = self.policy.estimate_tolerance(primitives)
        clusters = self.policy.cluster(primitives, tolerance)
        logger.info(
            f"{len(primitives)} primitives -> {len(clusters)} clusters "
            f"(policy={self.policy.name}, tolerance={tolerance:.4g})"
        )

        glyphs: List[Glyph] = []
        skipped = 0
        raster_kwargs = self._raster_kwargs()
        for index, cluster in enumerate(clusters):
            if should_cancel is not None and should_cancel():
                raise RecognitionCancelledError(index, len(clusters))
            text = ""
            with rendered_glyph(cluster, **raster_kwargs) as bitmap:
                if bitmap is not None:
                    try:
                        text = self.classifier.classify(bitmap)
                    except ClassificationError as e:
                        logger.warning(f"Cluster {index + 1}/{len(clusters)}: {e}")
                if on_glyph is not None:
                    on_glyph(index, cluster, bitmap, text)
            del bitmap
            text = text.strip()
            if not text:
                skipped += 1
                continue
            logger.debug(f"Cluster {index + 1}/{len(clusters)}: '{text}'")
            glyphs.append(Glyph(cluster.extents, text))

        lines = assemble_lines(glyphs, tolerance)
        logger.info(f"{len(glyphs)} glyphs -> {len(lines)} lines ({skipped} clusters skipped)")
        return RecognitionResult(lines, tolerance, len(clusters), len(glyphs), skipped)


def recognize_text(
    primitives: Union[EntitySource, Sequence[Primitive]],
    classifier: Classifier,
    policy: Union[str, ClusteringPolicy, None] = None,
) -> List[RecognizedLine]:
    """Recognize primitives with default settings and return the lines."""
    return TextRecognizer(classifier, policy=policy).recognize(primitives).lines

"""
Recognize text drawn as vector strokes in CAD drawings.
"""

from .assembler import Glyph, RecognizedLine, assemble_lines
from .classifier import Classifier, TesseractClassifier
from .clustering import Cluster, ClusterBoxPolicy, LocalSeedPolicy, cluster_by_box, cluster_primitives, get_policy
from .geometry import Arc, Circle, Extents, Point, Polyline, Segment, Spline, compute_extents
from .pipeline import RecognitionResult, TextRecognizer, recognize_text
from .rasterizer import rasterize, rendered_glyph
from .sources import DxfEntitySource, PdfEntitySource, PrimitiveCollection, open_source
from .tolerance import estimate_tolerance

__version__ = "0.1.0"

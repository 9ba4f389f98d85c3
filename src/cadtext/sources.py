"""
Entity sources: read-only snapshots of drawable primitives.

DXF drawings are read with ezdxf, vector PDF pages with PyMuPDF. Both hand
back primitives in the drawing's up-is-positive coordinate convention.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Union

import ezdxf
import fitz  # PyMuPDF

from .exceptions import EntitySourceError
from .geometry import Arc, Circle, Point, Polyline, Primitive, Segment, Spline

logger = logging.getLogger(__name__)

DXF_TYPES = ("LINE", "ARC", "CIRCLE", "LWPOLYLINE", "POLYLINE", "SPLINE")


class EntitySource(Protocol):
    def get_drawable_primitives(self) -> List[Primitive]:
        ...


class PrimitiveCollection:
    """In-memory source over an already extracted primitive list."""

    def __init__(self, primitives: Iterable[Primitive]):
        self._primitives = tuple(primitives)

    def get_drawable_primitives(self) -> List[Primitive]:
        return list(self._primitives)


def _pt(v) -> Point:
    return Point(float(v[0]), float(v[1]))


def _bspline_sampler(tool) -> Callable[[float], Point]:
    def sample(t: float) -> Point:
        return _pt(tool.point(t))
    return sample


def dxf_entity_to_primitive(entity) -> Optional[Primitive]:
    """Convert one ezdxf entity; None for types that carry no stroke geometry."""
    kind = entity.dxftype()
    if kind == "LINE":
        return Segment(_pt(entity.dxf.start), _pt(entity.dxf.end))
    if kind == "CIRCLE":
        return Circle(_pt(entity.dxf.center), float(entity.dxf.radius))
    if kind == "ARC":
        return Arc(_pt(entity.dxf.center), float(entity.dxf.radius),
                   float(entity.dxf.start_angle), float(entity.dxf.end_angle))
    if kind == "LWPOLYLINE":
        vertices = tuple(_pt(p) for p in entity.get_points("xy"))
        return Polyline(vertices, bool(entity.closed))
    if kind == "POLYLINE":
        if not (entity.is_2d_polyline or entity.is_3d_polyline):
            return None
        vertices = tuple(_pt(p) for p in entity.points())
        return Polyline(vertices, bool(entity.is_closed))
    if kind == "SPLINE":
        tool = entity.construction_tool()
        return Spline(_bspline_sampler(tool), 0.0, float(tool.max_t))
    return None


class DxfEntitySource:
    """Modelspace LINE/ARC/CIRCLE/(LW)POLYLINE/SPLINE entities of a DXF drawing.

    Polyline bulges are not interpreted; only the vertices are used.

    Args:
        drawing: DXF file path or an open ezdxf document
        layers: Only entities on these layers, when given
    """

    def __init__(self, drawing, layers: Optional[Sequence[str]] = None):
        self.name = str(drawing) if isinstance(drawing, (str, Path)) else "<document>"
        if isinstance(drawing, (str, Path)):
            drawing = self._read(Path(drawing))
        self.doc = drawing
        self.layers = {name.lower() for name in layers} if layers else None

    @staticmethod
    def _read(path: Path):
        try:
            logger.info(f"Reading DXF: {path}")
            return ezdxf.readfile(path.as_posix())
        except IOError as e:
            raise EntitySourceError(f"cannot read file: {e}", str(path)) from e
        except ezdxf.DXFStructureError as e:
            raise EntitySourceError(f"invalid or corrupt DXF: {e}", str(path)) from e

    def get_drawable_primitives(self) -> List[Primitive]:
        primitives: List[Primitive] = []
        skipped = 0
        for entity in self.doc.modelspace().query(" ".join(DXF_TYPES)):
            if self.layers is not None and entity.dxf.layer.lower() not in self.layers:
                continue
            try:
                primitive = dxf_entity_to_primitive(entity)
            except (ezdxf.DXFError, ValueError, ZeroDivisionError) as e:
                skipped += 1
                logger.warning(f"Skipping {entity.dxftype()} {entity.dxf.handle}: {e}")
                continue
            if primitive is not None:
                primitives.append(primitive)
        logger.info(f"{self.name}: {len(primitives)} primitives ({skipped} skipped)")
        return primitives


def _bezier_sampler(p0: Point, p1: Point, p2: Point, p3: Point) -> Callable[[float], Point]:
    def sample(t: float) -> Point:
        u = 1.0 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        return Point(a * p0.x + b * p1.x + c * p2.x + d * p3.x,
                     a * p0.y + b * p1.y + c * p2.y + d * p3.y)
    return sample


class PdfEntitySource:
    """Vector drawing paths of one PDF page.

    Lines become segments, cubic curves become splines over [0, 1], and
    rectangles and quads become closed polylines. PDF page space grows
    downwards, so Y is flipped against the page height.

    Args:
        document: PDF file path or an open PyMuPDF document
        page_index: Zero-based page number
    """

    def __init__(self, document, page_index: int = 0):
        self.name = str(document) if isinstance(document, (str, Path)) else "<document>"
        self.path = Path(document) if isinstance(document, (str, Path)) else None
        self.doc = None if self.path is not None else document
        self.page_index = page_index

    def _open(self):
        try:
            logger.info(f"Opening PDF: {self.path}")
            return fitz.open(self.path.as_posix())
        except (FileNotFoundError, PermissionError) as e:
            raise EntitySourceError(f"cannot open file: {e}", str(self.path)) from e
        except RuntimeError as e:
            raise EntitySourceError(f"invalid or corrupt PDF: {e}", str(self.path)) from e

    def get_drawable_primitives(self) -> List[Primitive]:
        doc = self.doc if self.doc is not None else self._open()
        try:
            if not 0 <= self.page_index < len(doc):
                raise EntitySourceError(f"page {self.page_index} out of range (0-{len(doc) - 1})", self.name)
            page = doc.load_page(self.page_index)
            height = page.rect.height
            primitives: List[Primitive] = []
            for path in page.get_drawings():
                for item in path.get("items", []):
                    primitive = self._item_to_primitive(item, height)
                    if primitive is not None:
                        primitives.append(primitive)
        finally:
            if self.doc is None:
                doc.close()
        logger.info(f"{self.name} page {self.page_index}: {len(primitives)} primitives")
        return primitives

    @staticmethod
    def _item_to_primitive(item, page_height: float) -> Optional[Primitive]:
        def flip(p) -> Point:
            return Point(float(p.x), page_height - float(p.y))

        op = item[0]
        if op == "l":
            return Segment(flip(item[1]), flip(item[2]))
        if op == "c":
            return Spline(_bezier_sampler(*(flip(p) for p in item[1:5])), 0.0, 1.0)
        if op == "re":
            r = item[1]
            corners = (fitz.Point(r.x0, r.y0), fitz.Point(r.x1, r.y0), fitz.Point(r.x1, r.y1), fitz.Point(r.x0, r.y1))
            return Polyline(tuple(flip(p) for p in corners), True)
        if op == "qu":
            q = item[1]
            return Polyline(tuple(flip(p) for p in (q.ul, q.ur, q.lr, q.ll)), True)
        logger.debug(f"Ignoring drawing item '{op}'")
        return None


def open_source(path: Union[str, Path], page_index: int = 0,
                layers: Optional[Sequence[str]] = None) -> EntitySource:
    """Pick an entity source by file suffix (.dxf or .pdf)."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".dxf":
        return DxfEntitySource(path, layers=layers)
    if suffix == ".pdf":
        if layers:
            logger.warning("Layer filter ignored for PDF input")
        return PdfEntitySource(path, page_index=page_index)
    raise EntitySourceError(f"unsupported file type '{suffix or path.name}'", str(path))

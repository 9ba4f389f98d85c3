"""
Output consumers for recognized lines: text, JSON, DXF and debug bitmaps.
"""

import io
import os
import re
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import cv2
import ezdxf

from .assembler import RecognizedLine
from .config import OUTPUT_CONFIG

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> None:
    """Create directory if it doesn't exist."""
    try:
        os.makedirs(path, exist_ok=True)
        logger.debug(f"Directory ensured: {path}")
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        raise


def lines_to_text(lines: Sequence[RecognizedLine]) -> str:
    return "\n".join(line.text for line in lines)


def export_lines_json(lines: Sequence[RecognizedLine], out_path: Path) -> None:
    data = [
        {"text": line.text, "x": line.anchor.x, "y": line.anchor.y, "height": line.height}
        for line in lines
    ]
    ensure_dir(Path(out_path).parent)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump({"lines": data}, f, ensure_ascii=False, indent=2)


def copy_drawing(doc):
    """Independent copy of an ezdxf document, made by a DXF text round trip."""
    stream = io.StringIO()
    doc.write(stream)
    stream.seek(0)
    return ezdxf.read(stream)


def write_dxf_text(
    lines: Sequence[RecognizedLine],
    out_path: Path,
    layer: str = OUTPUT_CONFIG["text_layer"],
    base=None,
) -> int:
    """Write one TEXT entity per recognized line.

    Args:
        lines: Recognized lines
        out_path: Target DXF file
        layer: Layer receiving the text entities (created when missing)
        base: Optional ezdxf document whose content is copied into the
            output; it is left unchanged. A new document is created when
            omitted

    Returns:
        Number of TEXT entities written
    """
    doc = copy_drawing(base) if base is not None else ezdxf.new(OUTPUT_CONFIG["dxf_version"])
    if layer not in doc.layers:
        doc.layers.add(layer)
    msp = doc.modelspace()
    for line in lines:
        msp.add_text(
            line.text,
            height=line.height,
            dxfattribs={"layer": layer, "insert": line.position},
        )
    ensure_dir(Path(out_path).parent)
    doc.saveas(Path(out_path).as_posix())
    logger.info(f"Wrote {len(lines)} text entities to {out_path}")
    return len(lines)


def _safe_label(text: str) -> str:
    label = re.sub(r"[^0-9A-Za-z]+", "_", text).strip("_")
    return label or "blank"


def save_glyph_bitmap(bitmap: Optional[np.ndarray], out_dir: Path, index: int, text: str) -> Optional[Path]:
    """Save a cluster bitmap as PNG for inspection; None when there is no bitmap."""
    if bitmap is None:
        return None
    ensure_dir(out_dir)
    path = Path(out_dir) / f"glyph_{index:04d}_{_safe_label(text)}.png"
    cv2.imwrite(path.as_posix(), bitmap)
    return path

import json
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import streamlit as st
from PIL import Image

from cadtext.classifier import TesseractClassifier
from cadtext.clustering import POLICIES
from cadtext.config import CLUSTERING_CONFIG, OCR_CONFIG, RASTER_CONFIG
from cadtext.exceptions import CADTextError, ClassifierUnavailableError
from cadtext.output import write_dxf_text
from cadtext.pipeline import RecognitionResult, TextRecognizer
from cadtext.sources import open_source


def lines_payload(result: RecognitionResult) -> Dict[str, Any]:
	return {
		"tolerance": result.tolerance,
		"lines": [
			{"text": ln.text, "x": ln.anchor.x, "y": ln.anchor.y, "height": ln.height}
			for ln in result.lines
		],
	}


def dxf_bytes(result: RecognitionResult) -> bytes:
	"""Recognized lines as a DXF file with TEXT entities."""
	with tempfile.TemporaryDirectory() as tmp:
		out = Path(tmp) / "recognized.dxf"
		write_dxf_text(result.lines, out)
		return out.read_bytes()


def run_recognition(data: bytes, suffix: str, page_index: int, policy: str,
					scale: float, language: str) -> Optional[tuple]:
	glyphs: List[tuple] = []

	def collect(index, cluster, bitmap, text):
		if bitmap is not None:
			glyphs.append((index, bitmap.copy(), text))

	with tempfile.TemporaryDirectory() as tmp:
		path = Path(tmp) / f"upload{suffix}"
		path.write_bytes(data)
		try:
			source = open_source(path, page_index=page_index)
			recognizer = TextRecognizer(
				TesseractClassifier(language=language),
				policy=policy,
				raster_config={"scale": scale},
			)
			result = recognizer.recognize(source, on_glyph=collect)
		except ClassifierUnavailableError as e:
			st.error(f"OCR engine unavailable: {e}")
			return None
		except CADTextError as e:
			st.error(f"Recognition failed: {e}")
			return None
	return result, glyphs


st.set_page_config(page_title="CAD Text Recognition", layout="wide")
st.title("CAD vector text recognition")

with st.sidebar:
	st.title("Settings")
	upload = st.file_uploader("Drawing", type=["dxf", "pdf"], help="DXF drawing or vector PDF")
	page_index = st.number_input("PDF page", min_value=0, value=0, step=1)
	policy_names = sorted(POLICIES)
	policy = st.selectbox("Clustering policy", policy_names,
						  index=policy_names.index(CLUSTERING_CONFIG["policy"]),
						  help="local: median height x 0.4, recommended")
	scale = st.slider("Pixels per drawing unit", 0.5, 20.0, float(RASTER_CONFIG["scale"]), step=0.5,
					  help="Raise for drawings with small text heights")
	language = st.text_input("Tesseract language", OCR_CONFIG["language"])
	show_glyphs = st.checkbox("Show glyph bitmaps", value=True)

if upload is None:
	st.info("Upload a DXF or PDF drawing to start.")
	st.stop()

if st.button("Recognize"):
	with st.spinner("Recognizing..."):
		outcome = run_recognition(upload.getvalue(), Path(upload.name).suffix.lower(),
								  int(page_index), policy, scale, language)
	if outcome is not None:
		st.session_state["outcome"] = outcome

if "outcome" in st.session_state:
	result, glyphs = st.session_state["outcome"]
	col1, col2, col3 = st.columns(3)
	col1.metric("Clusters", result.cluster_count)
	col2.metric("Glyphs", result.glyph_count)
	col3.metric("Tolerance", f"{result.tolerance:.3g}")

	if result.lines:
		st.success(f"{len(result.lines)} line(s) recognized")
		st.code(result.text)
	else:
		st.warning("Could not recognize any text")

	dl1, dl2 = st.columns(2)
	dl1.download_button("Download JSON", json.dumps(lines_payload(result), ensure_ascii=False, indent=2),
						file_name="recognized_lines.json", mime="application/json")
	dl2.download_button("Download DXF", dxf_bytes(result), file_name="recognized_text.dxf",
						mime="application/dxf")

	if show_glyphs and glyphs:
		with st.expander(f"Glyph bitmaps ({len(glyphs)})", expanded=False):
			cols = st.columns(8)
			for n, (index, bitmap, text) in enumerate(glyphs):
				cols[n % 8].image(Image.fromarray(np.asarray(bitmap)), caption=f"#{index}: {text or '-'}")

"""
Single-character classification of glyph bitmaps with Tesseract.
"""

import logging
from typing import Optional, Protocol

import numpy as np
import pytesseract
from PIL import Image

from .config import OCR_CONFIG
from .exceptions import ClassificationError, ClassifierUnavailableError
from .rasterizer import validate_bitmap

logger = logging.getLogger(__name__)


class Classifier(Protocol):
    """Maps one glyph bitmap to text; may return an empty string.

    ``check_ready`` raises ClassifierUnavailableError when the engine cannot
    run at all; the pipeline calls it once before any glyph. ``classify``
    must raise ClassificationError for any failure tied to one bitmap.
    The pipeline skips the glyph on ClassificationError and lets every
    other exception end the run.
    """

    def check_ready(self) -> None:
        ...

    def classify(self, bitmap: np.ndarray) -> str:
        ...


class TesseractClassifier:
    """Tesseract in single-character page segmentation mode.

    Args:
        language: Tesseract language code(s), e.g. "eng" or "eng+rus"
        char_whitelist: Characters Tesseract may emit; empty disables the filter
        page_seg_mode: Page segmentation mode (10 = single character)
        tesseract_cmd: Path to the tesseract binary when not on PATH
        timeout: Seconds per call, 0 for no limit
    """

    engine_name = "tesseract"

    def __init__(
        self,
        language: str = OCR_CONFIG["language"],
        char_whitelist: str = OCR_CONFIG["char_whitelist"],
        page_seg_mode: int = OCR_CONFIG["page_seg_mode"],
        tesseract_cmd: Optional[str] = OCR_CONFIG["tesseract_cmd"],
        timeout: int = OCR_CONFIG["timeout"],
    ):
        self.language = language
        self.char_whitelist = char_whitelist
        self.page_seg_mode = page_seg_mode
        self.timeout = timeout
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    @property
    def config(self) -> str:
        parts = [f"--psm {self.page_seg_mode}"]
        if self.char_whitelist:
            parts.append(f"-c tessedit_char_whitelist={self.char_whitelist}")
        return " ".join(parts)

    def check_ready(self) -> None:
        """Verify the tesseract binary and language data are installed.

        Raises:
            ClassifierUnavailableError: naming the missing binary or language data
        """
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError:
            raise ClassifierUnavailableError(
                "tesseract is not installed or not on PATH; install it or set OCR_CONFIG['tesseract_cmd']",
                "tesseract binary",
            ) from None
        try:
            installed = set(pytesseract.get_languages(config=""))
        except pytesseract.TesseractError as e:
            raise ClassifierUnavailableError(f"cannot list language data: {e}", "tessdata") from e

        missing = [lang for lang in self.language.split("+") if lang not in installed]
        if missing:
            names = ", ".join(f"{lang}.traineddata" for lang in missing)
            raise ClassifierUnavailableError(
                "language data not found; install it into the tessdata directory or set TESSDATA_PREFIX",
                names,
            )
        logger.info(f"Tesseract {version} ready (language: {self.language})")

    def classify(self, bitmap: np.ndarray) -> str:
        """Recognize the single character drawn in ``bitmap``.

        Raises:
            ClassificationError: if the bitmap is malformed or tesseract fails
        """
        if not validate_bitmap(bitmap):
            raise ClassificationError("malformed bitmap", self.engine_name)
        image = Image.fromarray(bitmap)
        try:
            text = pytesseract.image_to_string(
                image, lang=self.language, config=self.config, timeout=self.timeout
            )
        except (pytesseract.TesseractError, RuntimeError) as e:
            raise ClassificationError(str(e), self.engine_name) from e
        return text.strip()

import unittest
from unittest.mock import patch

import numpy as np
import pytesseract

from cadtext.classifier import TesseractClassifier
from cadtext.exceptions import ClassificationError, ClassifierUnavailableError


def blank_bitmap(size=20):
    bitmap = np.full((size, size), 255, dtype=np.uint8)
    bitmap[5:15, 9:11] = 0
    return bitmap


class CheckReadyTests(unittest.TestCase):
    @patch.object(pytesseract, "get_tesseract_version", side_effect=pytesseract.TesseractNotFoundError())
    def test_missing_binary(self, _version):
        with self.assertRaises(ClassifierUnavailableError) as ctx:
            TesseractClassifier().check_ready()
        self.assertEqual(ctx.exception.resource, "tesseract binary")

    @patch.object(pytesseract, "get_languages", return_value=["osd"])
    @patch.object(pytesseract, "get_tesseract_version", return_value="5.3.0")
    def test_missing_language_data(self, _version, _languages):
        with self.assertRaises(ClassifierUnavailableError) as ctx:
            TesseractClassifier(language="eng").check_ready()
        self.assertEqual(ctx.exception.resource, "eng.traineddata")
        self.assertIn("eng.traineddata", str(ctx.exception))

    @patch.object(pytesseract, "get_languages", return_value=["eng"])
    @patch.object(pytesseract, "get_tesseract_version", return_value="5.3.0")
    def test_every_combined_language_is_checked(self, _version, _languages):
        with self.assertRaises(ClassifierUnavailableError) as ctx:
            TesseractClassifier(language="eng+rus").check_ready()
        self.assertEqual(ctx.exception.resource, "rus.traineddata")

    @patch.object(pytesseract, "get_languages", side_effect=pytesseract.TesseractError(1, "no tessdata"))
    @patch.object(pytesseract, "get_tesseract_version", return_value="5.3.0")
    def test_unreadable_tessdata(self, _version, _languages):
        with self.assertRaises(ClassifierUnavailableError) as ctx:
            TesseractClassifier().check_ready()
        self.assertEqual(ctx.exception.resource, "tessdata")

    @patch.object(pytesseract, "get_languages", return_value=["eng", "osd"])
    @patch.object(pytesseract, "get_tesseract_version", return_value="5.3.0")
    def test_ready(self, _version, _languages):
        TesseractClassifier(language="eng").check_ready()


class ClassifyTests(unittest.TestCase):
    @patch.object(pytesseract, "image_to_string", return_value=" I\n\x0c")
    def test_returns_stripped_text(self, image_to_string):
        classifier = TesseractClassifier(language="eng", char_whitelist="0123456789I")
        self.assertEqual(classifier.classify(blank_bitmap()), "I")
        kwargs = image_to_string.call_args.kwargs
        self.assertEqual(kwargs["lang"], "eng")
        self.assertIn("--psm 10", kwargs["config"])
        self.assertIn("tessedit_char_whitelist=0123456789I", kwargs["config"])

    @patch.object(pytesseract, "image_to_string", return_value="")
    def test_empty_answer(self, _image_to_string):
        self.assertEqual(TesseractClassifier().classify(blank_bitmap()), "")

    @patch.object(pytesseract, "image_to_string", side_effect=pytesseract.TesseractError(1, "crash"))
    def test_engine_failure(self, _image_to_string):
        with self.assertRaises(ClassificationError) as ctx:
            TesseractClassifier().classify(blank_bitmap())
        self.assertEqual(ctx.exception.engine, "tesseract")

    @patch.object(pytesseract, "image_to_string", side_effect=RuntimeError("Tesseract process timeout"))
    def test_timeout(self, _image_to_string):
        with self.assertRaises(ClassificationError):
            TesseractClassifier(timeout=1).classify(blank_bitmap())

    @patch.object(pytesseract, "image_to_string")
    def test_malformed_bitmap_never_reaches_engine(self, image_to_string):
        with self.assertRaises(ClassificationError):
            TesseractClassifier().classify(np.zeros((4, 4, 3), dtype=np.uint8))
        image_to_string.assert_not_called()

    def test_config_without_whitelist(self):
        self.assertEqual(TesseractClassifier(char_whitelist="").config, "--psm 10")


if __name__ == "__main__":
    unittest.main()

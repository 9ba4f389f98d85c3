import os
import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from cadtext import config
from cadtext.config import _DefaultConfig, load_config
from cadtext.config_validator import ConfigValidator, print_validation_report


class LoadConfigTests(unittest.TestCase):
    def test_defaults_without_user_module(self):
        merged = load_config(SimpleNamespace())
        self.assertEqual(merged["CLUSTERING_CONFIG"], _DefaultConfig.CLUSTERING_CONFIG)
        self.assertEqual(merged["RASTER_CONFIG"]["min_size"], 20)
        self.assertEqual(merged["OCR_CONFIG"]["page_seg_mode"], 10)

    def test_partial_override_keeps_other_keys(self):
        user = SimpleNamespace(RASTER_CONFIG={"scale": 4.0}, OCR_CONFIG={"language": "eng+rus"})
        merged = load_config(user)
        self.assertEqual(merged["RASTER_CONFIG"]["scale"], 4.0)
        self.assertEqual(merged["RASTER_CONFIG"]["padding_ratio"], 0.2)
        self.assertEqual(merged["OCR_CONFIG"]["language"], "eng+rus")
        self.assertEqual(merged["OCR_CONFIG"]["page_seg_mode"], 10)

    def test_defaults_are_not_mutated(self):
        load_config(SimpleNamespace(CLUSTERING_CONFIG={"policy": "cluster-box"}))
        self.assertEqual(_DefaultConfig.CLUSTERING_CONFIG["policy"], "local")

    def test_user_config_file_from_environment(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "my_config.py"
            path.write_text('CLUSTERING_CONFIG = {"height_scale": 0.5}\n', encoding="utf-8")
            with patch.dict(os.environ, {config.USER_CONFIG_ENV: str(path)}):
                merged = load_config()
        self.assertEqual(merged["CLUSTERING_CONFIG"]["height_scale"], 0.5)
        self.assertEqual(merged["CLUSTERING_CONFIG"]["policy"], "local")

    def test_missing_user_config_file_falls_back(self):
        with patch.dict(os.environ, {config.USER_CONFIG_ENV: "/nonexistent/cadtext_config.py"}):
            merged = load_config()
        self.assertEqual(merged["CLUSTERING_CONFIG"]["height_scale"], 0.4)


class ConfigValidatorTests(unittest.TestCase):
    def test_defaults_are_valid(self):
        self.assertEqual(ConfigValidator.validate_clustering_config(_DefaultConfig.CLUSTERING_CONFIG), [])
        self.assertEqual(ConfigValidator.validate_raster_config(_DefaultConfig.RASTER_CONFIG), [])
        self.assertEqual(ConfigValidator.validate_ocr_config(_DefaultConfig.OCR_CONFIG), [])

    def test_bad_clustering_values(self):
        cfg = dict(_DefaultConfig.CLUSTERING_CONFIG, policy="nearest", height_scale=0, default_tolerance=-1)
        errors = ConfigValidator.validate_clustering_config(cfg)
        self.assertEqual(len(errors), 3)
        self.assertIn("nearest", errors[0])

    def test_bad_raster_values(self):
        cfg = dict(_DefaultConfig.RASTER_CONFIG, min_size=0, scale=0)
        self.assertEqual(len(ConfigValidator.validate_raster_config(cfg)), 2)

    def test_bad_ocr_values(self):
        cfg = dict(_DefaultConfig.OCR_CONFIG, language=" ", page_seg_mode=14, char_whitelist="A B")
        self.assertEqual(len(ConfigValidator.validate_ocr_config(cfg)), 3)

    @patch("shutil.which", return_value=None)
    def test_missing_tesseract_is_a_warning(self, _which):
        warnings = ConfigValidator.validate_system_resources()
        self.assertTrue(any("Tesseract binary not found" in w for w in warnings))

    def test_validate_all_collects_dependency_errors(self):
        with patch.object(ConfigValidator, "validate_dependencies", return_value=(["missing ezdxf"], [])):
            is_valid, errors, _ = ConfigValidator.validate_all()
        self.assertFalse(is_valid)
        self.assertIn("missing ezdxf", errors)

    @patch("builtins.print")
    def test_report_lists_errors(self, mock_print):
        print_validation_report(False, ["bad policy"], ["low memory"])
        printed = "\n".join(str(call.args[0]) for call in mock_print.call_args_list if call.args)
        self.assertIn("1. bad policy", printed)
        self.assertIn("1. low memory", printed)


if __name__ == "__main__":
    unittest.main()

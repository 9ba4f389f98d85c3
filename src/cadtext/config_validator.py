"""
Configuration validation utilities for CAD vector text recognition.
"""

import shutil
import logging
from typing import Any, Dict, List, Optional, Tuple

from . import config as _config
from .clustering import POLICIES

logger = logging.getLogger(__name__)


class ConfigValidator:
    """Validates configuration settings and system requirements."""

    @staticmethod
    def validate_clustering_config(cfg: Optional[Dict[str, Any]] = None) -> List[str]:
        """Validate clustering configuration.

        Returns:
            List of validation errors (empty if all valid)
        """
        errors = []
        cfg = cfg if cfg is not None else _config.CLUSTERING_CONFIG

        if cfg["policy"] not in POLICIES:
            errors.append(f"Unknown clustering policy: {cfg['policy']} ({', '.join(sorted(POLICIES))})")

        if not (0 < cfg["height_scale"] <= 10):
            errors.append(f"Height scale out of range: {cfg['height_scale']} (0-10)")

        if cfg["default_tolerance"] <= 0:
            errors.append(f"Default tolerance must be positive: {cfg['default_tolerance']}")

        if cfg["min_height"] < 0:
            errors.append(f"Minimum height must not be negative: {cfg['min_height']}")

        return errors

    @staticmethod
    def validate_raster_config(cfg: Optional[Dict[str, Any]] = None) -> List[str]:
        """Validate rasterization configuration.

        Returns:
            List of validation errors
        """
        errors = []
        cfg = cfg if cfg is not None else _config.RASTER_CONFIG

        if not (0 <= cfg["padding_ratio"] <= 2):
            errors.append(f"Padding ratio out of range: {cfg['padding_ratio']} (0-2)")

        if not (1 <= cfg["min_size"] <= 4096):
            errors.append(f"Minimum bitmap size out of range: {cfg['min_size']} (1-4096)")

        if cfg["stroke_divisor"] <= 0:
            errors.append(f"Stroke divisor must be positive: {cfg['stroke_divisor']}")

        if cfg["scale"] <= 0:
            errors.append(f"Raster scale must be positive: {cfg['scale']}")

        return errors

    @staticmethod
    def validate_ocr_config(cfg: Optional[Dict[str, Any]] = None) -> List[str]:
        """Validate OCR configuration.

        Returns:
            List of validation errors
        """
        errors = []
        cfg = cfg if cfg is not None else _config.OCR_CONFIG

        if not isinstance(cfg["language"], str) or not cfg["language"].strip():
            errors.append(f"OCR language must be a non-empty string: {cfg['language']!r}")

        if not (0 <= cfg["page_seg_mode"] <= 13):
            errors.append(f"Page segmentation mode out of range: {cfg['page_seg_mode']} (0-13)")

        if any(ch.isspace() for ch in cfg["char_whitelist"]):
            errors.append("Character whitelist must not contain whitespace")

        if cfg["timeout"] < 0:
            errors.append(f"OCR timeout must not be negative: {cfg['timeout']}")

        return errors

    @staticmethod
    def validate_dependencies() -> Tuple[List[str], List[str]]:
        """Validate required and optional dependencies.

        Returns:
            Tuple of (errors, warnings)
        """
        errors = []
        warnings = []

        required_packages = [
            ("numpy", "NumPy"),
            ("cv2", "OpenCV"),
            ("ezdxf", "ezdxf"),
            ("fitz", "PyMuPDF"),
            ("PIL", "Pillow"),
            ("pytesseract", "pytesseract"),
        ]

        for module_name, package_name in required_packages:
            try:
                __import__(module_name)
            except ImportError:
                errors.append(f"Required package not installed: {package_name} ({module_name})")

        optional_packages = [
            ("streamlit", "Streamlit (viewer)"),
            ("psutil", "psutil (resource checks)"),
        ]

        for module_name, package_name in optional_packages:
            try:
                __import__(module_name)
            except ImportError:
                warnings.append(f"Optional package not installed: {package_name}")

        return errors, warnings

    @staticmethod
    def validate_system_resources() -> List[str]:
        """Validate system resources.

        Returns:
            List of validation warnings
        """
        warnings = []

        try:
            import psutil

            available_gb = psutil.virtual_memory().available / (1024 * 1024 * 1024)
            if available_gb < 1:
                warnings.append(f"Low available memory: {available_gb:.1f}GB")

        except ImportError:
            warnings.append("psutil not installed; memory check skipped")

        tesseract_cmd = _config.OCR_CONFIG.get("tesseract_cmd") or "tesseract"
        if shutil.which(tesseract_cmd) is None:
            warnings.append(f"Tesseract binary not found: {tesseract_cmd}")

        return warnings

    @classmethod
    def validate_all(cls) -> Tuple[bool, List[str], List[str]]:
        """Run all validation checks.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        errors = []
        warnings = []

        errors.extend(cls.validate_clustering_config())
        errors.extend(cls.validate_raster_config())
        errors.extend(cls.validate_ocr_config())

        dep_errors, dep_warnings = cls.validate_dependencies()
        errors.extend(dep_errors)
        warnings.extend(dep_warnings)

        warnings.extend(cls.validate_system_resources())

        is_valid = len(errors) == 0

        if is_valid:
            logger.info("Configuration validation passed")
        else:
            logger.error(f"Configuration validation failed: {len(errors)} error(s)")

        return is_valid, errors, warnings


def print_validation_report(is_valid: bool, errors: List[str], warnings: List[str]) -> None:
    """Print validation report.

    Args:
        is_valid: Whether validation passed
        errors: List of errors
        warnings: List of warnings
    """
    print("\n" + "=" * 50)
    print("CAD vector text recognition - configuration report")
    print("=" * 50)

    if is_valid:
        print("All checks passed.")
    else:
        print("Validation failed - fix the following errors:")

        for i, error in enumerate(errors, 1):
            print(f"  {i}. {error}")

    if warnings:
        print("\nWarnings:")
        for i, warning in enumerate(warnings, 1):
            print(f"  {i}. {warning}")

    print("=" * 50)

"""
Configuration for CAD vector text recognition.

Defaults live here. A user ``cadtext_config.py`` (path taken from the
``CADTEXT_CONFIG`` environment variable, otherwise the current directory)
may override any key of any section.
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

USER_CONFIG_ENV = "CADTEXT_CONFIG"
USER_CONFIG_NAME = "cadtext_config.py"

SECTIONS = ("CLUSTERING_CONFIG", "RASTER_CONFIG", "OCR_CONFIG", "OUTPUT_CONFIG", "LOGGING_CONFIG")


class _DefaultConfig:
    CLUSTERING_CONFIG = {
        "policy": "local",
        "height_scale": 0.4,
        "default_tolerance": 1.0,
        "min_height": 1e-6,
    }
    RASTER_CONFIG = {
        "padding_ratio": 0.2,
        "min_size": 20,
        "stroke_divisor": 50,
        "scale": 1.0,
    }
    OCR_CONFIG = {
        "language": "eng",
        "page_seg_mode": 10,
        "char_whitelist": "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz.,-+/°:;()[]{}<>_",
        "tesseract_cmd": None,
        "timeout": 0,
    }
    OUTPUT_CONFIG = {
        "text_layer": "RECOGNIZED_TEXT",
        "dxf_version": "R2010",
    }
    LOGGING_CONFIG = {"level": "INFO", "format": "%(asctime)s %(levelname)s %(name)s %(message)s"}


def _user_config_path() -> Optional[Path]:
    env_path = os.environ.get(USER_CONFIG_ENV)
    if env_path:
        return Path(env_path)
    local = Path.cwd() / USER_CONFIG_NAME
    if local.exists():
        return local
    return None


def _load_user_config():
    """Load the user config module if one is present; otherwise None."""
    import importlib.util
    cfg_path = _user_config_path()
    if cfg_path is None:
        return None
    if not cfg_path.exists():
        logger.warning(f"User config not found: {cfg_path}")
        return None
    spec = importlib.util.spec_from_file_location("cadtext_user_config", str(cfg_path))
    if spec and spec.loader:  # type: ignore
        mod = importlib.util.module_from_spec(spec)  # type: ignore
        spec.loader.exec_module(mod)  # type: ignore
        logger.debug(f"Loaded user config: {cfg_path}")
        return mod
    return None


def load_config(user_module: Any = None) -> Dict[str, Dict[str, Any]]:
    """Merge the defaults with the user config, section by section.

    Args:
        user_module: Object carrying override sections as attributes. When
            omitted the user config file is looked up and loaded.

    Returns:
        Dictionary of section name to settings dictionary
    """
    if user_module is None:
        user_module = _load_user_config()
    merged: Dict[str, Dict[str, Any]] = {}
    for section in SECTIONS:
        values = dict(getattr(_DefaultConfig, section))
        overrides = getattr(user_module, section, None) if user_module is not None else None
        if isinstance(overrides, dict):
            values.update(overrides)
        merged[section] = values
    return merged


_config = load_config()

CLUSTERING_CONFIG = _config["CLUSTERING_CONFIG"]
RASTER_CONFIG = _config["RASTER_CONFIG"]
OCR_CONFIG = _config["OCR_CONFIG"]
OUTPUT_CONFIG = _config["OUTPUT_CONFIG"]
LOGGING_CONFIG = _config["LOGGING_CONFIG"]

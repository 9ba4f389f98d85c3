"""
Custom exceptions for CAD vector text recognition.
"""

from typing import Optional


class CADTextError(Exception):
    """Base exception for vector text recognition errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class EntitySourceError(CADTextError):
    """Exception raised when drawing entities cannot be read."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        full_message = f"Entity source error: {message}"
        if source:
            full_message += f" (source: {source})"
        super().__init__(full_message, "SOURCE_ERROR")


class GeometryError(CADTextError):
    """Exception raised for malformed primitive geometry."""

    def __init__(self, message: str, primitive: Optional[str] = None):
        self.primitive = primitive
        full_message = f"Geometry error: {message}"
        if primitive:
            full_message += f" (primitive: {primitive})"
        super().__init__(full_message, "GEOMETRY_ERROR")


class RasterizationError(CADTextError):
    """Exception raised when a cluster cannot be drawn."""

    def __init__(self, message: str, primitive: Optional[str] = None):
        self.primitive = primitive
        full_message = f"Rasterization error: {message}"
        if primitive:
            full_message += f" (primitive: {primitive})"
        super().__init__(full_message, "RASTER_ERROR")


class ClassificationError(CADTextError):
    """Exception raised when a single glyph bitmap cannot be classified."""

    def __init__(self, message: str, engine: Optional[str] = None):
        self.engine = engine
        full_message = f"Classification error: {message}"
        if engine:
            full_message += f" (engine: {engine})"
        super().__init__(full_message, "CLASSIFICATION_ERROR")


class ClassifierUnavailableError(CADTextError):
    """Exception raised when the classifier cannot run at all."""

    def __init__(self, message: str, resource: Optional[str] = None):
        self.resource = resource
        full_message = f"Classifier unavailable: {message}"
        if resource:
            full_message += f" (missing: {resource})"
        super().__init__(full_message, "CLASSIFIER_UNAVAILABLE")


class RecognitionCancelledError(CADTextError):
    """Exception raised when a caller cancels a recognition run."""

    def __init__(self, processed: int, total: int):
        self.processed = processed
        self.total = total
        super().__init__(
            f"Recognition cancelled after {processed} of {total} clusters", "CANCELLED"
        )


class ConfigurationError(CADTextError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        full_message = f"Configuration error: {message}"
        if config_key:
            full_message += f" (key: {config_key})"
        super().__init__(full_message, "CONFIG_ERROR")


class ValidationError(CADTextError):
    """Exception raised for validation errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        full_message = f"Validation error: {message}"
        if field:
            full_message += f" (field: {field})"
        super().__init__(full_message, "VALIDATION_ERROR")

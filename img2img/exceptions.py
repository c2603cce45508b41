"""Exceptions raised by the tiled rendering engine."""

from typing import Any, Dict, Optional


class Img2ImgError(Exception):
    """Base exception for img2img."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(Img2ImgError):
    """Raised when the render configuration or executor shapes are unusable."""


class PreconditionError(Img2ImgError):
    """Raised when a tile or batch does not match the executor's fixed shape."""


class BackendError(Img2ImgError):
    """Raised when the executor call fails or returns an unexpected result."""


class CaptureError(Img2ImgError):
    """Raised when the source image is empty or cannot be read."""

"""Tiled image-to-image rendering through fixed-size executors."""

from img2img.config import ChannelOrder, IOConfig, OutputFormat, RenderConfig
from img2img.exceptions import (
    BackendError,
    CaptureError,
    ConfigurationError,
    Img2ImgError,
    PreconditionError,
)
from img2img.processing import (
    Img2ImgRenderer,
    InterpolationExecutor,
    ModuleExecutor,
    init_executor,
)

__version__ = "0.1.0"

__all__ = [
    "ChannelOrder",
    "IOConfig",
    "OutputFormat",
    "RenderConfig",
    "BackendError",
    "CaptureError",
    "ConfigurationError",
    "Img2ImgError",
    "PreconditionError",
    "Img2ImgRenderer",
    "InterpolationExecutor",
    "ModuleExecutor",
    "init_executor",
]

from .render import (
    ChannelOrder,
    OutputFormat,
    RenderConfig,
    IOConfig,
    SUPPORTED_SCALES,
    SUPPORTED_OVERLAPS,
)

__all__ = [
    "ChannelOrder",
    "OutputFormat",
    "RenderConfig",
    "IOConfig",
    "SUPPORTED_SCALES",
    "SUPPORTED_OVERLAPS",
]

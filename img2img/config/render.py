"""Configuration dataclasses for tiled rendering."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from img2img.exceptions import ConfigurationError

SUPPORTED_SCALES = (1, 2, 4)
SUPPORTED_OVERLAPS = (0.0, 1.0 / 32.0, 1.0 / 16.0, 1.0 / 8.0)
MAX_OVERLAP = 1.0 / 8.0


class ChannelOrder(Enum):
    """Channel order of the images handed to the renderer."""

    RGB = "rgb"
    BGR = "bgr"


class OutputFormat(Enum):
    """Output file format for rendered images."""

    PNG = "png"
    JPEG = "jpeg"


@dataclass(frozen=True)
class RenderConfig:
    """Configuration for one render session.

    Tile size and channel count are fixed by the executor; ``tile_size`` is
    (width, height), ``scaling`` and ``overlap`` are (x, y).
    """

    scaling: Tuple[int, int] = (2, 2)
    overlap: Tuple[float, float] = (1.0 / 16.0, 1.0 / 16.0)
    batch_size: int = 1
    channels: int = 3
    tile_size: Tuple[int, int] = (256, 256)
    use_augmentation: bool = False
    channel_order: ChannelOrder = ChannelOrder.RGB

    def __post_init__(self):
        for scale in self.scaling:
            if scale not in SUPPORTED_SCALES:
                raise ConfigurationError(
                    f"Scale factor must be one of {SUPPORTED_SCALES}, got {scale}"
                )
        for overlap in self.overlap:
            if not (0.0 <= overlap <= MAX_OVERLAP):
                raise ConfigurationError(
                    f"Overlap must be within [0, {MAX_OVERLAP}], got {overlap}"
                )
        if self.batch_size <= 0:
            raise ConfigurationError(f"Batch size must be positive, got {self.batch_size}")
        if self.channels <= 0:
            raise ConfigurationError(f"Channel count must be positive, got {self.channels}")
        if min(self.tile_size) <= 0:
            raise ConfigurationError(f"Tile size must be positive, got {self.tile_size}")
        if self.use_augmentation and self.tile_size[0] != self.tile_size[1]:
            raise ConfigurationError(
                f"Augmentation requires square tiles, got {self.tile_size[0]}x{self.tile_size[1]}"
            )

    @property
    def steps_per_tile(self) -> int:
        return 8 if self.use_augmentation else 1

    @property
    def overlapping(self) -> bool:
        return self.overlap[0] != 0 or self.overlap[1] != 0


@dataclass
class IOConfig:
    """Configuration for input/output."""

    input_path: str = "inputs"
    output_dir: str = "outputs"
    recursive: bool = False
    output_format: OutputFormat = OutputFormat.PNG

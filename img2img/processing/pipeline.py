"""Executors: fixed-shape batch transforms the renderer feeds tiles to."""

import logging
import os
from typing import Protocol, Tuple, Union

import torch
import torch.nn.functional as F

from img2img.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TileExecutor(Protocol):
    """Black-box transform of a fixed batch of fixed-size tiles.

    ``input_shape`` and ``output_shape`` are (C, H, W) of a single tile;
    ``infer`` maps (batch_size, *input_shape) to (batch_size, *output_shape).
    """

    batch_size: int
    input_shape: Tuple[int, int, int]
    output_shape: Tuple[int, int, int]

    def infer(self, batch: torch.Tensor) -> torch.Tensor:
        ...


class InterpolationExecutor:
    """Model-free executor that resizes tiles with ``F.interpolate``.

    ``border`` output pixels are cropped from every side, like models whose
    valid output is smaller than the scaled input tile.
    """

    def __init__(
        self,
        tile_size: Tuple[int, int],
        scale: int = 2,
        batch_size: int = 1,
        channels: int = 3,
        mode: str = "bicubic",
        border: int = 0,
    ):
        width, height = tile_size
        out_h = height * scale - 2 * border
        out_w = width * scale - 2 * border
        if out_h <= 0 or out_w <= 0:
            raise ConfigurationError(f"Border {border} leaves no output for tile {width}x{height}")

        self.batch_size = batch_size
        self.scale = scale
        self.mode = mode
        self.border = border
        self.input_shape = (channels, height, width)
        self.output_shape = (channels, out_h, out_w)

    def infer(self, batch: torch.Tensor) -> torch.Tensor:
        _, height, width = self.input_shape
        size = (height * self.scale, width * self.scale)

        if self.mode in ("bilinear", "bicubic"):
            output = F.interpolate(batch, size=size, mode=self.mode, align_corners=False)
        else:
            output = F.interpolate(batch, size=size, mode=self.mode)

        if self.border > 0:
            output = output[:, :, self.border : -self.border, self.border : -self.border]

        return output.clamp(0.0, 1.0)


class ModuleExecutor:
    """Runs a ``torch.nn.Module`` on fixed-size tile batches.

    The output tile shape is probed once with a zero batch.
    """

    def __init__(
        self,
        module: torch.nn.Module,
        tile_size: Tuple[int, int],
        batch_size: int = 1,
        channels: int = 3,
        device: Union[str, torch.device] = "cpu",
        dtype: torch.dtype = torch.float32,
    ):
        width, height = tile_size
        self.device = torch.device(device)
        self.dtype = dtype
        self.batch_size = batch_size
        self.input_shape = (channels, height, width)
        self.module = module.to(self.device, dtype=dtype).eval()
        self.output_shape = self._probe_output_shape()

    def _probe_output_shape(self) -> Tuple[int, int, int]:
        dummy = torch.zeros((self.batch_size, *self.input_shape), device=self.device, dtype=self.dtype)
        with torch.no_grad():
            output = self.module(dummy)

        if output.ndim != 4 or output.shape[0] != self.batch_size:
            raise ConfigurationError(
                f"Model output has shape {tuple(output.shape)}, "
                f"expected a batch of {self.batch_size} (C, H, W) tiles"
            )
        logger.debug(f"Probed model output tile shape {tuple(output.shape[1:])}")
        return tuple(output.shape[1:])

    def infer(self, batch: torch.Tensor) -> torch.Tensor:
        with torch.no_grad():
            output = self.module(batch.to(self.device, dtype=self.dtype))
        return output.to(torch.float32)


def init_executor(
    model_path: str,
    tile_size: Tuple[int, int],
    batch_size: int,
    device: Union[str, torch.device],
    dtype: torch.dtype = torch.float32,
    channels: int = 3,
) -> ModuleExecutor:
    """Load a TorchScript model as a tile executor.

    Args:
        model_path (str): Path to a TorchScript model file
        tile_size (Tuple[int, int]): Fixed input tile (width, height)
        batch_size (int): Fixed batch size
        device: Device to load the model on
        dtype (torch.dtype): Data type for model weights
        channels (int): Channels per tile

    Returns:
        ModuleExecutor: Executor wrapping the loaded model

    Raises:
        ConfigurationError: If the model file does not exist
    """
    if not os.path.exists(model_path):
        raise ConfigurationError(
            f'Model file does not exist!\nPlease save the TorchScript model to "{model_path}"'
        )

    logger.info(f"Loading model {model_path} on {device}")
    module = torch.jit.load(model_path, map_location=device)

    return ModuleExecutor(
        module,
        tile_size=tile_size,
        batch_size=batch_size,
        channels=channels,
        device=device,
        dtype=dtype,
    )

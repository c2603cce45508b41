"""Tensor manipulation utilities for tiled rendering."""

import torch
import torch.nn.functional as F
from einops import rearrange

from img2img.config.render import ChannelOrder
from img2img.exceptions import PreconditionError
from .tiling import TileRect


def pad_roi(image: torch.Tensor, rect: TileRect) -> torch.Tensor:
    """Extract a tile from an image, replicating border pixels outside of it.

    Args:
        image (torch.Tensor): Source image of shape (C, H, W)
        rect (TileRect): Requested region, may extend past any edge

    Returns:
        torch.Tensor: Tile of shape (C, rect.height, rect.width)

    Raises:
        PreconditionError: If the rect does not intersect the image
    """
    _, height, width = image.shape

    x1, y1 = max(rect.x, 0), max(rect.y, 0)
    x2, y2 = min(rect.right, width), min(rect.bottom, height)

    if x2 <= x1 or y2 <= y1:
        raise PreconditionError(
            f"Tile {rect} does not intersect the {width}x{height} image",
            details={"rect": rect, "image_size": (width, height)},
        )

    roi = image[:, y1:y2, x1:x2]

    pad_left = x1 - rect.x
    pad_right = rect.right - x2
    pad_top = y1 - rect.y
    pad_bottom = rect.bottom - y2

    if pad_left == pad_right == pad_top == pad_bottom == 0:
        return roi

    padded = F.pad(
        rearrange(roi, "C H W -> 1 C H W"),
        [pad_left, pad_right, pad_top, pad_bottom],
        mode="replicate",
    )
    return rearrange(padded, "1 C H W -> C H W")


def prepare_image(
    image: torch.Tensor, device: torch.device, channel_order: ChannelOrder = ChannelOrder.RGB
) -> torch.Tensor:
    """Convert a frame to the normalized layout used by the engine.

    Args:
        image (torch.Tensor): Frame of shape (H, W, C), uint8 or float in [0, 1]
        device (torch.device): Device to render on
        channel_order (ChannelOrder): Channel order of the frame

    Returns:
        torch.Tensor: Float32 RGB tensor of shape (C, H, W) with values in [0, 1]
    """
    frame = rearrange(image.to(device), "H W C -> C H W")

    if frame.dtype == torch.uint8:
        frame = frame.to(torch.float32).div(255.0)
    else:
        frame = frame.to(torch.float32)

    if channel_order == ChannelOrder.BGR:
        frame = frame.flip(0)

    return frame.contiguous()


def finalize_image(
    canvas: torch.Tensor, dtype: torch.dtype, channel_order: ChannelOrder = ChannelOrder.RGB
) -> torch.Tensor:
    """Convert a rendered canvas back to the input's pixel encoding.

    Args:
        canvas (torch.Tensor): Float canvas of shape (C, H, W)
        dtype (torch.dtype): Pixel dtype of the input frame
        channel_order (ChannelOrder): Channel order of the input frame

    Returns:
        torch.Tensor: Frame of shape (H, W, C)
    """
    if channel_order == ChannelOrder.BGR:
        canvas = canvas.flip(0)

    if dtype == torch.uint8:
        output = canvas.clamp(0.0, 1.0).mul(255).round().to(torch.uint8)
    else:
        output = canvas.clamp(0.0, 1.0).to(dtype)

    return rearrange(output, "C H W -> H W C").contiguous()

"""Tiling utilities for spatial tile planning and seam blending."""

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Tuple, Union

import torch


@dataclass(frozen=True)
class TileRect:
    """Axis-aligned rectangle in pixels. May extend past the image bounds."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass
class Tiling:
    """Planned tile grid for one image."""

    tile_count: int
    input_rects: List[TileRect]
    output_rects: List[TileRect]


class TileWeights(NamedTuple):
    """Directional blend masks, each the size of one output tile (H, W)."""

    top: torch.Tensor
    right: torch.Tensor
    bottom: torch.Tensor
    left: torch.Tensor


def calculate_tile_grid(
    input_size: Tuple[int, int], scaled_input_tile_size: Tuple[int, int], input_overlap: Tuple[int, int]
) -> Tuple[int, int]:
    """Calculate the number of tile columns and rows covering an input image.

    Args:
        input_size (Tuple[int, int]): Image (width, height)
        scaled_input_tile_size (Tuple[int, int]): Useful input tile (width, height)
        input_overlap (Tuple[int, int]): Overlap (x, y) in input pixels

    Returns:
        Tuple: (columns, rows), each at least 1
    """
    grid = []
    for axis in range(2):
        stride = scaled_input_tile_size[axis] - input_overlap[axis]
        grid.append(max(1, math.ceil((input_size[axis] - input_overlap[axis]) / stride)))
    return grid[0], grid[1]


def calculate_tiles(
    input_size: Tuple[int, int],
    output_size: Tuple[int, int],
    input_tile_size: Tuple[int, int],
    output_tile_size: Tuple[int, int],
    input_overlap: Tuple[int, int],
    output_overlap: Tuple[int, int],
    scaled_input_tile_size: Tuple[int, int],
) -> Tiling:
    """Calculate input and output tile rectangles for an image.

    Input rects always have the executor's fixed size and are centered on the
    useful (scaled) region of each tile. Output rects are laid out edge to edge
    minus the overlap and clipped at the right/bottom canvas edges. Tiles are
    enumerated column by column.

    Args:
        input_size (Tuple[int, int]): Input image (width, height)
        output_size (Tuple[int, int]): Output canvas (width, height)
        input_tile_size (Tuple[int, int]): Executor input tile (width, height)
        output_tile_size (Tuple[int, int]): Executor output tile (width, height)
        input_overlap (Tuple[int, int]): Overlap (x, y) in input pixels
        output_overlap (Tuple[int, int]): Overlap (x, y) in output pixels
        scaled_input_tile_size (Tuple[int, int]): Output tile mapped back to input space

    Returns:
        Tiling: Tile count and the paired rectangles
    """
    columns, rows = calculate_tile_grid(input_size, scaled_input_tile_size, input_overlap)

    in_w, in_h = input_tile_size
    scaled_w, scaled_h = scaled_input_tile_size
    out_w, out_h = output_tile_size
    canvas_w, canvas_h = output_size

    border_x = (in_w - scaled_w) // 2
    border_y = (in_h - scaled_h) // 2

    input_rects = []
    output_rects = []
    for i in range(columns):
        for j in range(rows):
            input_rects.append(
                TileRect(
                    -border_x + i * scaled_w - i * input_overlap[0],
                    -border_y + j * scaled_h - j * input_overlap[1],
                    in_w,
                    in_h,
                )
            )

            x = i * out_w - i * output_overlap[0]
            y = j * out_h - j * output_overlap[1]
            output_rects.append(
                TileRect(
                    x,
                    y,
                    canvas_w - x if x + out_w > canvas_w else out_w,
                    canvas_h - y if y + out_h > canvas_h else out_h,
                )
            )

    return Tiling(columns * rows, input_rects, output_rects)


def create_tile_weights(
    overlap: Tuple[int, int],
    size: Tuple[int, int],
    device: Union[str, torch.device] = "cpu",
) -> TileWeights:
    """Create directional ramp masks for cross-fading overlapping tile edges.

    Row i (1-indexed) of the top mask has weight i / (overlap_y + 1) for the
    first overlap_y rows; the left mask ramps the same way over columns. The
    bottom and right masks are mirrors of top and left.

    Args:
        overlap (Tuple[int, int]): Overlap (x, y) in output pixels
        size (Tuple[int, int]): Output tile (width, height)
        device: Device to create the masks on

    Returns:
        TileWeights: Top, right, bottom and left masks of shape (H, W)
    """
    width, height = size
    overlap_x, overlap_y = overlap

    top = torch.ones(height, width, dtype=torch.float32, device=device)
    if overlap_y > 0:
        ramp = torch.arange(1, overlap_y + 1, dtype=torch.float32, device=device) / (overlap_y + 1)
        top[:overlap_y, :] = ramp.view(-1, 1)

    left = torch.ones(height, width, dtype=torch.float32, device=device)
    if overlap_x > 0:
        ramp = torch.arange(1, overlap_x + 1, dtype=torch.float32, device=device) / (overlap_x + 1)
        left[:, :overlap_x] = ramp.view(1, -1)

    return TileWeights(top=top, right=left.flip(1), bottom=top.flip(0), left=left)


def blend_tile_edges(
    tile: torch.Tensor, rect: TileRect, canvas_size: Tuple[int, int], weights: TileWeights
) -> torch.Tensor:
    """Attenuate the interior edges of an output tile in place.

    Edges touching the canvas border keep full weight.

    Args:
        tile (torch.Tensor): Output tile of shape (C, H, W)
        rect (TileRect): Output rect of the tile on the canvas
        canvas_size (Tuple[int, int]): Canvas (width, height)
        weights (TileWeights): Session blend masks

    Returns:
        torch.Tensor: The blended tile
    """
    canvas_w, canvas_h = canvas_size

    if rect.x > 0:
        tile.mul_(weights.left)
    if rect.y > 0:
        tile.mul_(weights.top)
    if rect.right < canvas_w:
        tile.mul_(weights.right)
    if rect.bottom < canvas_h:
        tile.mul_(weights.bottom)

    return tile

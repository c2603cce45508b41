"""Dimension calculation utilities for tiled rendering."""

import math
from dataclasses import dataclass
from typing import Tuple

from img2img.exceptions import ConfigurationError


def lround(value: float) -> int:
    """Round half away from zero."""
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


@dataclass(frozen=True)
class TileDims:
    """Tile sizes shared by every tile of a render session.

    All sizes are (width, height), all overlaps are (x, y) in pixels.
    """

    input_tile_size: Tuple[int, int]
    output_tile_size: Tuple[int, int]
    scaled_output_tile_size: Tuple[int, int]
    scaled_input_tile_size: Tuple[int, int]
    input_overlap: Tuple[int, int]
    output_overlap: Tuple[int, int]


def compute_tile_dims(
    input_tile_size: Tuple[int, int],
    output_tile_size: Tuple[int, int],
    scaling: Tuple[int, int],
    overlap: Tuple[float, float],
) -> TileDims:
    """Compute the session tile sizes from the executor's fixed tile shapes.

    The scaled output tile is the input tile enlarged by the scale factor. Its
    height is derived from the input tile width, so tiles that are not square
    fail the stride check below.

    Args:
        input_tile_size (Tuple[int, int]): Executor input tile (width, height)
        output_tile_size (Tuple[int, int]): Executor output tile (width, height)
        scaling (Tuple[int, int]): Scale factor (x, y)
        overlap (Tuple[float, float]): Overlap fraction (x, y)

    Returns:
        TileDims: Derived tile sizes and pixel overlaps

    Raises:
        ConfigurationError: If a stride would be non-positive, or the scaled input
            stride does not match the output stride
    """
    in_w, in_h = input_tile_size
    out_w, out_h = output_tile_size

    scaled_output_tile_size = (in_w * scaling[0], in_w * scaling[1])
    scaled_input_tile_size = (
        lround(out_w / scaled_output_tile_size[0] * in_w),
        lround(out_h / scaled_output_tile_size[1] * in_h),
    )
    input_overlap = (lround(in_w * overlap[0]), lround(in_h * overlap[1]))
    output_overlap = (
        lround(scaled_output_tile_size[0] * overlap[0]),
        lround(scaled_output_tile_size[1] * overlap[1]),
    )

    for axis, name in enumerate(("width", "height")):
        if scaled_input_tile_size[axis] - input_overlap[axis] <= 0:
            raise ConfigurationError(
                f"Non-positive input stride along {name}: tile {scaled_input_tile_size[axis]}, "
                f"overlap {input_overlap[axis]}"
            )
        if output_tile_size[axis] - output_overlap[axis] <= 0:
            raise ConfigurationError(
                f"Non-positive output stride along {name}: tile {output_tile_size[axis]}, "
                f"overlap {output_overlap[axis]}"
            )

        # every input stride must map onto exactly one output stride
        input_stride = scaled_input_tile_size[axis] - input_overlap[axis]
        output_stride = output_tile_size[axis] - output_overlap[axis]
        if (
            output_overlap[axis] != input_overlap[axis] * scaling[axis]
            or input_stride * scaling[axis] != output_stride
        ):
            raise ConfigurationError(
                f"Input and output tiles do not line up along {name}: input stride {input_stride}px "
                f"(overlap {input_overlap[axis]}px), output stride {output_stride}px "
                f"(overlap {output_overlap[axis]}px), scale {scaling[axis]}",
                details={
                    "scaled_input_tile_size": scaled_input_tile_size,
                    "input_overlap": input_overlap,
                    "output_overlap": output_overlap,
                },
            )

    return TileDims(
        input_tile_size=tuple(input_tile_size),
        output_tile_size=tuple(output_tile_size),
        scaled_output_tile_size=scaled_output_tile_size,
        scaled_input_tile_size=scaled_input_tile_size,
        input_overlap=input_overlap,
        output_overlap=output_overlap,
    )


def calculate_output_size(input_size: Tuple[int, int], scaling: Tuple[int, int]) -> Tuple[int, int]:
    """Output canvas (width, height) for an input (width, height)."""
    return input_size[0] * scaling[0], input_size[1] * scaling[1]


def calculate_step_count(tile_count: int, steps_per_tile: int, batch_size: int) -> int:
    """Calculate the number of pipeline steps, rounded up to whole batches.

    Args:
        tile_count (int): Number of tiles
        steps_per_tile (int): Executor passes per tile (8 with augmentation)
        batch_size (int): Fixed executor batch size

    Returns:
        int: Step count, a multiple of batch_size
    """
    return batch_size * math.ceil(tile_count * steps_per_tile / batch_size)

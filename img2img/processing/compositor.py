"""Accumulation of executor results into the output canvas."""

from typing import List, Optional

import torch

from img2img.exceptions import PreconditionError
from img2img.utils.augmentation import Augmentation, reverse_augmentation
from img2img.utils.tiling import TileRect, TileWeights, blend_tile_edges
from .work import WorkItem


class Compositor:
    """Averages augmented passes per tile, blends seams and adds tiles to a canvas.

    Results must arrive in work-item order: all passes of a tile are
    consecutive, starting with augmentation 0.

    Args:
        canvas (torch.Tensor): Zero-initialized canvas of shape (C, H, W)
        output_rects (List[TileRect]): Output rect of every tile
        weights (TileWeights): Session blend masks
        steps_per_tile (int): 8 with augmentation, 1 without
        blend (bool): Whether tile edges are cross-faded
    """

    def __init__(
        self,
        canvas: torch.Tensor,
        output_rects: List[TileRect],
        weights: TileWeights,
        steps_per_tile: int = 1,
        blend: bool = True,
    ):
        self.canvas = canvas
        self.output_rects = output_rects
        self.weights = weights
        self.steps_per_tile = steps_per_tile
        self.blend = blend
        self._accumulator: Optional[torch.Tensor] = None
        self._accumulated_tile: Optional[int] = None

    @property
    def canvas_size(self):
        return self.canvas.shape[2], self.canvas.shape[1]

    def add(self, item: WorkItem, result: torch.Tensor) -> bool:
        """Consume one executor result.

        Args:
            item (WorkItem): Work item the result belongs to
            result (torch.Tensor): Executor output tile of shape (C, H, W)

        Returns:
            bool: True if the tile was completed and added to the canvas
        """
        tile = self._accumulate(item, result)
        if tile is None:
            return False

        self.composite(tile, self.output_rects[item.tile_index])
        return True

    def _accumulate(self, item: WorkItem, result: torch.Tensor) -> Optional[torch.Tensor]:
        if self.steps_per_tile == 1:
            return result

        if item.augmentation_index == 0:
            self._accumulator = result.clone()
            self._accumulated_tile = item.tile_index
            return None

        if self._accumulated_tile != item.tile_index:
            raise PreconditionError(
                f"Augmented result for tile {item.tile_index} arrived without its identity pass",
                details={"item": item, "accumulating": self._accumulated_tile},
            )

        self._accumulator.add_(reverse_augmentation(result, Augmentation(item.augmentation_index)))

        if item.augmentation_index < self.steps_per_tile - 1:
            return None

        tile = self._accumulator.div_(self.steps_per_tile)
        self._accumulator = None
        self._accumulated_tile = None
        return tile

    def composite(self, tile: torch.Tensor, rect: TileRect):
        """Blend a finished tile and add its clipped region to the canvas."""
        if self.blend:
            tile = blend_tile_edges(tile.clone(), rect, self.canvas_size, self.weights)

        self.canvas[:, rect.y : rect.bottom, rect.x : rect.right] += tile[:, : rect.height, : rect.width]

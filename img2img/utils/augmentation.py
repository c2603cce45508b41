"""Dihedral test-time augmentations and their exact inverses."""

from enum import IntEnum
from typing import Callable, Dict, Tuple

import torch

Primitive = Callable[[torch.Tensor], torch.Tensor]


class Augmentation(IntEnum):
    """The 8 dihedral transforms, in executor pass order."""

    IDENTITY = 0
    FLIP_HORIZONTAL = 1
    FLIP_VERTICAL = 2
    ROTATE_90 = 3
    ROTATE_180 = 4
    ROTATE_270 = 5
    FLIP_HORIZONTAL_ROTATE_90 = 6
    FLIP_VERTICAL_ROTATE_90 = 7


# Primitives act on the last two dims (H, W) of a (..., H, W) tensor.
def flip_horizontal(tile: torch.Tensor) -> torch.Tensor:
    return tile.flip(-1)


def flip_vertical(tile: torch.Tensor) -> torch.Tensor:
    return tile.flip(-2)


def rotate_90(tile: torch.Tensor) -> torch.Tensor:
    return torch.rot90(tile, 1, dims=(-2, -1))


def rotate_180(tile: torch.Tensor) -> torch.Tensor:
    return torch.rot90(tile, 2, dims=(-2, -1))


def rotate_270(tile: torch.Tensor) -> torch.Tensor:
    return torch.rot90(tile, 3, dims=(-2, -1))


# kind -> (forward sequence, inverse sequence); composite inverses run in reverse order
AUGMENTATIONS: Dict[Augmentation, Tuple[Tuple[Primitive, ...], Tuple[Primitive, ...]]] = {
    Augmentation.IDENTITY: ((), ()),
    Augmentation.FLIP_HORIZONTAL: ((flip_horizontal,), (flip_horizontal,)),
    Augmentation.FLIP_VERTICAL: ((flip_vertical,), (flip_vertical,)),
    Augmentation.ROTATE_90: ((rotate_90,), (rotate_270,)),
    Augmentation.ROTATE_180: ((rotate_180,), (rotate_180,)),
    Augmentation.ROTATE_270: ((rotate_270,), (rotate_90,)),
    Augmentation.FLIP_HORIZONTAL_ROTATE_90: ((flip_horizontal, rotate_90), (rotate_270, flip_horizontal)),
    Augmentation.FLIP_VERTICAL_ROTATE_90: ((flip_vertical, rotate_90), (rotate_270, flip_vertical)),
}


def _run(tile: torch.Tensor, primitives: Tuple[Primitive, ...]) -> torch.Tensor:
    if not primitives:
        return tile.clone()
    for primitive in primitives:
        tile = primitive(tile)
    return tile.contiguous()


def apply_augmentation(tile: torch.Tensor, kind: Augmentation) -> torch.Tensor:
    """Apply an augmentation to a tile of shape (..., H, W).

    Args:
        tile (torch.Tensor): Input tile
        kind (Augmentation): Augmentation to apply

    Returns:
        torch.Tensor: Augmented copy of the tile
    """
    forward, _ = AUGMENTATIONS[Augmentation(kind)]
    return _run(tile, forward)


def reverse_augmentation(tile: torch.Tensor, kind: Augmentation) -> torch.Tensor:
    """Undo ``apply_augmentation(tile, kind)`` exactly.

    Args:
        tile (torch.Tensor): Augmented tile
        kind (Augmentation): Augmentation that was applied

    Returns:
        torch.Tensor: Tile in the original orientation
    """
    _, inverse = AUGMENTATIONS[Augmentation(kind)]
    return _run(tile, inverse)

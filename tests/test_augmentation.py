"""Tests for the dihedral augmentation codec."""

import pytest
import torch

from img2img.utils.augmentation import (
    AUGMENTATIONS,
    Augmentation,
    apply_augmentation,
    flip_horizontal,
    reverse_augmentation,
    rotate_270,
)


@pytest.mark.parametrize("kind", list(Augmentation))
@pytest.mark.parametrize("shape", [(3, 8, 8), (3, 4, 6), (2, 3, 16, 16)])
def test_reverse_undoes_apply(kind, shape):
    tile = torch.rand(shape)
    restored = reverse_augmentation(apply_augmentation(tile, kind), kind)
    assert torch.equal(restored, tile)


@pytest.mark.parametrize("kind", list(Augmentation)[1:])
def test_augmentations_change_tile(kind):
    tile = torch.rand(3, 8, 8)
    augmented = apply_augmentation(tile, kind)
    assert augmented.shape == tile.shape
    assert not torch.equal(augmented, tile)


def test_augmentations_are_distinct():
    tile = torch.rand(3, 8, 8)
    outputs = [apply_augmentation(tile, kind) for kind in Augmentation]
    for i in range(len(outputs)):
        for j in range(i + 1, len(outputs)):
            assert not torch.equal(outputs[i], outputs[j])


def test_identity_returns_copy():
    tile = torch.rand(3, 4, 4)
    copy = apply_augmentation(tile, Augmentation.IDENTITY)
    copy.zero_()
    assert tile.abs().sum() > 0


def test_rotate_90_is_not_self_inverse():
    tile = torch.rand(3, 8, 8)
    twice = apply_augmentation(apply_augmentation(tile, Augmentation.ROTATE_90), Augmentation.ROTATE_90)
    assert not torch.equal(twice, tile)
    assert torch.equal(
        reverse_augmentation(tile, Augmentation.ROTATE_90),
        apply_augmentation(tile, Augmentation.ROTATE_270),
    )
    assert torch.equal(
        reverse_augmentation(tile, Augmentation.ROTATE_270),
        apply_augmentation(tile, Augmentation.ROTATE_90),
    )


def test_composite_inverse_rotates_before_flipping():
    _, inverse = AUGMENTATIONS[Augmentation.FLIP_HORIZONTAL_ROTATE_90]
    assert inverse == (rotate_270, flip_horizontal)


@pytest.mark.parametrize(
    "kind", [Augmentation.FLIP_HORIZONTAL, Augmentation.FLIP_VERTICAL, Augmentation.ROTATE_180]
)
def test_self_inverse_kinds(kind):
    tile = torch.rand(3, 6, 6)
    assert torch.equal(apply_augmentation(apply_augmentation(tile, kind), kind), tile)


def test_flip_horizontal_mirrors_columns():
    tile = torch.arange(6.0).view(1, 2, 3)
    flipped = apply_augmentation(tile, Augmentation.FLIP_HORIZONTAL)
    assert flipped.tolist() == [[[2.0, 1.0, 0.0], [5.0, 4.0, 3.0]]]


def test_accepts_integer_index():
    tile = torch.rand(3, 4, 4)
    assert torch.equal(apply_augmentation(tile, 4), apply_augmentation(tile, Augmentation.ROTATE_180))

"""Tests for render configuration validation."""

import pytest

from img2img.config.render import RenderConfig
from img2img.exceptions import ConfigurationError, Img2ImgError


def test_defaults():
    config = RenderConfig()
    assert config.scaling == (2, 2)
    assert config.overlap == (1 / 16, 1 / 16)
    assert config.steps_per_tile == 1
    assert config.overlapping


@pytest.mark.parametrize(
    "kwargs",
    [
        {"scaling": (3, 3)},
        {"scaling": (2, 0)},
        {"overlap": (0.25, 0.0)},
        {"overlap": (0.0, -0.01)},
        {"batch_size": 0},
        {"channels": 0},
        {"tile_size": (0, 64)},
        {"tile_size": (64, 32), "use_augmentation": True},
    ],
)
def test_invalid_configuration(kwargs):
    with pytest.raises(ConfigurationError):
        RenderConfig(**kwargs)


def test_configuration_error_is_library_error():
    with pytest.raises(Img2ImgError) as excinfo:
        RenderConfig(batch_size=-1)
    assert "Batch size" in excinfo.value.message


def test_augmentation_runs_eight_passes():
    assert RenderConfig(use_augmentation=True).steps_per_tile == 8


def test_zero_overlap_is_not_overlapping():
    assert not RenderConfig(overlap=(0.0, 0.0)).overlapping
    assert RenderConfig(overlap=(0.0, 1 / 32)).overlapping


def test_rectangular_tiles_without_augmentation():
    assert RenderConfig(tile_size=(64, 32)).tile_size == (64, 32)

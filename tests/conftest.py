import pytest
import torch

from img2img.processing.pipeline import InterpolationExecutor


class RecordingExecutor(InterpolationExecutor):
    """Nearest-neighbour executor that keeps every batch it was given."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("mode", "nearest")
        super().__init__(*args, **kwargs)
        self.batches = []

    def infer(self, batch: torch.Tensor) -> torch.Tensor:
        self.batches.append(batch.clone())
        return super().infer(batch)


class FailingExecutor(InterpolationExecutor):
    def infer(self, batch: torch.Tensor) -> torch.Tensor:
        raise RuntimeError("CUDA error: device-side assert triggered")


class WrongShapeExecutor(InterpolationExecutor):
    def infer(self, batch: torch.Tensor) -> torch.Tensor:
        return super().infer(batch)[:, :, 1:, :]


def nearest_upscale(image: torch.Tensor, scale: int) -> torch.Tensor:
    """Reference nearest-neighbour upscale of a (H, W, C) frame."""
    return image.repeat_interleave(scale, dim=0).repeat_interleave(scale, dim=1)


@pytest.fixture
def random_image():
    def make(height: int, width: int, channels: int = 3, seed: int = 0) -> torch.Tensor:
        generator = torch.Generator().manual_seed(seed)
        return torch.randint(0, 256, (height, width, channels), dtype=torch.uint8, generator=generator)

    return make

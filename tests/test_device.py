"""Tests for stream ordering and canvas lifetime."""

import contextlib

import pytest
import torch

from img2img.utils import device as device_utils
from img2img.utils.device import ExecutionStream, allocate_canvas


class RecordingStream:
    def __init__(self):
        self.waited_on = []
        self.synchronized = 0

    def wait_stream(self, other):
        self.waited_on.append(other)

    def synchronize(self):
        self.synchronized += 1


def test_scope_waits_for_current_stream(monkeypatch):
    """Work on the render stream starts after the producer stream's queued work."""
    stream = ExecutionStream("cpu")
    recording = RecordingStream()
    stream._stream = recording
    entered = []

    monkeypatch.setattr(torch.cuda, "current_stream", lambda device=None: "producer")
    monkeypatch.setattr(torch.cuda, "stream", lambda s: entered.append(s) or contextlib.nullcontext())

    with stream.scope():
        assert recording.waited_on == ["producer"]

    assert entered == [recording]


def test_cpu_stream_is_a_no_op():
    stream = ExecutionStream("cpu")
    with stream.scope():
        pass
    stream.synchronize()


def test_canvas_is_zeroed_and_keeps_cache(monkeypatch):
    calls = []
    monkeypatch.setattr(device_utils, "clean_vram", lambda: calls.append(1))

    with allocate_canvas((3, 4, 5), "cpu", ExecutionStream("cpu")) as canvas:
        assert canvas.shape == (3, 4, 5)
        assert canvas.dtype == torch.float32
        assert canvas.abs().sum() == 0

    assert calls == []


def test_canvas_drains_stream_on_failure():
    stream = ExecutionStream("cpu")
    recording = RecordingStream()
    stream._stream = recording

    with pytest.raises(RuntimeError):
        with allocate_canvas((3, 4, 4), "cpu", stream):
            raise RuntimeError("batch failed")

    assert recording.synchronized == 1


@pytest.mark.skipif(not torch.cuda.is_available(), reason="CUDA not available")
def test_cuda_render_matches_cpu_render(random_image):
    from conftest import RecordingExecutor
    from img2img.config.render import RenderConfig
    from img2img.processing.image import Img2ImgRenderer

    image = random_image(70, 90).cuda()
    config = RenderConfig(batch_size=2, tile_size=(32, 32))
    cpu = Img2ImgRenderer(RecordingExecutor((32, 32), scale=2, batch_size=2), config)
    cuda = Img2ImgRenderer(RecordingExecutor((32, 32), scale=2, batch_size=2), config, device="cuda")

    assert torch.equal(cuda.render(image).cpu(), cpu.render(image.cpu()))

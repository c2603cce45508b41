"""Device helpers: execution stream, canvas ownership and memory cleanup."""

from contextlib import contextmanager
from typing import Iterator, List, Tuple, Union

import torch


def get_device_list() -> List[str]:
    """List the devices a renderer can run on."""
    devices = ["cpu"]
    if torch.cuda.is_available():
        devices.extend(f"cuda:{i}" for i in range(torch.cuda.device_count()))
    if torch.backends.mps.is_available():
        devices.append("mps")
    return devices


def clean_vram():
    """Release cached accelerator memory."""
    if torch.cuda.is_available():
        torch.cuda.empty_cache()
    if torch.backends.mps.is_available():
        torch.mps.empty_cache()


class ExecutionStream:
    """Ordered queue of device work for one renderer.

    On CUDA devices work issued inside ``scope()`` is enqueued on a dedicated
    stream and only waited for in ``synchronize()``. Entering the scope first
    waits for the current stream, which produced the frame and the blend
    masks. Other devices execute eagerly, so both operations are no-ops there.
    """

    def __init__(self, device: Union[str, torch.device]):
        self.device = torch.device(device)
        self._stream = torch.cuda.Stream(device=self.device) if self.device.type == "cuda" else None

    @contextmanager
    def scope(self) -> Iterator[None]:
        if self._stream is None:
            yield
            return
        self._stream.wait_stream(torch.cuda.current_stream(self.device))
        with torch.cuda.stream(self._stream):
            yield

    def synchronize(self):
        if self._stream is not None:
            self._stream.synchronize()


@contextmanager
def allocate_canvas(
    shape: Tuple[int, int, int], device: Union[str, torch.device], stream: ExecutionStream
) -> Iterator[torch.Tensor]:
    """Zero-initialized output canvas, drained of queued writes if rendering fails.

    Args:
        shape (Tuple[int, int, int]): Canvas shape (C, H, W)
        device: Device to allocate on
        stream (ExecutionStream): Stream the canvas is written on

    Yields:
        torch.Tensor: Float32 canvas
    """
    canvas = torch.zeros(shape, dtype=torch.float32, device=device)
    try:
        yield canvas
    except BaseException:
        # drain queued writes before the buffer is released
        stream.synchronize()
        raise

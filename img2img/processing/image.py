"""Tiled image rendering through a fixed-shape executor."""

import glob
import logging
import os
import time
from typing import List, Optional, Sequence

import torch
from einops import rearrange
from torchvision.io import ImageReadMode, decode_image, read_file, write_jpeg, write_png
from tqdm import tqdm

from img2img.config.render import IOConfig, OutputFormat, RenderConfig
from img2img.exceptions import (
    BackendError,
    CaptureError,
    ConfigurationError,
    Img2ImgError,
    PreconditionError,
)
from img2img.utils.augmentation import Augmentation, apply_augmentation
from img2img.utils.device import ExecutionStream, allocate_canvas, clean_vram
from img2img.utils.dimension import (
    calculate_output_size,
    calculate_step_count,
    compute_tile_dims,
)
from img2img.utils.tensor import finalize_image, pad_roi, prepare_image
from img2img.utils.tiling import calculate_tiles, create_tile_weights
from .compositor import Compositor
from .pipeline import TileExecutor
from .work import WorkQueue, iter_work_items

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ["*.png", "*.jpg", "*.jpeg", "*.webp", "*.bmp"]


class Img2ImgRenderer:
    """Renders images of any size with an executor that only accepts fixed tiles.

    Tile sizes, overlaps and blend masks are derived once from the executor's
    shapes and reused for every ``render()`` call.

    Args:
        executor (TileExecutor): Fixed-shape batch transform
        config (RenderConfig): Render session configuration
        device: Device to render on
        show_progress (bool): Show a progress bar over batches
    """

    def __init__(
        self,
        executor: TileExecutor,
        config: RenderConfig,
        device: torch.device = torch.device("cpu"),
        show_progress: bool = False,
    ):
        self.executor = executor
        self.config = config
        self.device = torch.device(device)
        self.show_progress = show_progress

        self._check_executor()

        channels, out_h, out_w = executor.output_shape
        self.input_tile_shape = (config.channels, config.tile_size[1], config.tile_size[0])
        self.output_tile_shape = (channels, out_h, out_w)

        self.dims = compute_tile_dims(config.tile_size, (out_w, out_h), config.scaling, config.overlap)
        self.weights = create_tile_weights(self.dims.output_overlap, self.dims.output_tile_size, self.device)
        self.stream = ExecutionStream(self.device)

        logger.info(
            f"Renderer ready: tile {config.tile_size[0]}x{config.tile_size[1]} -> {out_w}x{out_h}, "
            f"scale {config.scaling}, overlap {self.dims.input_overlap}px/{self.dims.output_overlap}px, "
            f"batch {config.batch_size}, augmentation {'on' if config.use_augmentation else 'off'}"
        )

    def _check_executor(self):
        config = self.config
        expected = (config.channels, config.tile_size[1], config.tile_size[0])

        if tuple(self.executor.input_shape) != expected:
            raise ConfigurationError(
                f"Executor input tile {tuple(self.executor.input_shape)} does not match "
                f"configured tile {expected}"
            )
        if self.executor.batch_size != config.batch_size:
            raise ConfigurationError(
                f"Executor batch size {self.executor.batch_size} does not match "
                f"configured batch size {config.batch_size}"
            )

        channels, out_h, out_w = self.executor.output_shape
        if channels != config.channels:
            raise ConfigurationError(
                f"Executor output has {channels} channels, expected {config.channels}"
            )
        sx, sy = config.scaling
        if out_w > config.tile_size[0] * sx or out_h > config.tile_size[1] * sy:
            raise ConfigurationError(
                f"Executor output tile {out_w}x{out_h} is larger than the input tile "
                f"{config.tile_size[0]}x{config.tile_size[1]} scaled by {config.scaling}",
                details={"output_shape": tuple(self.executor.output_shape), "scaling": config.scaling},
            )
        if config.use_augmentation and out_h != out_w:
            raise ConfigurationError(
                f"Augmentation requires square output tiles, got {out_w}x{out_h}"
            )

    def infer(self, tiles: Sequence[torch.Tensor]) -> torch.Tensor:
        """Run one full batch of tiles through the executor.

        Args:
            tiles (Sequence[torch.Tensor]): Exactly batch_size tiles of shape (C, H, W)

        Returns:
            torch.Tensor: Output tiles of shape (N, C, H', W')

        Raises:
            PreconditionError: If the batch or a tile has the wrong shape
            BackendError: If the executor fails or returns a wrong shape
        """
        batch_size = self.config.batch_size
        channels, height, width = self.input_tile_shape

        if len(tiles) != batch_size:
            raise PreconditionError(
                f"Input has invalid batch size: expected {batch_size}, got {len(tiles)}."
            )
        for tile in tiles:
            if tile.ndim != 3 or tile.shape[0] != channels:
                raise PreconditionError(
                    f"Input image has invalid number of channels: expected {channels}, "
                    f"got shape {tuple(tile.shape)}."
                )
            if tile.shape[1] != height:
                raise PreconditionError(
                    f"Input image has invalid height: expected {height}, got {tile.shape[1]}."
                )
            if tile.shape[2] != width:
                raise PreconditionError(
                    f"Input image has invalid width: expected {width}, got {tile.shape[2]}."
                )

        batch = torch.stack(list(tiles), 0)

        try:
            outputs = self.executor.infer(batch)
        except Exception as e:
            raise BackendError(f"Engine inference failed: {e}") from e

        expected = (batch_size, *self.output_tile_shape)
        if tuple(outputs.shape) != expected:
            raise BackendError(
                f"Engine returned shape {tuple(outputs.shape)}, expected {expected}.",
                details={"expected": expected, "got": tuple(outputs.shape)},
            )

        return outputs.to(self.device, torch.float32)

    @torch.no_grad()
    def render(self, image: Optional[torch.Tensor]) -> torch.Tensor:
        """Render an image tile by tile.

        Args:
            image (torch.Tensor): Frame of shape (H, W, C), uint8 or float in [0, 1]

        Returns:
            torch.Tensor: Frame of shape (H * sy, W * sx, C) with the input's dtype

        Raises:
            Img2ImgError: If the frame is unusable or any batch fails
        """
        try:
            return self._render(image)
        except Img2ImgError as e:
            logger.error(f"Render failed: {e.message}")
            raise

    def _render(self, image: Optional[torch.Tensor]) -> torch.Tensor:
        self._check_image(image)

        config = self.config
        dims = self.dims
        batch_size = config.batch_size
        steps_per_tile = config.steps_per_tile

        with self.stream.scope():
            frame = prepare_image(image, self.device, config.channel_order)
            channels, height, width = frame.shape
            output_size = calculate_output_size((width, height), config.scaling)

            with allocate_canvas((channels, output_size[1], output_size[0]), self.device, self.stream) as canvas:
                tiling = calculate_tiles(
                    (width, height),
                    output_size,
                    dims.input_tile_size,
                    dims.output_tile_size,
                    dims.input_overlap,
                    dims.output_overlap,
                    dims.scaled_input_tile_size,
                )
                compositor = Compositor(
                    canvas,
                    tiling.output_rects,
                    self.weights,
                    steps_per_tile=steps_per_tile,
                    blend=config.overlapping,
                )

                step_count = calculate_step_count(tiling.tile_count, steps_per_tile, batch_size)
                batch_count = step_count // batch_size
                logger.debug(
                    f"Rendering {width}x{height} -> {output_size[0]}x{output_size[1]} "
                    f"in {tiling.tile_count} tiles, {batch_count} batches"
                )

                queue = WorkQueue()
                tiles: List[torch.Tensor] = []
                t0 = time.perf_counter()

                with tqdm(total=batch_count, desc="Rendering batches", disable=not self.show_progress) as progress:
                    for step, item in enumerate(iter_work_items(step_count, steps_per_tile)):
                        queue.push(item)

                        if not item.is_padding(tiling.tile_count):
                            tile = pad_roi(frame, tiling.input_rects[item.tile_index])
                            if item.augmentation_index != 0:
                                tile = apply_augmentation(tile, Augmentation(item.augmentation_index))
                            tiles.append(tile)
                        else:
                            tiles.append(torch.zeros(self.input_tile_shape, device=self.device))

                        if step % batch_size != batch_size - 1:
                            continue

                        outputs = self.infer(tiles)

                        for done, result in zip(queue.drain(batch_size), outputs):
                            if done.is_padding(tiling.tile_count):
                                continue
                            compositor.add(done, result)

                        tiles.clear()

                        t1 = time.perf_counter()
                        progress.update(1)
                        logger.debug(
                            f"Rendered batch {step // batch_size + 1}/{batch_count} "
                            f"@ {1.0 / max(t1 - t0, 1e-9):.2f} it/s."
                        )
                        t0 = t1

                output = finalize_image(canvas, image.dtype, config.channel_order)

            self.stream.synchronize()

        return output

    def _check_image(self, image: Optional[torch.Tensor]):
        if image is None or image.numel() == 0:
            raise CaptureError("Empty frame captured")
        if image.ndim != 3:
            raise PreconditionError(f"Expected a (H, W, C) frame, got shape {tuple(image.shape)}")
        if image.shape[2] != self.config.channels:
            raise PreconditionError(
                f"Frame has {image.shape[2]} channels, expected {self.config.channels}"
            )


def load_image(path: str) -> torch.Tensor:
    """Load an image file as a (H, W, C) uint8 RGB frame."""
    if not os.path.isfile(path):
        raise CaptureError(f"Image file does not exist: {path}")
    try:
        image = decode_image(read_file(path), mode=ImageReadMode.RGB)
    except (OSError, RuntimeError) as e:
        raise CaptureError(f"Could not load image from {path}: {e}") from e
    return rearrange(image, "C H W -> H W C")


def save_image(image: torch.Tensor, path: str, output_format: OutputFormat = OutputFormat.PNG):
    """Save a (H, W, C) uint8 RGB frame."""
    chw = rearrange(image, "H W C -> C H W").cpu()
    if output_format == OutputFormat.JPEG:
        write_jpeg(chw, path, quality=95)
    else:
        write_png(chw, path, compression_level=6)


def find_images(input_path: str, recursive: bool = False) -> List[str]:
    """Collect image files from a file or directory path."""
    if os.path.isfile(input_path):
        return [input_path]

    images = []
    for ext in IMAGE_EXTENSIONS:
        pattern = os.path.join(input_path, "**", ext) if recursive else os.path.join(input_path, ext)
        images.extend(glob.glob(pattern, recursive=recursive))
    return sorted(images)


def output_path_for(input_path: str, io_config: IOConfig, config: RenderConfig) -> str:
    """Output file path, tagged with the scale factor and augmentation."""
    name = os.path.splitext(os.path.basename(input_path))[0]
    suffix = "" if config.scaling == (1, 1) else f"(scale{config.scaling[0]}x)"
    if config.use_augmentation:
        suffix += "(tta)"
    ext = "jpg" if io_config.output_format == OutputFormat.JPEG else "png"
    return os.path.join(io_config.output_dir, f"{name}{suffix}.{ext}")


def upscale_file(renderer: Img2ImgRenderer, input_path: str, io_config: IOConfig) -> str:
    """Render one image file and write the result.

    Returns:
        str: Path of the written image
    """
    image = load_image(input_path)
    output = renderer.render(image)

    output_path = output_path_for(input_path, io_config, renderer.config)
    save_image(output, output_path, io_config.output_format)
    return output_path


def upscale_images(renderer: Img2ImgRenderer, io_config: IOConfig) -> List[str]:
    """Render every image found at the configured input path.

    Returns:
        List[str]: Paths of the written images
    """
    input_images = find_images(io_config.input_path, io_config.recursive)
    if not input_images:
        raise CaptureError(f"No images found at: {io_config.input_path}")

    os.makedirs(io_config.output_dir, exist_ok=True)
    logger.info(f"Found {len(input_images)} images to render")

    outputs = []
    for input_path in tqdm(input_images, desc="Rendering images"):
        outputs.append(upscale_file(renderer, input_path, io_config))
        clean_vram()
    return outputs

import os

import torch

from img2img.config.render import ChannelOrder, IOConfig, OutputFormat, RenderConfig
from img2img.processing.image import Img2ImgRenderer, upscale_images
from img2img.processing.pipeline import InterpolationExecutor, init_executor
from img2img.utils.device import get_device_list
from img2img.utils.logging import setup_logging


def main():
    setup_logging("INFO")

    model = "models/swin_unet_art_scale2x.pt"

    _device = (
        "cuda:0"
        if torch.cuda.is_available()
        else "mps"
        if torch.backends.mps.is_available()
        else "cpu"
    )
    if _device not in get_device_list():
        raise RuntimeError(f"Device {_device} is not available!")

    render_config = RenderConfig(
        scaling=(2, 2),
        overlap=(1.0 / 16.0, 1.0 / 16.0),
        batch_size=4,
        channels=3,
        tile_size=(256, 256),
        use_augmentation=False,
        channel_order=ChannelOrder.RGB,
    )
    io_config = IOConfig(
        input_path="inputs",
        output_dir="outputs",
        recursive=False,
        output_format=OutputFormat.PNG,
    )
    os.makedirs(io_config.output_dir, exist_ok=True)

    if os.path.exists(model):
        executor = init_executor(
            model,
            tile_size=render_config.tile_size,
            batch_size=render_config.batch_size,
            device=_device,
            dtype=torch.float16 if _device.startswith("cuda") else torch.float32,
            channels=render_config.channels,
        )
    else:
        executor = InterpolationExecutor(
            tile_size=render_config.tile_size,
            scale=render_config.scaling[0],
            batch_size=render_config.batch_size,
            channels=render_config.channels,
        )

    renderer = Img2ImgRenderer(executor, render_config, device=_device, show_progress=True)

    upscale_images(renderer, io_config)


if __name__ == "__main__":
    main()

from .compositor import Compositor
from .image import (
    Img2ImgRenderer,
    find_images,
    load_image,
    output_path_for,
    save_image,
    upscale_file,
    upscale_images,
)
from .pipeline import InterpolationExecutor, ModuleExecutor, TileExecutor, init_executor
from .work import WorkItem, WorkQueue, iter_work_items

__all__ = [
    "Compositor",
    "Img2ImgRenderer",
    "find_images",
    "load_image",
    "output_path_for",
    "save_image",
    "upscale_file",
    "upscale_images",
    "InterpolationExecutor",
    "ModuleExecutor",
    "TileExecutor",
    "init_executor",
    "WorkItem",
    "WorkQueue",
    "iter_work_items",
]

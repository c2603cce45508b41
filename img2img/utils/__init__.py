from .augmentation import (
    Augmentation,
    AUGMENTATIONS,
    apply_augmentation,
    reverse_augmentation,
)
from .device import (
    ExecutionStream,
    allocate_canvas,
    clean_vram,
    get_device_list,
)
from .dimension import (
    TileDims,
    calculate_output_size,
    calculate_step_count,
    compute_tile_dims,
)
from .tensor import (
    finalize_image,
    pad_roi,
    prepare_image,
)
from .tiling import (
    TileRect,
    TileWeights,
    Tiling,
    blend_tile_edges,
    calculate_tile_grid,
    calculate_tiles,
    create_tile_weights,
)

__all__ = [
    # augmentation
    "Augmentation",
    "AUGMENTATIONS",
    "apply_augmentation",
    "reverse_augmentation",
    # device
    "ExecutionStream",
    "allocate_canvas",
    "clean_vram",
    "get_device_list",
    # dimension
    "TileDims",
    "calculate_output_size",
    "calculate_step_count",
    "compute_tile_dims",
    # tensor
    "finalize_image",
    "pad_roi",
    "prepare_image",
    # tiling
    "TileRect",
    "TileWeights",
    "Tiling",
    "blend_tile_edges",
    "calculate_tile_grid",
    "calculate_tiles",
    "create_tile_weights",
]

"""Shelf bin packing for sprite sheets.

Places rectangles into a growable canvas using best-fit shelves and a free
list for released rectangles.
"""

from shelfpack.geometry import find_overlaps
from shelfpack.layout import SpriteLayout
from shelfpack.logger import setup_logging
from shelfpack.packer_types import (
    Bin,
    BinId,
    FrameTooLargeError,
    PackedItem,
    PackerError,
    PackerErrorCode,
    PackerOptions,
    PackerResult,
    PackRequest,
)
from shelfpack.shelf_packer import Shelf, ShelfPack

__version__ = "1.0.0"

__all__ = [
    "Bin",
    "BinId",
    "FrameTooLargeError",
    "PackedItem",
    "PackerError",
    "PackerErrorCode",
    "PackerOptions",
    "PackerResult",
    "PackRequest",
    "Shelf",
    "ShelfPack",
    "SpriteLayout",
    "find_overlaps",
    "setup_logging",
]

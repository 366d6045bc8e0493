#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Online shelf bin packing with a free list and automatic canvas growth.

The canvas is divided into horizontal shelves stacked top to bottom in
creation order. Each shelf has a fixed height and hands out rectangles
left to right. Released bins are kept on a free list and reused by later
requests that fit inside their reserved envelope.

Each request is placed with a best-fit search over free bins and shelves,
minimizing wasted area. Exact fits are taken immediately. When nothing
fits and auto-resize is enabled, the canvas grows and the search is
repeated.

Callers get the densest layouts by requesting rectangles in order of
decreasing area.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from shelfpack.geometry import find_overlaps
from shelfpack.packer_types import (
    Bin,
    BinId,
    PackedItem,
    PackerError,
    PackerErrorCode,
    is_bin_id,
)

logger = logging.getLogger(__name__)


@dataclass
class Shelf:
    """A horizontal strip of the canvas.

    Attributes:
        y: Top Y coordinate of the shelf.
        width: Capacity of the shelf. Only grows.
        height: Shelf height, fixed at creation.
        x: Left coordinate of the next allocation.
        free: Width still available to the right of ``x``.
    """

    y: int
    width: int
    height: int
    x: int = 0
    free: int = field(init=False)

    def __post_init__(self) -> None:
        self.free = self.width

    @property
    def used_width(self) -> int:
        return self.width - self.free

    def alloc(self, width: int, height: int, bin_id: BinId) -> Optional[Bin]:
        """Hand out the next ``width`` x ``height`` slot on this shelf.

        The bin reserves the full shelf height so that, once released, it
        can be reused by any request up to that height.

        Args:
            width: Requested width.
            height: Requested height.
            bin_id: Id for the new bin.

        Returns:
            The new bin, or None if the shelf lacks width or height.
        """
        if width > self.free or height > self.height:
            return None

        x = self.x
        self.x += width
        self.free -= width
        return Bin(
            bin_id, x, self.y, width, height, max_width=width, max_height=self.height
        )

    def resize(self, width: int) -> bool:
        """Grow the shelf capacity to ``width``.

        Returns:
            False, leaving the shelf untouched, if ``width`` is smaller than
            the current capacity.
        """
        if width < self.width:
            return False
        self.free += width - self.width
        self.width = width
        return True


class ShelfPack:
    """Shelf packer over a single growable canvas.

    Attributes:
        width: Canvas width.
        height: Canvas height.
        auto_resize: Grow the canvas when a request cannot be placed.
        shelves: Shelves in creation (and vertical) order.
        free_bins: Released bins available for reuse, oldest first.
        bins: Live bins by id.
        max_id: Highest integer id seen or minted so far.
    """

    def __init__(self, width: int = 64, height: int = 64, auto_resize: bool = False) -> None:
        """Create an empty packer.

        Args:
            width: Initial canvas width.
            height: Initial canvas height.
            auto_resize: Grow the canvas instead of failing.

        Raises:
            PackerError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise PackerError(
                PackerErrorCode.INVALID_DIMENSIONS,
                f"Canvas size must be positive, got {width}x{height}",
                details={"width": width, "height": height},
            )
        self.width = width
        self.height = height
        self.auto_resize = auto_resize
        self.shelves: List[Shelf] = []
        self.free_bins: List[Bin] = []
        self.bins: Dict[BinId, Bin] = {}
        self.max_id = 0
        self._stats: Dict[int, int] = {}

    def __repr__(self) -> str:
        return (
            f"<ShelfPack {self.width}x{self.height} shelves={len(self.shelves)} "
            f"bins={len(self.bins)} free={len(self.free_bins)}>"
        )

    def allocate(
        self, width: int, height: int, bin_id: Optional[Any] = None
    ) -> Optional[Bin]:
        """Place a single ``width`` x ``height`` rectangle.

        If ``bin_id`` already names a live bin, that bin is referenced again
        and returned unchanged. Ids that are neither ``str`` nor ``int`` are
        replaced by a minted integer id.

        Args:
            width: Requested width, must be positive.
            height: Requested height, must be positive.
            bin_id: Optional stable key for the bin.

        Returns:
            The allocated bin, or None if it does not fit and auto-resize is
            disabled.

        Raises:
            PackerError: GROWTH_STALLED if growing the canvas did not enlarge
                it. Cannot happen with the built-in growth rule.
        """
        if is_bin_id(bin_id):
            existing = self.bins.get(bin_id)
            if existing is not None:
                self.ref(existing)
                return existing
            if isinstance(bin_id, int):
                self.max_id = max(bin_id, self.max_id)
        else:
            self.max_id += 1
            bin_id = self.max_id

        while True:
            bin = self._place(width, height, bin_id)
            if bin is not None:
                return bin

            if not self.auto_resize:
                logger.debug(
                    "No room for %dx%d (id=%r) in %dx%d canvas",
                    width, height, bin_id, self.width, self.height,
                )
                return None

            old_size = (self.width, self.height)
            new_size = self._grown_size(width, height)
            if new_size == old_size:
                raise PackerError(
                    PackerErrorCode.GROWTH_STALLED,
                    f"Canvas growth stalled at {old_size[0]}x{old_size[1]} "
                    f"for a {width}x{height} request",
                    details={"canvas": old_size, "request": (width, height)},
                )
            logger.debug(
                "Growing canvas %dx%d -> %dx%d for %dx%d (id=%r)",
                old_size[0], old_size[1], new_size[0], new_size[1],
                width, height, bin_id,
            )
            self.resize(*new_size)

    def _place(self, width: int, height: int, bin_id: BinId) -> Optional[Bin]:
        """Run one best-fit pass over free bins, shelves and a new shelf."""
        best_waste = float("inf")
        best_free = -1
        best_shelf = -1

        for i, free_bin in enumerate(self.free_bins):
            if height == free_bin.max_height and width == free_bin.max_width:
                return self._alloc_free_bin(i, width, height, bin_id)
            if not free_bin.fits(width, height):
                continue
            waste = free_bin.waste_for(width, height)
            if waste < best_waste:
                best_waste = waste
                best_free = i

        stacked = 0
        for i, shelf in enumerate(self.shelves):
            stacked += shelf.height

            if width > shelf.free:
                continue
            if height == shelf.height:
                return self._alloc_shelf(i, width, height, bin_id)
            if height > shelf.height:
                continue

            # Strictly lower waste only, so equal waste keeps the free bin.
            waste = (shelf.height - height) * width
            if waste < best_waste:
                best_waste = waste
                best_free = -1
                best_shelf = i

        if best_free != -1:
            return self._alloc_free_bin(best_free, width, height, bin_id)

        if best_shelf != -1:
            return self._alloc_shelf(best_shelf, width, height, bin_id)

        if height <= self.height - stacked and width <= self.width:
            self.shelves.append(Shelf(y=stacked, width=self.width, height=height))
            logger.debug(
                "Opened shelf %d at y=%d with height %d",
                len(self.shelves) - 1, stacked, height,
            )
            return self._alloc_shelf(len(self.shelves) - 1, width, height, bin_id)

        return None

    def _grown_size(self, width: int, height: int) -> Tuple[int, int]:
        """Return the canvas size after growing for an unplaceable request.

        A square or tall canvas widens, a wide canvas grows taller, and any
        dimension smaller than the request is grown past it. Both tests use
        the size before growth.
        """
        new_width, new_height = self.width, self.height

        if self.width <= self.height or width > self.width:
            new_width = max(width, self.width) + width
        if self.height < self.width or height > self.height:
            new_height = max(height, self.height) + height

        return new_width, new_height

    def _alloc_shelf(self, index: int, width: int, height: int, bin_id: BinId) -> Bin:
        shelf = self.shelves[index]
        bin = shelf.alloc(width, height, bin_id)
        if bin is None:
            raise PackerError(
                PackerErrorCode.UNKNOWN_ERROR,
                f"Shelf {index} rejected a {width}x{height} request it was chosen for",
                details={"shelf": index, "request": (width, height)},
            )
        self.bins[bin_id] = bin
        self.ref(bin)
        return bin

    def _alloc_free_bin(self, index: int, width: int, height: int, bin_id: BinId) -> Bin:
        bin = self.free_bins.pop(index)
        logger.debug(
            "Reusing free bin at (%d, %d) envelope %dx%d for %dx%d (id=%r)",
            bin.x, bin.y, bin.max_width, bin.max_height, width, height, bin_id,
        )
        bin.id = bin_id
        bin.width = width
        bin.height = height
        bin.refcount = 0
        self.bins[bin_id] = bin
        self.ref(bin)
        return bin

    def pack_batch(self, items: Iterable[Any], in_place: bool = False) -> List[PackedItem]:
        """Allocate every item in order.

        Items are ``PackRequest``-like objects or mappings with ``width`` and
        ``height`` (``w``/``h`` also accepted) and an optional ``id``. Items
        without a positive size, and items that could not be placed, are
        left out of the result.

        Args:
            items: Requests to place, already in the desired packing order.
            in_place: Write ``x``, ``y`` and the final ``id`` back onto each
                placed item.

        Returns:
            Placements in input order.
        """
        results: List[PackedItem] = []

        for item in items:
            width = _item_field(item, "width", "w")
            height = _item_field(item, "height", "h")
            if not width or not height or width <= 0 or height <= 0:
                continue

            bin_id = _item_field(item, "id")
            bin = self.allocate(width, height, bin_id)
            if bin is None:
                logger.warning(
                    "Could not place %dx%d (id=%r) in %dx%d canvas",
                    width, height, bin_id, self.width, self.height,
                )
                continue

            if in_place:
                _set_item_fields(item, x=bin.x, y=bin.y, id=bin.id)
            results.append(PackedItem.from_bin(bin))

        return results

    def lookup(self, bin_id: BinId) -> Optional[Bin]:
        """Return the live bin for ``bin_id``, or None."""
        if not is_bin_id(bin_id):
            return None
        return self.bins.get(bin_id)

    get_bin = lookup

    def ref(self, bin: Bin) -> int:
        """Add a reference to ``bin`` and return the new count."""
        bin.refcount += 1
        if bin.refcount == 1:
            self._stats[bin.height] = self._stats.get(bin.height, 0) + 1
        return bin.refcount

    def release(self, bin: Bin) -> int:
        """Drop a reference to ``bin``.

        When the count reaches zero the bin leaves the live set and joins
        the free list, keeping its reserved envelope.

        Returns:
            The new reference count.
        """
        if bin.refcount == 0:
            return 0

        bin.refcount -= 1
        if bin.refcount == 0:
            remaining = self._stats.get(bin.height, 0) - 1
            if remaining > 0:
                self._stats[bin.height] = remaining
            else:
                self._stats.pop(bin.height, None)
            if self.bins.get(bin.id) is bin:
                del self.bins[bin.id]
            self.free_bins.append(bin)
        return bin.refcount

    unref = release

    def resize(self, width: int, height: int) -> bool:
        """Grow the canvas to ``width`` x ``height``.

        Every shelf is widened to the new canvas width.

        Raises:
            PackerError: INVALID_DIMENSIONS if either dimension would shrink.
        """
        if width < self.width or height < self.height:
            raise PackerError(
                PackerErrorCode.INVALID_DIMENSIONS,
                f"Cannot shrink canvas from {self.width}x{self.height} "
                f"to {width}x{height}",
                details={
                    "current": (self.width, self.height),
                    "requested": (width, height),
                },
            )
        self.width = width
        self.height = height
        for shelf in self.shelves:
            shelf.resize(width)
        return True

    def clear(self) -> None:
        """Forget every shelf and bin. The canvas size is kept."""
        self.shelves = []
        self.free_bins = []
        self.bins = {}
        self.max_id = 0
        self._stats = {}

    @property
    def stats(self) -> Dict[int, int]:
        """Number of live bins per bin height."""
        return dict(self._stats)

    def used_bounds(self) -> Tuple[int, int]:
        """Return the tight (width, height) handed out by the shelves so far."""
        used_width = max((shelf.used_width for shelf in self.shelves), default=0)
        used_height = sum(shelf.height for shelf in self.shelves)
        return used_width, used_height

    def occupancy(self) -> float:
        """Return the ratio of live bin area to canvas area."""
        used_area = sum(bin.area for bin in self.bins.values())
        total_area = self.width * self.height
        return used_area / total_area if total_area > 0 else 0.0

    def find_overlaps(self) -> List[Tuple[BinId, BinId]]:
        """Return id pairs of live bins whose rectangles intersect."""
        return find_overlaps(
            [(bin.id, bin.x, bin.y, bin.width, bin.height) for bin in self.bins.values()]
        )


def _item_field(item: Any, *names: str) -> Any:
    for name in names:
        if isinstance(item, Mapping):
            value = item.get(name)
        else:
            value = getattr(item, name, None)
        if value is not None:
            return value
    return None


def _set_item_fields(item: Any, **values: Any) -> None:
    for name, value in values.items():
        if isinstance(item, MutableMapping):
            item[name] = value
        else:
            setattr(item, name, value)


__all__ = ["ShelfPack", "Shelf"]

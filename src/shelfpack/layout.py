#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Sprite sheet layout built on the shelf packer.

Validates and sorts a batch of requests, packs them into a canvas that
starts small and grows as needed, and reports the tight atlas bounds and
packing efficiency. Errors are collected into the result instead of being
raised.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from shelfpack.packer_types import (
    FrameTooLargeError,
    PackedItem,
    PackerError,
    PackerErrorCode,
    PackerOptions,
    PackerResult,
    PackRequest,
    is_bin_id,
)
from shelfpack.shelf_packer import ShelfPack

logger = logging.getLogger(__name__)


class SpriteLayout:
    """Lay out a batch of rectangles on one sprite sheet.

    Attributes:
        options: Layout configuration.
        packer: The packer used by the most recent call to `pack`.
    """

    def __init__(self, options: Optional[PackerOptions] = None) -> None:
        """Initialize the layout with configuration options.

        Args:
            options: Options controlling canvas size, growth, padding and
                     sorting. Defaults to PackerOptions() if not provided.
        """

        self.options = options or PackerOptions()
        self.packer: Optional[ShelfPack] = None

    def pack(self, requests: Sequence[PackRequest]) -> PackerResult:
        """Pack requests into a sprite sheet layout.

        Main entry point. Validates input, sorts the requests, places each
        one, and builds the result with atlas bounds and efficiency. The
        given requests are not modified.

        Args:
            requests: Rectangles to place.

        Returns:
            Result containing placements, dimensions, and diagnostics.
        """
        result = PackerResult()

        if not requests:
            result.add_error(
                PackerErrorCode.NO_FRAMES_PROVIDED,
                "No frames provided for packing",
            )
            return result

        try:
            self.options.validate()
            work = [r.clone() for r in requests]
            self._validate_requests(work)
            work = self._sort_requests(work)

            packed = self._pack_requests(work)
            if packed is None:
                result.add_error(
                    PackerErrorCode.CANNOT_FIT_ALL,
                    f"Cannot fit all {len(requests)} frames in a "
                    f"{self.packer.width}x{self.packer.height} canvas",
                    details={"canvas": (self.packer.width, self.packer.height)},
                )
                return result

            atlas_width = max(p.right for p in packed)
            atlas_height = max(p.bottom for p in packed)
            if atlas_width > self.options.max_width or atlas_height > self.options.max_height:
                result.add_error(
                    PackerErrorCode.CANNOT_FIT_ALL,
                    f"Cannot fit all {len(requests)} frames within "
                    f"{self.options.max_width}x{self.options.max_height}",
                    details={"atlas": (atlas_width, atlas_height)},
                )
                return result

            result.success = True
            result.packed = packed
            result.atlas_width = atlas_width
            result.atlas_height = atlas_height
            result.canvas_width = self.packer.width
            result.canvas_height = self.packer.height
            result.calculate_efficiency()

        except PackerError as e:
            result.add_error(e.code, e.message, e.details)

        return result

    def _pack_requests(self, requests: List[PackRequest]) -> Optional[List[PackedItem]]:
        """Allocate each request, padded, on a fresh packer.

        Returns:
            Unpadded placements in packing order, or None if any request
            could not be placed.
        """
        padding = self.options.padding
        self.packer = ShelfPack(
            self.options.width,
            self.options.height,
            auto_resize=self.options.auto_resize,
        )
        # Minted ids for requests without one must not collide with
        # integer ids supplied later in the batch.
        self.packer.max_id = max(
            (r.id for r in requests if is_bin_id(r.id) and isinstance(r.id, int)),
            default=0,
        )

        packed: List[PackedItem] = []
        for request in requests:
            bin = self.packer.allocate(
                request.width + padding, request.height + padding, request.id
            )
            if bin is None:
                logger.warning(
                    "Frame %r (%dx%d) does not fit", request.id, request.width, request.height
                )
                return None
            packed.append(PackedItem(bin.id, bin.x, bin.y, request.width, request.height))

        logger.debug(
            "Packed %d frames on %d shelves, canvas %dx%d",
            len(packed), len(self.packer.shelves), self.packer.width, self.packer.height,
        )
        return packed

    def _validate_requests(self, requests: List[PackRequest]) -> None:
        """Validate request sizes and ids.

        Args:
            requests: Requests to validate.

        Raises:
            PackerError: INVALID_FRAME_SIZE for non-positive sizes,
                DUPLICATE_ID for repeated ids.
            FrameTooLargeError: If a padded request exceeds the maximum
                atlas size.
        """
        padding = self.options.padding
        max_w = self.options.max_width
        max_h = self.options.max_height
        seen = set()

        for request in requests:
            if request.width <= 0 or request.height <= 0:
                raise PackerError(
                    PackerErrorCode.INVALID_FRAME_SIZE,
                    f"Frame '{request.id}' has invalid size "
                    f"{request.width}x{request.height}",
                    details={"frame_id": request.id},
                )

            if request.width + padding > max_w or request.height + padding > max_h:
                raise FrameTooLargeError(
                    PackerErrorCode.FRAME_TOO_LARGE,
                    f"Frame '{request.id}' ({request.width}x{request.height}) "
                    f"exceeds maximum dimensions ({max_w}x{max_h})",
                    details={"frame_id": request.id, "max_size": (max_w, max_h)},
                )

            if is_bin_id(request.id):
                key = (type(request.id), request.id)
                if key in seen:
                    raise PackerError(
                        PackerErrorCode.DUPLICATE_ID,
                        f"Frame id '{request.id}' is used more than once",
                        details={"frame_id": request.id},
                    )
                seen.add(key)

    def _sort_requests(self, requests: List[PackRequest]) -> List[PackRequest]:
        """Sort requests for better packing density.

        Args:
            requests: Requests to sort.

        Returns:
            Sorted list based on the configured sort strategy.
        """

        if self.options.sort_by_area:
            return sorted(requests, key=lambda r: r.width * r.height, reverse=True)
        elif self.options.sort_by_max_side:
            return sorted(
                requests,
                key=lambda r: (max(r.width, r.height), min(r.width, r.height)),
                reverse=True,
            )
        return requests


__all__ = ["SpriteLayout"]

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Tests for the sprite layout driver and packer option handling.

Usage:
    python -m pytest tests/test_layout.py -v
    python tests/test_layout.py  # Run directly
"""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

# Add src to path for imports
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from shelfpack.layout import SpriteLayout
from shelfpack.packer_types import (
    Bin,
    PackedItem,
    PackerError,
    PackerErrorCode,
    PackerOptions,
    PackerResult,
    PackRequest,
    is_bin_id,
)


class TestPackerOptions(unittest.TestCase):
    """Tests for option defaults, validation and dict conversion."""

    def test_defaults_validate(self):
        options = PackerOptions()
        options.validate()
        self.assertEqual((options.width, options.height), (1, 1))
        self.assertTrue(options.auto_resize)

    def test_invalid_width(self):
        with self.assertRaises(PackerError) as ctx:
            PackerOptions(width=0).validate()
        self.assertEqual(ctx.exception.code, PackerErrorCode.INVALID_OPTIONS)
        self.assertEqual(ctx.exception.details["option"], "width")

    def test_negative_padding(self):
        with self.assertRaises(PackerError) as ctx:
            PackerOptions(padding=-1).validate()
        self.assertEqual(ctx.exception.details["option"], "padding")

    def test_boolean_padding(self):
        with self.assertRaises(PackerError) as ctx:
            PackerOptions(padding=True).validate()
        self.assertEqual(ctx.exception.code, PackerErrorCode.INVALID_OPTIONS)
        self.assertEqual(ctx.exception.details["option"], "padding")

    def test_from_dict_merges_defaults(self):
        options = PackerOptions.from_dict({"width": 32, "unknown": 1})
        self.assertEqual(options.width, 32)
        self.assertEqual(options.height, 1)
        self.assertEqual(options.to_dict()["width"], 32)


class TestTypes(unittest.TestCase):
    """Tests for the small value types."""

    def test_bin_envelope_defaults_to_size(self):
        bin = Bin("a", 1, 2, 3, 4)
        self.assertEqual((bin.max_width, bin.max_height), (3, 4))
        self.assertEqual((bin.right, bin.bottom, bin.area), (4, 6, 12))
        self.assertEqual(bin.refcount, 0)

    def test_bin_waste(self):
        bin = Bin("a", 0, 0, 10, 10, max_width=10, max_height=12)
        self.assertTrue(bin.fits(10, 12))
        self.assertFalse(bin.fits(11, 1))
        self.assertEqual(bin.waste_for(5, 10), 70)

    def test_is_bin_id(self):
        self.assertTrue(is_bin_id("a"))
        self.assertTrue(is_bin_id(0))
        self.assertFalse(is_bin_id(False))
        self.assertFalse(is_bin_id(None))
        self.assertFalse(is_bin_id(1.0))

    def test_error_string(self):
        error = PackerError(PackerErrorCode.CANNOT_FIT_ALL, "no room")
        self.assertEqual(str(error), "[cannot_fit_all] no room")
        self.assertEqual(error.details, {})

    def test_result_placement_lookup(self):
        result = PackerResult(packed=[PackedItem(1, 0, 0, 2, 2), PackedItem("1", 2, 0, 2, 2)])
        self.assertEqual(result.placement("1").x, 2)
        self.assertEqual(result.placement(1).x, 0)
        self.assertIsNone(result.placement("missing"))


class TestSpriteLayout(unittest.TestCase):
    """Tests for SpriteLayout.pack."""

    def test_no_frames(self):
        result = SpriteLayout().pack([])
        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, PackerErrorCode.NO_FRAMES_PROVIDED)

    def test_largest_area_packed_first(self):
        requests = [PackRequest("small", 5, 5), PackRequest("big", 10, 10)]
        result = SpriteLayout().pack(requests)

        self.assertTrue(result.success)
        self.assertEqual([p.id for p in result.packed], ["big", "small"])
        self.assertEqual(result.placement("big"), PackedItem("big", 0, 0, 10, 10))
        self.assertEqual(result.placement("small"), PackedItem("small", 10, 0, 5, 5))
        self.assertEqual((result.atlas_width, result.atlas_height), (15, 10))
        self.assertEqual((result.canvas_width, result.canvas_height), (20, 20))
        self.assertAlmostEqual(result.efficiency, 125 / 150)

    def test_input_order_when_unsorted(self):
        options = PackerOptions(sort_by_area=False)
        requests = [PackRequest("small", 5, 5), PackRequest("big", 10, 10)]
        result = SpriteLayout(options).pack(requests)

        self.assertTrue(result.success)
        self.assertEqual([p.id for p in result.packed], ["small", "big"])
        self.assertEqual((result.placement("big").x, result.placement("big").y), (0, 5))
        self.assertEqual((result.atlas_width, result.atlas_height), (10, 15))
        self.assertEqual((result.canvas_width, result.canvas_height), (20, 20))

    def test_sort_by_max_side(self):
        options = PackerOptions(sort_by_area=False, sort_by_max_side=True)
        requests = [
            PackRequest("square", 6, 6),
            PackRequest("long", 2, 10),
            PackRequest("tiny", 1, 1),
        ]
        result = SpriteLayout(options).pack(requests)
        self.assertEqual([p.id for p in result.packed], ["long", "square", "tiny"])

    def test_padding_reserved_between_frames(self):
        options = PackerOptions(padding=2)
        requests = [PackRequest("a", 10, 10), PackRequest("b", 10, 10)]
        result = SpriteLayout(options).pack(requests)

        self.assertTrue(result.success)
        self.assertEqual(result.placement("a"), PackedItem("a", 0, 0, 10, 10))
        self.assertEqual(result.placement("b"), PackedItem("b", 12, 0, 10, 10))
        self.assertEqual((result.atlas_width, result.atlas_height), (22, 10))

    def test_requests_not_modified(self):
        request = PackRequest(None, 4, 4)
        result = SpriteLayout().pack([request])

        self.assertTrue(result.success)
        self.assertEqual(result.packed[0].id, 1)
        self.assertIsNone(request.id)
        self.assertIsNone(request.x)

    def test_minted_ids_avoid_explicit_integer_ids(self):
        layout = SpriteLayout()
        result = layout.pack([PackRequest(None, 10, 10), PackRequest(1, 5, 5)])

        self.assertTrue(result.success)
        self.assertEqual(result.packed[0], PackedItem(2, 0, 0, 10, 10))
        self.assertEqual(result.placement(1), PackedItem(1, 10, 0, 5, 5))
        self.assertEqual(len(layout.packer.bins), 2)
        self.assertEqual(layout.packer.find_overlaps(), [])
        self.assertAlmostEqual(result.efficiency, 125 / 150)

    def test_invalid_frame_size(self):
        result = SpriteLayout().pack([PackRequest("a", 0, 4)])
        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, PackerErrorCode.INVALID_FRAME_SIZE)

    def test_frame_too_large(self):
        options = PackerOptions(max_width=50, max_height=50)
        result = SpriteLayout(options).pack([PackRequest("a", 60, 10)])
        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, PackerErrorCode.FRAME_TOO_LARGE)
        self.assertEqual(result.errors[0].details["max_size"], (50, 50))

    def test_duplicate_ids(self):
        requests = [PackRequest("a", 4, 4), PackRequest("a", 2, 2)]
        result = SpriteLayout().pack(requests)
        self.assertEqual(result.errors[0].code, PackerErrorCode.DUPLICATE_ID)

    def test_cannot_fit_without_auto_resize(self):
        options = PackerOptions(width=10, height=10, auto_resize=False)
        requests = [PackRequest("a", 10, 10), PackRequest("b", 10, 10)]

        with self.assertLogs("shelfpack.layout", level="WARNING"):
            result = SpriteLayout(options).pack(requests)

        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, PackerErrorCode.CANNOT_FIT_ALL)
        self.assertEqual(result.packed, [])

    def test_atlas_exceeds_maximum(self):
        options = PackerOptions(max_width=15, max_height=15)
        requests = [PackRequest("a", 10, 10), PackRequest("b", 10, 10)]
        result = SpriteLayout(options).pack(requests)

        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, PackerErrorCode.CANNOT_FIT_ALL)
        self.assertEqual(result.errors[0].details["atlas"], (20, 10))

    def test_invalid_options_reported(self):
        result = SpriteLayout(PackerOptions(height=-3)).pack([PackRequest("a", 1, 1)])
        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, PackerErrorCode.INVALID_OPTIONS)

    def test_packer_kept_for_inspection(self):
        layout = SpriteLayout()
        layout.pack([PackRequest("a", 3, 3), PackRequest("b", 3, 3)])
        self.assertIsNotNone(layout.packer)
        self.assertEqual(layout.packer.find_overlaps(), [])
        self.assertEqual(len(layout.packer.bins), 2)


if __name__ == "__main__":
    unittest.main()

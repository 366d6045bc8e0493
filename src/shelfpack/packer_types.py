#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Shared data types for the shelf packer.

Defines the bin record handed out by the packer, the request and result
records used for batch packing, configuration options, and the error
types raised or collected during packing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

BinId = Union[str, int]


def is_bin_id(value: Any) -> bool:
    """Return True if ``value`` can be used as a stable bin key.

    Strings and integers are accepted. ``bool`` is rejected even though it
    subclasses ``int``.
    """
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int))


class PackerErrorCode(Enum):
    """Error categories reported by the packer and the layout driver."""

    NO_FRAMES_PROVIDED = "no_frames_provided"
    INVALID_FRAME_SIZE = "invalid_frame_size"
    FRAME_TOO_LARGE = "frame_too_large"
    DUPLICATE_ID = "duplicate_id"
    CANNOT_FIT_ALL = "cannot_fit_all"
    INVALID_DIMENSIONS = "invalid_dimensions"
    INVALID_OPTIONS = "invalid_options"
    GROWTH_STALLED = "growth_stalled"
    UNKNOWN_ERROR = "unknown_error"


class PackerError(Exception):
    """Base exception for packing failures.

    Attributes:
        code: Category of the failure.
        message: Human readable description.
        details: Extra context (ids, sizes) for diagnostics.
    """

    def __init__(
        self,
        code: PackerErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class FrameTooLargeError(PackerError):
    """Raised when a request exceeds the configured maximum atlas size."""


@dataclass
class Bin:
    """One placed, or released and reusable, rectangle.

    ``max_width`` and ``max_height`` describe the footprint reserved in the
    canvas. The current ``width``/``height`` may be smaller when a released
    bin has been reused for a smaller request.

    Attributes:
        id: Key the bin is registered under.
        x: Left coordinate.
        y: Top coordinate.
        width: Current width.
        height: Current height.
        max_width: Reserved width (defaults to ``width``).
        max_height: Reserved height (defaults to ``height``).
        refcount: Number of outstanding allocations of this id.
    """

    id: BinId
    x: int
    y: int
    width: int
    height: int
    max_width: int = 0
    max_height: int = 0
    refcount: int = 0

    def __post_init__(self) -> None:
        if not self.max_width:
            self.max_width = self.width
        if not self.max_height:
            self.max_height = self.height

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def fits(self, width: int, height: int) -> bool:
        """Return True if a ``width`` x ``height`` request fits the envelope."""
        return width <= self.max_width and height <= self.max_height

    def waste_for(self, width: int, height: int) -> int:
        """Return the envelope area left unused by a request of this size."""
        return self.max_width * self.max_height - width * height


@dataclass
class PackRequest:
    """A rectangle to be placed.

    ``x`` and ``y`` stay None until the request is packed in place.
    """

    id: Optional[BinId]
    width: int
    height: int
    x: Optional[int] = None
    y: Optional[int] = None

    @property
    def area(self) -> int:
        return self.width * self.height

    def clone(self) -> "PackRequest":
        return PackRequest(self.id, self.width, self.height, self.x, self.y)


@dataclass(frozen=True)
class PackedItem:
    """Placement of a single request."""

    id: BinId
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @classmethod
    def from_bin(cls, bin: Bin) -> "PackedItem":
        return cls(bin.id, bin.x, bin.y, bin.width, bin.height)


@dataclass
class PackerOptions:
    """Configuration for the packer and the sprite layout driver.

    Attributes:
        width: Initial canvas width.
        height: Initial canvas height.
        auto_resize: Grow the canvas instead of failing when nothing fits.
        padding: Extra pixels reserved to the right of and below each item.
        sort_by_area: Pack largest-area requests first.
        sort_by_max_side: Pack requests with the longest side first.
            Ignored when ``sort_by_area`` is set.
        max_width: Largest atlas width the layout driver accepts.
        max_height: Largest atlas height the layout driver accepts.
    """

    width: int = 1
    height: int = 1
    auto_resize: bool = True
    padding: int = 0
    sort_by_area: bool = True
    sort_by_max_side: bool = False
    max_width: int = 16384
    max_height: int = 16384

    def validate(self) -> None:
        """Check option values.

        Raises:
            PackerError: With code INVALID_OPTIONS on the first bad value.
        """
        for name in ("width", "height", "max_width", "max_height"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise PackerError(
                    PackerErrorCode.INVALID_OPTIONS,
                    f"Option '{name}' must be a positive integer, got {value!r}",
                    details={"option": name, "value": value},
                )
        if (
            not isinstance(self.padding, int)
            or isinstance(self.padding, bool)
            or self.padding < 0
        ):
            raise PackerError(
                PackerErrorCode.INVALID_OPTIONS,
                f"Option 'padding' must be a non-negative integer, got {self.padding!r}",
                details={"option": "padding", "value": self.padding},
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PackerOptions":
        """Build options from a mapping, filling missing keys with defaults.

        Unknown keys are ignored.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PackerResult:
    """Outcome of a batch layout, including diagnostics.

    Attributes:
        success: True when every request was placed.
        packed: Placements in packing order.
        atlas_width: Tight width covering every placement.
        atlas_height: Tight height covering every placement.
        canvas_width: Final canvas width of the underlying packer.
        canvas_height: Final canvas height of the underlying packer.
        efficiency: Placed area divided by atlas area.
        errors: Errors collected while packing.
    """

    success: bool = False
    packed: List[PackedItem] = field(default_factory=list)
    atlas_width: int = 0
    atlas_height: int = 0
    canvas_width: int = 0
    canvas_height: int = 0
    efficiency: float = 0.0
    errors: List[PackerError] = field(default_factory=list)

    def add_error(
        self,
        code: PackerErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.errors.append(PackerError(code, message, details))
        self.success = False

    def calculate_efficiency(self) -> float:
        """Compute and store the ratio of placed area to atlas area."""
        atlas_area = self.atlas_width * self.atlas_height
        used_area = sum(p.width * p.height for p in self.packed)
        self.efficiency = used_area / atlas_area if atlas_area > 0 else 0.0
        return self.efficiency

    def placement(self, bin_id: BinId) -> Optional[PackedItem]:
        """Return the placement for ``bin_id`` or None."""
        for item in self.packed:
            if item.id == bin_id and type(item.id) is type(bin_id):
                return item
        return None


__all__ = [
    "BinId",
    "Bin",
    "PackRequest",
    "PackedItem",
    "PackerOptions",
    "PackerResult",
    "PackerError",
    "PackerErrorCode",
    "FrameTooLargeError",
    "is_bin_id",
]

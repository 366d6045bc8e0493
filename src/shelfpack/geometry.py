#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Overlap checks for placed rectangles.

Rectangles are ``(key, x, y, width, height)`` tuples. Rectangles that only
share an edge do not overlap.
"""

from __future__ import annotations

from typing import Hashable, List, Sequence, Tuple

import numpy as np

Rect = Tuple[Hashable, int, int, int, int]

# Above this many rectangles the vectorized check is used.
_NUMPY_THRESHOLD = 20


def rects_intersect(a: Rect, b: Rect) -> bool:
    """Return True if the interiors of ``a`` and ``b`` intersect."""
    _, ax, ay, aw, ah = a
    _, bx, by, bw, bh = b
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah


def find_overlaps(rects: Sequence[Rect]) -> List[Tuple[Hashable, Hashable]]:
    """Return the key pairs of every two rectangles that overlap.

    Pairs are ordered by the position of their first member in ``rects``.

    Args:
        rects: Rectangles to check.

    Returns:
        List of ``(key_a, key_b)`` tuples, empty when nothing overlaps.
    """
    if len(rects) <= 1:
        return []
    if len(rects) > _NUMPY_THRESHOLD:
        return _find_overlaps_numpy(rects)
    return _find_overlaps_simple(rects)


def _find_overlaps_simple(rects: Sequence[Rect]) -> List[Tuple[Hashable, Hashable]]:
    pairs = []
    for i in range(len(rects)):
        for j in range(i + 1, len(rects)):
            if rects_intersect(rects[i], rects[j]):
                pairs.append((rects[i][0], rects[j][0]))
    return pairs


def _find_overlaps_numpy(rects: Sequence[Rect]) -> List[Tuple[Hashable, Hashable]]:
    """Vectorized pairwise check, one row of comparisons per rectangle."""
    n = len(rects)
    boxes = np.array(
        [(x, y, x + w, y + h) for _, x, y, w, h in rects],
        dtype=np.int64,
    )

    pairs = []
    for i in range(n - 1):
        rest = boxes[i + 1 :]
        hits = (
            (boxes[i, 0] < rest[:, 2])
            & (rest[:, 0] < boxes[i, 2])
            & (boxes[i, 1] < rest[:, 3])
            & (rest[:, 1] < boxes[i, 3])
        )
        for offset in np.nonzero(hits)[0]:
            pairs.append((rects[i][0], rects[i + 1 + int(offset)][0]))
    return pairs


__all__ = ["Rect", "find_overlaps", "rects_intersect"]

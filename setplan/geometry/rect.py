"""Axis-aligned rectangle helpers in canvas pixel space."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from ..model import PlanSet, Rect


def pixel_size(plan_set: PlanSet, scale: float) -> Tuple[float, float]:
    """Rendered ``(w, h)`` in pixels; 90/270 degree rotation swaps the sides."""

    w = plan_set.width * scale
    h = plan_set.height * scale
    if plan_set.rotation.is_quarter_turn:
        return h, w
    return w, h


def aabb(plan_set: PlanSet, scale: float) -> Rect:
    w, h = pixel_size(plan_set, scale)
    return Rect(plan_set.x, plan_set.y, w, h)


def overlap_rect(a: Rect, b: Rect) -> Optional[Rect]:
    """Intersection of ``a`` and ``b``, or ``None`` when they only touch or are apart."""

    x1 = max(a.x, b.x)
    y1 = max(a.y, b.y)
    x2 = min(a.right, b.right)
    y2 = min(a.bottom, b.bottom)
    if x2 <= x1 or y2 <= y1:
        return None
    return Rect(x1, y1, x2 - x1, y2 - y1)


def rect_array(rects: Iterable[Rect]) -> np.ndarray:
    """Stack rectangles into an ``(n, 4)`` array of ``x, y, w, h`` rows."""

    data = [(r.x, r.y, r.w, r.h) for r in rects]
    return np.asarray(data, dtype=float).reshape(len(data), 4)


def pairwise_overlap_areas(boxes: np.ndarray) -> np.ndarray:
    """Return the ``(n, n)`` matrix of overlap areas for ``x, y, w, h`` rows."""

    x1 = boxes[:, 0]
    y1 = boxes[:, 1]
    x2 = x1 + boxes[:, 2]
    y2 = y1 + boxes[:, 3]
    ox = np.minimum(x2[:, None], x2[None, :]) - np.maximum(x1[:, None], x1[None, :])
    oy = np.minimum(y2[:, None], y2[None, :]) - np.maximum(y1[:, None], y1[None, :])
    return np.clip(ox, 0.0, None) * np.clip(oy, 0.0, None)


def total_overlap_area(boxes: np.ndarray) -> float:
    """Sum of overlap areas over unordered pairs ``i < j``."""

    if len(boxes) < 2:
        return 0.0
    areas = pairwise_overlap_areas(boxes)
    return float(np.triu(areas, k=1).sum())


def has_overlaps(sets: Sequence[PlanSet], scale: float) -> bool:
    boxes = rect_array(aabb(s, scale) for s in sets)
    if len(boxes) < 2:
        return False
    return bool(np.triu(pairwise_overlap_areas(boxes), k=1).max() > 0.0)

"""Deterministic shelf packing used as the optimizer's starting arrangement."""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, List, Optional, Sequence

from ..geometry.rect import pixel_size
from ..model import PlanSet, SetId
from .config import PackingConfig, get_packing_config

logger = logging.getLogger(__name__)


def _pixel_area(plan_set: PlanSet, scale: float) -> float:
    w, h = pixel_size(plan_set, scale)
    return w * h


def bin_pack(
    sets: Sequence[PlanSet],
    scale: float,
    canvas_width: Optional[float],
    fixed_ids: AbstractSet[SetId] = frozenset(),
    config: Optional[PackingConfig] = None,
) -> List[PlanSet]:
    """Place non-fixed sets left to right on shelves, largest rendered area first.

    Shelves start at ``(padding, padding)``; an item that would cross
    ``canvas_width`` opens a new shelf unless it is the first on its shelf.
    Fixed sets are returned unchanged.  The result keeps the input order.
    """

    config = config or get_packing_config()
    padding = config.padding
    max_width = canvas_width or config.fallback_canvas_width

    movable = [s for s in sets if s.id not in fixed_ids]
    by_area = sorted(movable, key=lambda s: -_pixel_area(s, scale))

    placed: Dict[SetId, PlanSet] = {}
    cur_x = padding
    cur_y = padding
    shelf_height = 0.0
    shelves = 1
    for plan_set in by_area:
        w, h = pixel_size(plan_set, scale)
        if cur_x + w + padding > max_width and cur_x > padding:
            cur_x = padding
            cur_y += shelf_height + padding
            shelf_height = 0.0
            shelves += 1
        placed[plan_set.id] = plan_set.moved_to(cur_x, cur_y)
        cur_x += w + padding
        shelf_height = max(shelf_height, h)

    logger.debug(
        "Packed %d set(s) on %d shelf/shelves within %.1fpx, %d fixed",
        len(placed),
        shelves if placed else 0,
        max_width,
        len(sets) - len(movable),
    )
    return [placed.get(s.id, s) for s in sets]

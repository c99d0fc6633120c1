"""Rectilinear outline of a set after rectangular cutouts.

Each cutout is subtracted from the polygon left by the previous ones: the
current polygon and the (clipped) cutout induce a coordinate grid, grid cells
inside the polygon but outside the cutout are kept, and the outline of the
kept cells is traced back into a clockwise vertex list (screen orientation,
y pointing down).

The tracer returns a single ring.  A remainder that falls apart into several
pieces, or that encloses a hole, is reduced to the ring that contains the
top-left-most kept cell and a warning is logged.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..logging_utils import apply_debug_logging
from ..model import Cutout, PlanSet, Point, Rect, Rotation

logger = logging.getLogger(__name__)

# Cutouts thinner than this (in units) after clipping are ignored.
MIN_CUT_SIZE = 0.01
# Grid coordinates are rounded to this many decimals to merge near-duplicate lines.
GRID_DECIMALS = 3
EPSILON = 1e-3

Edge = Tuple[Point, Point]


def rectangle_polygon(width: float, height: float) -> List[Point]:
    w = float(width)
    h = float(height)
    return [(0.0, 0.0), (w, 0.0), (w, h), (0.0, h)]


def polygon_bounds(vertices: Sequence[Point]) -> Tuple[float, float, float, float]:
    xs = [p[0] for p in vertices]
    ys = [p[1] for p in vertices]
    return min(xs), min(ys), max(xs), max(ys)


def polygon_area(vertices: Sequence[Point]) -> float:
    """Absolute shoelace area of a simple polygon."""

    if len(vertices) < 3:
        return 0.0
    pts = np.asarray(vertices, dtype=float)
    x = pts[:, 0]
    y = pts[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def _points_in_polygon(px: np.ndarray, py: np.ndarray, vertices: Sequence[Point]) -> np.ndarray:
    """Even-odd ray casting for every point of ``px``/``py`` at once."""

    inside = np.zeros(np.shape(px), dtype=bool)
    count = len(vertices)
    for i in range(count):
        xi, yi = vertices[i]
        xj, yj = vertices[i - 1]
        if yi == yj:
            # Horizontal edges never straddle a ray.
            continue
        straddles = (yi > py) != (yj > py)
        x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
        inside ^= straddles & (px < x_cross)
    return inside


def point_in_polygon(x: float, y: float, vertices: Sequence[Point]) -> bool:
    if len(vertices) < 3:
        return False
    return bool(_points_in_polygon(np.asarray(x, dtype=float), np.asarray(y, dtype=float), vertices))


def _grid_lines(values: Sequence[float]) -> List[float]:
    return sorted({round(float(v), GRID_DECIMALS) for v in values})


def _boundary_edges(filled: np.ndarray, xs: Sequence[float], ys: Sequence[float]) -> List[Edge]:
    """Clockwise unit edges between kept cells and empty cells (or the grid border)."""

    padded = np.pad(filled, 1, constant_values=False)
    edges: List[Edge] = []
    for r, c in zip(*np.nonzero(filled)):
        x0, x1 = xs[c], xs[c + 1]
        y0, y1 = ys[r], ys[r + 1]
        pr, pc = r + 1, c + 1
        if not padded[pr - 1, pc]:
            edges.append(((x0, y0), (x1, y0)))
        if not padded[pr, pc + 1]:
            edges.append(((x1, y0), (x1, y1)))
        if not padded[pr + 1, pc]:
            edges.append(((x1, y1), (x0, y1)))
        if not padded[pr, pc - 1]:
            edges.append(((x0, y1), (x0, y0)))
    return edges


def _chain_edges(edges: Sequence[Edge]) -> List[Point]:
    """Walk edges end-to-start from the first edge and return the ring's vertices."""

    starts: Dict[Point, List[int]] = {}
    for idx, (start, _) in enumerate(edges):
        starts.setdefault(start, []).append(idx)

    used = [False] * len(edges)
    used[0] = True
    current = edges[0]
    ring = [current[0]]
    for _ in range(len(edges) - 1):
        nxt: Optional[int] = next((i for i in starts.get(current[1], ()) if not used[i]), None)
        if nxt is None:
            break
        used[nxt] = True
        current = edges[nxt]
        ring.append(current[0])

    leftover = used.count(False)
    if leftover:
        logger.warning(
            "Cut outline is not a single ring; %d of %d boundary edges were dropped",
            leftover,
            len(edges),
        )
    return ring


def _merge_collinear(ring: Sequence[Point]) -> List[Point]:
    count = len(ring)
    if count < 3:
        return list(ring)
    kept: List[Point] = []
    for i, (x, y) in enumerate(ring):
        px, py = ring[i - 1]
        nx, ny = ring[(i + 1) % count]
        # Traced edges are axis-aligned; a corner joins a horizontal and a vertical edge.
        incoming_horizontal = abs(y - py) <= abs(x - px)
        outgoing_horizontal = abs(ny - y) <= abs(nx - x)
        if incoming_horizontal != outgoing_horizontal:
            kept.append((x, y))
    return kept


def _apply_cutout(polygon: List[Point], cut: Cutout) -> List[Point]:
    if not polygon:
        return polygon

    min_x, min_y, max_x, max_y = polygon_bounds(polygon)
    cx1 = max(min_x, cut.x)
    cy1 = max(min_y, cut.y)
    cx2 = min(max_x, cut.x + cut.w)
    cy2 = min(max_y, cut.y + cut.h)
    if cx2 - cx1 < MIN_CUT_SIZE or cy2 - cy1 < MIN_CUT_SIZE:
        logger.debug("Skipping degenerate cutout %s", cut)
        return polygon

    xs = _grid_lines([p[0] for p in polygon] + [cx1, cx2])
    ys = _grid_lines([p[1] for p in polygon] + [cy1, cy2])
    if len(xs) < 2 or len(ys) < 2:
        return polygon

    mid_x = (np.asarray(xs[:-1]) + np.asarray(xs[1:])) / 2.0
    mid_y = (np.asarray(ys[:-1]) + np.asarray(ys[1:])) / 2.0
    cell_x, cell_y = np.meshgrid(mid_x, mid_y)

    in_polygon = _points_in_polygon(cell_x, cell_y, polygon)
    in_cut = (
        (cell_x > cx1 - EPSILON)
        & (cell_x < cx2 + EPSILON)
        & (cell_y > cy1 - EPSILON)
        & (cell_y < cy2 + EPSILON)
    )
    filled = in_polygon & ~in_cut

    edges = _boundary_edges(filled, xs, ys)
    if not edges:
        logger.info("Cutout %s removes the whole remaining shape", cut)
        return []
    return _merge_collinear(_chain_edges(edges))


def compute_cutout_polygon(width: float, height: float, cutouts: Sequence[Cutout] = ()) -> List[Point]:
    """Outline of the ``width`` x ``height`` rectangle minus ``cutouts``, in local units.

    Cutouts are applied in order, each against the polygon left by the
    previous ones.  Without cutouts the result is exactly
    ``[(0, 0), (w, 0), (w, h), (0, h)]``; a fully consumed shape yields ``[]``.
    """

    polygon = rectangle_polygon(width, height)
    for cut in cutouts:
        polygon = _apply_cutout(polygon, cut)
    return polygon


def map_overlap_to_local_cutout(overlap: Rect, target: PlanSet, scale: float) -> Cutout:
    """Express a canvas-pixel overlap as a cutout in ``target``'s unrotated local frame."""

    dx = (overlap.x - target.x) / scale
    dy = (overlap.y - target.y) / scale
    ow = overlap.w / scale
    oh = overlap.h / scale
    set_w = target.width
    set_h = target.height

    rotation = target.rotation
    if rotation is Rotation.DEG_90:
        return Rect(dy, set_h - dx - ow, oh, ow)
    if rotation is Rotation.DEG_180:
        return Rect(set_w - dx - ow, set_h - dy - oh, ow, oh)
    if rotation is Rotation.DEG_270:
        return Rect(set_w - dy - oh, dx, oh, ow)
    return Rect(dx, dy, ow, oh)


apply_debug_logging(globals(), logger=logger, skip={"point_in_polygon"})

"""Rectangle and cutout geometry."""

from .cutout import (
    compute_cutout_polygon,
    map_overlap_to_local_cutout,
    point_in_polygon,
    polygon_area,
    rectangle_polygon,
)
from .rect import (
    aabb,
    has_overlaps,
    overlap_rect,
    pairwise_overlap_areas,
    pixel_size,
)

__all__ = [
    "aabb",
    "compute_cutout_polygon",
    "has_overlaps",
    "map_overlap_to_local_cutout",
    "overlap_rect",
    "pairwise_overlap_areas",
    "pixel_size",
    "point_in_polygon",
    "polygon_area",
    "rectangle_polygon",
]

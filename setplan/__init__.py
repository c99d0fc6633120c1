from .model import Cutout, PlanSet, Rect, Rotation, Rule, RuleType
from .validate import validate, validate_rule, validate_set, ValidationError
from .geometry import (
    aabb,
    compute_cutout_polygon,
    has_overlaps,
    map_overlap_to_local_cutout,
    overlap_rect,
    polygon_area,
)
from .layout import (
    bin_pack,
    compute_alternate_layout,
    compute_layout,
    run_alternate_layout,
    run_layout,
    score_arrangement,
    score_breakdown,
    LayoutResult,
    PackingConfig,
    ScoreBreakdown,
    ScoringWeights,
)
from .project import Project, CutError, load_project, save_project

__all__ = [
    'Cutout',
    'PlanSet',
    'Rect',
    'Rotation',
    'Rule',
    'RuleType',
    'validate',
    'validate_rule',
    'validate_set',
    'ValidationError',
    'aabb',
    'compute_cutout_polygon',
    'has_overlaps',
    'map_overlap_to_local_cutout',
    'overlap_rect',
    'polygon_area',
    'bin_pack',
    'compute_alternate_layout',
    'compute_layout',
    'run_alternate_layout',
    'run_layout',
    'score_arrangement',
    'score_breakdown',
    'LayoutResult',
    'PackingConfig',
    'ScoreBreakdown',
    'ScoringWeights',
    'Project',
    'CutError',
    'load_project',
    'save_project',
]

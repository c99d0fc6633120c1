"""Layout façade: scoring, shelf packing and the hill-climbing optimizer."""

from __future__ import annotations

import logging

from .config import (
    PackingConfig,
    ScoringWeights,
    get_packing_config,
    get_scoring_weights,
    set_packing_config,
    set_scoring_weights,
)
from .optimizer import (
    LayoutResult,
    compute_alternate_layout,
    compute_layout,
    fixed_set_ids,
    run_alternate_layout,
    run_layout,
)
from .packing import bin_pack
from .scoring import ScoreBreakdown, score_arrangement, score_breakdown

logger = logging.getLogger(__name__)

if not logging.getLogger().handlers:  # pragma: no cover - depends on host application
    logging.basicConfig(level=logging.INFO)


__all__ = [
    "LayoutResult",
    "PackingConfig",
    "ScoreBreakdown",
    "ScoringWeights",
    "bin_pack",
    "compute_alternate_layout",
    "compute_layout",
    "fixed_set_ids",
    "get_packing_config",
    "get_scoring_weights",
    "run_alternate_layout",
    "run_layout",
    "score_arrangement",
    "score_breakdown",
    "set_packing_config",
    "set_scoring_weights",
]

"""Arrangement badness score: weighted overlap plus rule violations.

The score of ``n`` sets is

    W_overlap * sum_{i<j} overlap_area(i, j)
  + sum over rules of
      NEAR      W_near     * (center_dist - d*scale)   when farther than d*scale
      SEPARATE  W_separate * (d*scale - center_dist)   when closer than d*scale
      CONNECT   W_connect  * edge_gap                  when the gap exceeds the tolerance
      FIXED     0 (fixed sets are never moved by the optimizer)

All distances are canvas pixels.  Rules that name a set missing from the
arrangement are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from ..geometry.rect import aabb, rect_array, total_overlap_area
from ..logging_utils import apply_debug_logging
from ..model import PlanSet, Rule, RuleType, SetId
from .config import ScoringWeights, get_scoring_weights

logger = logging.getLogger(__name__)


@dataclass
class CompiledRules:
    """Scorable rules resolved to row indices of a box array."""

    rule_ids: List[SetId] = field(default_factory=list)
    kinds: List[RuleType] = field(default_factory=list)
    index_a: List[int] = field(default_factory=list)
    index_b: List[int] = field(default_factory=list)
    thresholds: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rule_ids)


@dataclass
class ScoreBreakdown:
    overlap_area: float
    overlap_penalty: float
    rule_penalties: Dict[SetId, float]
    total: float


def compile_rules(
    rules: Sequence[Rule],
    index: Mapping[SetId, int],
    scale: float,
    weights: Optional[ScoringWeights] = None,
) -> CompiledRules:
    weights = weights or get_scoring_weights()
    compiled = CompiledRules()
    for rule in rules:
        if rule.type is RuleType.FIXED:
            continue
        if rule.set_a not in index or rule.set_b not in index:
            logger.debug("Skipping rule %r: references a set outside the arrangement", rule.id)
            continue
        # A missing or zero distance falls back to the default threshold.
        distance = rule.distance or weights.default_distance
        compiled.rule_ids.append(rule.id)
        compiled.kinds.append(rule.type)
        compiled.index_a.append(index[rule.set_a])
        compiled.index_b.append(index[rule.set_b])
        compiled.thresholds.append(float(distance) * scale)
    return compiled


def rule_penalties(boxes: np.ndarray, compiled: CompiledRules, weights: ScoringWeights) -> np.ndarray:
    """Penalty of each compiled rule for the ``x, y, w, h`` rows in ``boxes``."""

    if not len(compiled):
        return np.zeros(0)

    a = boxes[compiled.index_a]
    b = boxes[compiled.index_b]
    center_a = a[:, :2] + a[:, 2:] / 2.0
    center_b = b[:, :2] + b[:, 2:] / 2.0
    center_dist = np.hypot(*(center_a - center_b).T)

    gap = np.maximum(a[:, :2], b[:, :2]) - np.minimum(a[:, :2] + a[:, 2:], b[:, :2] + b[:, 2:])
    gap = np.clip(gap, 0.0, None)
    edge_dist = np.hypot(gap[:, 0], gap[:, 1])

    thresholds = np.asarray(compiled.thresholds)
    near = np.array([kind is RuleType.NEAR for kind in compiled.kinds])
    separate = np.array([kind is RuleType.SEPARATE for kind in compiled.kinds])
    connect = np.array([kind is RuleType.CONNECT for kind in compiled.kinds])

    penalties = np.zeros(len(compiled))
    too_far = near & (center_dist > thresholds)
    penalties[too_far] = (center_dist - thresholds)[too_far] * weights.near
    too_close = separate & (center_dist < thresholds)
    penalties[too_close] = (thresholds - center_dist)[too_close] * weights.separate
    apart = connect & (edge_dist > weights.connect_tolerance)
    penalties[apart] = edge_dist[apart] * weights.connect
    return penalties


def score_boxes(boxes: np.ndarray, compiled: CompiledRules, weights: ScoringWeights) -> float:
    overlap = total_overlap_area(boxes) * weights.overlap
    return overlap + float(rule_penalties(boxes, compiled, weights).sum())


def arrangement_boxes(sets: Sequence[PlanSet], scale: float) -> np.ndarray:
    return rect_array(aabb(s, scale) for s in sets)


def set_index(sets: Sequence[PlanSet]) -> Dict[SetId, int]:
    return {s.id: idx for idx, s in enumerate(sets)}


def score_breakdown(
    sets: Sequence[PlanSet],
    rules: Sequence[Rule],
    scale: float,
    weights: Optional[ScoringWeights] = None,
) -> ScoreBreakdown:
    weights = weights or get_scoring_weights()
    boxes = arrangement_boxes(sets, scale)
    compiled = compile_rules(rules, set_index(sets), scale, weights)
    area = total_overlap_area(boxes)
    penalties = rule_penalties(boxes, compiled, weights)
    overlap_penalty = area * weights.overlap
    return ScoreBreakdown(
        overlap_area=area,
        overlap_penalty=overlap_penalty,
        rule_penalties={rule_id: float(p) for rule_id, p in zip(compiled.rule_ids, penalties)},
        total=overlap_penalty + float(penalties.sum()),
    )


def score_arrangement(
    sets: Sequence[PlanSet],
    rules: Sequence[Rule],
    scale: float,
    weights: Optional[ScoringWeights] = None,
) -> float:
    """Return the non-negative badness score of ``sets`` under ``rules``."""

    weights = weights or get_scoring_weights()
    compiled = compile_rules(rules, set_index(sets), scale, weights)
    return score_boxes(arrangement_boxes(sets, scale), compiled, weights)


apply_debug_logging(
    globals(),
    logger=logger,
    skip={"compile_rules", "rule_penalties", "score_boxes", "arrangement_boxes", "set_index"},
)

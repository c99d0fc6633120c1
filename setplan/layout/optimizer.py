"""Hill-climbing layout optimizer on top of the shelf packer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence, Union

import numpy as np

from ..model import PlanSet, Rule, RuleType, SetId
from .config import PackingConfig, ScoringWeights, get_packing_config, get_scoring_weights
from .packing import bin_pack
from .scoring import arrangement_boxes, compile_rules, score_boxes, set_index

logger = logging.getLogger(__name__)

RandomSource = Union[np.random.Generator, int, None]


@dataclass
class LayoutResult:
    sets: List[PlanSet]
    initial_score: float
    final_score: float
    accepted: int
    iterations: int
    fixed_ids: FrozenSet[SetId]


def fixed_set_ids(sets: Iterable[PlanSet], rules: Iterable[Rule]) -> FrozenSet[SetId]:
    """Ids the optimizer must not move: FIXED rule targets and locked sets."""

    ids = set()
    for rule in rules:
        if rule.type is RuleType.FIXED:
            ids.add(rule.set_a)
            if rule.set_b is not None:
                ids.add(rule.set_b)
    ids.update(s.id for s in sets if s.locked)
    return frozenset(ids)


def perturb_positions(
    positions: np.ndarray,
    movable: np.ndarray,
    magnitude: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Shift movable rows by independent offsets in ``[-magnitude/2, magnitude/2]``, clamped at 0."""

    half = magnitude / 2.0
    offsets = rng.uniform(-half, half, size=positions.shape)
    moved = np.maximum(positions + offsets, 0.0)
    return np.where(movable[:, None], moved, positions)


def run_layout(
    sets: Sequence[PlanSet],
    rules: Sequence[Rule],
    scale: float,
    canvas_width: Optional[float],
    canvas_height: Optional[float],
    iterations: Optional[int] = None,
    *,
    rng: RandomSource = None,
    weights: Optional[ScoringWeights] = None,
    config: Optional[PackingConfig] = None,
) -> LayoutResult:
    """Pack the on-plan sets, then keep random moves that strictly lower the score.

    ``canvas_height`` is accepted for symmetry with the canvas but shelves
    grow downward without a height limit.
    """

    config = config or get_packing_config()
    weights = weights or get_scoring_weights()
    iterations = config.iterations if iterations is None else max(0, int(iterations))
    generator = np.random.default_rng(rng)

    on_plan = [s for s in sets if s.on_plan]
    off_plan = [s for s in sets if not s.on_plan]
    if not on_plan:
        logger.info("No on-plan sets to arrange; returning %d set(s) unchanged", len(sets))
        return LayoutResult(list(sets), 0.0, 0.0, 0, 0, frozenset())

    fixed_ids = fixed_set_ids(on_plan, rules)
    logger.info(
        "Arranging %d on-plan set(s) (%d fixed, %d off-plan) with %d rule(s), iterations=%d",
        len(on_plan),
        sum(1 for s in on_plan if s.id in fixed_ids),
        len(off_plan),
        len(rules),
        iterations,
    )

    # Fixed sets come back from the packer with their original coordinates.
    packed = bin_pack(on_plan, scale, canvas_width, fixed_ids, config)
    boxes = arrangement_boxes(packed, scale)
    positions = boxes[:, :2].copy()
    movable = np.array([s.id not in fixed_ids for s in packed], dtype=bool)
    compiled = compile_rules(rules, set_index(packed), scale, weights)

    best_score = score_boxes(boxes, compiled, weights)
    initial_score = best_score
    accepted = 0
    for i in range(iterations):
        magnitude = max(config.min_magnitude, config.max_magnitude * (1.0 - i / iterations))
        candidate = perturb_positions(positions, movable, magnitude, generator)
        boxes[:, :2] = candidate
        candidate_score = score_boxes(boxes, compiled, weights)
        if candidate_score < best_score:
            logger.debug(
                "Iteration %d: accepted move (magnitude=%.1f) score %.3f -> %.3f",
                i,
                magnitude,
                best_score,
                candidate_score,
            )
            positions = candidate
            best_score = candidate_score
            accepted += 1

    arranged = [
        s.moved_to(x, y) if is_movable else s
        for s, (x, y), is_movable in zip(packed, positions.tolist(), movable.tolist())
    ]
    logger.info(
        "Layout finished: score %.3f -> %.3f after %d accepted move(s)",
        initial_score,
        best_score,
        accepted,
    )
    return LayoutResult(
        sets=arranged + off_plan,
        initial_score=initial_score,
        final_score=best_score,
        accepted=accepted,
        iterations=iterations,
        fixed_ids=fixed_ids,
    )


def compute_layout(
    sets: Sequence[PlanSet],
    rules: Sequence[Rule],
    scale: float,
    canvas_width: Optional[float],
    canvas_height: Optional[float],
    iterations: Optional[int] = None,
    *,
    rng: RandomSource = None,
    weights: Optional[ScoringWeights] = None,
    config: Optional[PackingConfig] = None,
) -> List[PlanSet]:
    return run_layout(
        sets, rules, scale, canvas_width, canvas_height, iterations, rng=rng, weights=weights, config=config
    ).sets


def run_alternate_layout(
    sets: Sequence[PlanSet],
    rules: Sequence[Rule],
    scale: float,
    canvas_width: Optional[float],
    canvas_height: Optional[float],
    iterations: Optional[int] = None,
    *,
    rng: RandomSource = None,
    weights: Optional[ScoringWeights] = None,
    config: Optional[PackingConfig] = None,
) -> LayoutResult:
    config = config or get_packing_config()
    generator = np.random.default_rng(rng)
    shuffled = [sets[i] for i in generator.permutation(len(sets))]
    if iterations is None:
        iterations = config.alternate_iterations
    return run_layout(
        shuffled,
        rules,
        scale,
        canvas_width,
        canvas_height,
        iterations,
        rng=generator,
        weights=weights,
        config=config,
    )


def compute_alternate_layout(
    sets: Sequence[PlanSet],
    rules: Sequence[Rule],
    scale: float,
    canvas_width: Optional[float],
    canvas_height: Optional[float],
    *,
    rng: RandomSource = None,
    weights: Optional[ScoringWeights] = None,
    config: Optional[PackingConfig] = None,
) -> List[PlanSet]:
    """Same search as :func:`compute_layout` from a shuffled order with more iterations."""

    return run_alternate_layout(
        sets, rules, scale, canvas_width, canvas_height, rng=rng, weights=weights, config=config
    ).sets

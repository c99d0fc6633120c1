"""Tunable constants for scoring and placement."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class ScoringWeights:
    """Penalty weights of the arrangement score."""

    overlap: float = 10.0
    near: float = 2.0
    separate: float = 3.0
    connect: float = 5.0
    # Edge gap (pixels) under which a CONNECT rule counts as satisfied.
    connect_tolerance: float = 5.0
    # Distance (units) for NEAR/SEPARATE rules saved without one.
    default_distance: float = 100.0


@dataclass
class PackingConfig:
    padding: float = 20.0
    fallback_canvas_width: float = 2000.0
    max_magnitude: float = 200.0
    min_magnitude: float = 20.0
    iterations: int = 100
    alternate_iterations: int = 150


_SCORING_WEIGHTS = ScoringWeights()
_PACKING_CONFIG = PackingConfig()


def get_scoring_weights() -> ScoringWeights:
    return copy.deepcopy(_SCORING_WEIGHTS)


def set_scoring_weights(weights: ScoringWeights) -> None:
    global _SCORING_WEIGHTS
    _SCORING_WEIGHTS = copy.deepcopy(weights)


def get_packing_config() -> PackingConfig:
    return copy.deepcopy(_PACKING_CONFIG)


def set_packing_config(config: PackingConfig) -> None:
    global _PACKING_CONFIG
    _PACKING_CONFIG = copy.deepcopy(config)

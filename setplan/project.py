"""Project document: calibration, sets and rules, plus the edit actions on them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .geometry.cutout import compute_cutout_polygon, map_overlap_to_local_cutout
from .geometry.rect import aabb, overlap_rect
from .layout.optimizer import LayoutResult, RandomSource, run_alternate_layout, run_layout
from .layout.scoring import ScoreBreakdown, score_breakdown
from .model import Cutout, PlanSet, Point, Rule, SetId
from .validate import ValidationError, coerce_rule_type, validate, validate_rule, validate_set

logger = logging.getLogger(__name__)

PROJECT_VERSION = 1
DEFAULT_POSITION = (100.0, 100.0)

# Top-level keys owned by Project; anything else is carried in ``extras``.
_PROJECT_KEYS = {"version", "pixelsPerUnit", "unit", "sets", "nextSetId", "rules", "nextRuleId"}


class CutError(ValueError):
    """Raised when a cut action is not allowed between two sets."""


def _next_id(items: Iterable[Any], stored: Any) -> int:
    """Stored counter, bumped past any integer id already in use."""

    numeric = [item.id for item in items if isinstance(item.id, int)]
    floor = max(numeric) + 1 if numeric else 1
    return max(int(stored or 1), floor)


@dataclass
class Project:
    pixels_per_unit: float = 1.0
    unit: str = "ft"
    sets: List[PlanSet] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    next_set_id: int = 1
    next_rule_id: int = 1
    extras: Dict[str, Any] = field(default_factory=dict)

    # -- sets -----------------------------------------------------------------

    def _set_position(self, set_id: SetId) -> int:
        for idx, plan_set in enumerate(self.sets):
            if plan_set.id == set_id:
                return idx
        raise KeyError(f"Unknown set {set_id!r}")

    def get_set(self, set_id: SetId) -> PlanSet:
        return self.sets[self._set_position(set_id)]

    def add_set(self, width: float, height: float, **fields: Any) -> SetId:
        """Add a set at the default position with rotation 0 and return its id."""

        set_id = self.next_set_id
        for key in ("id", "x", "y", "rotation"):
            fields.pop(key, None)
        x, y = DEFAULT_POSITION
        plan_set = PlanSet(id=set_id, width=width, height=height, x=x, y=y, **fields)
        validate_set(plan_set)
        self.sets.append(plan_set)
        self.next_set_id += 1
        return set_id

    def bulk_add_sets(self, entries: Iterable[Mapping[str, Any]]) -> List[SetId]:
        """Add several sets on a four-column grid starting at (50, 50)."""

        created: List[PlanSet] = []
        for i, entry in enumerate(entries):
            fields = dict(entry)
            fields.pop("id", None)
            fields.pop("rotation", None)
            fields["x"] = 50.0 + (i % 4) * 120.0
            fields["y"] = 50.0 + (i // 4) * 120.0
            plan_set = PlanSet(id=self.next_set_id + i, **fields)
            validate_set(plan_set)
            created.append(plan_set)
        self.sets.extend(created)
        self.next_set_id += len(created)
        return [s.id for s in created]

    def update_set(self, set_id: SetId, **changes: Any) -> PlanSet:
        idx = self._set_position(set_id)
        updated = replace(self.sets[idx], **changes)
        validate_set(updated)
        self.sets[idx] = updated
        return updated

    def delete_set(self, set_id: SetId) -> None:
        """Remove a set together with every rule that references it."""

        idx = self._set_position(set_id)
        del self.sets[idx]
        before = len(self.rules)
        self.rules = [rule for rule in self.rules if not rule.references(set_id)]
        if len(self.rules) != before:
            logger.info("Deleted %d rule(s) referencing set %r", before - len(self.rules), set_id)

    # -- rules ----------------------------------------------------------------

    def add_rule(
        self,
        rule_type: Any,
        set_a: SetId,
        set_b: Optional[SetId] = None,
        distance: Optional[float] = None,
    ) -> SetId:
        kind = coerce_rule_type(rule_type)
        if not kind.needs_partner:
            set_b = None
        rule = Rule(id=self.next_rule_id, type=kind, set_a=set_a, set_b=set_b, distance=distance)
        validate_rule(rule)
        for set_id in (set_a, set_b):
            if set_id is not None:
                self._set_position(set_id)
        self.rules.append(rule)
        self.next_rule_id += 1
        return rule.id

    def delete_rule(self, rule_id: SetId) -> None:
        remaining = [rule for rule in self.rules if rule.id != rule_id]
        if len(remaining) == len(self.rules):
            raise KeyError(f"Unknown rule {rule_id!r}")
        self.rules = remaining

    # -- cut / restore --------------------------------------------------------

    def cut_into(self, cutter_id: SetId, target_id: SetId) -> Optional[Cutout]:
        """Cut the cutter's footprint out of the target; the cutter is unchanged.

        Returns the cutout appended to the target, or ``None`` when the two
        sets do not overlap.
        """

        if cutter_id == target_id:
            raise CutError(f"Set {cutter_id!r} cannot cut into itself")
        cutter = self.get_set(cutter_id)
        target = self.get_set(target_id)
        for plan_set, role in ((cutter, "cutter"), (target, "target")):
            if plan_set.no_cut:
                raise CutError(f"Set {plan_set.id!r} is marked no-cut and cannot be a {role}")

        scale = self.pixels_per_unit
        overlap = overlap_rect(aabb(cutter, scale), aabb(target, scale))
        if overlap is None:
            logger.info("Sets %r and %r do not overlap; nothing to cut", cutter_id, target_id)
            return None

        cutout = map_overlap_to_local_cutout(overlap, target, scale)
        self.update_set(target_id, cutouts=target.cutouts + (cutout,))
        logger.info("Cut %r into %r: local cutout %s", cutter_id, target_id, cutout)
        return cutout

    def restore(self, set_id: SetId) -> None:
        self.update_set(set_id, cutouts=())

    def outline(self, set_id: SetId) -> List[Point]:
        plan_set = self.get_set(set_id)
        return compute_cutout_polygon(plan_set.width, plan_set.height, plan_set.cutouts)

    # -- layout ---------------------------------------------------------------

    def score(self) -> ScoreBreakdown:
        return score_breakdown(self.sets, self.rules, self.pixels_per_unit)

    def auto_layout(
        self,
        canvas_width: Optional[float],
        canvas_height: Optional[float],
        iterations: int = 100,
        *,
        rng: RandomSource = None,
    ) -> LayoutResult:
        result = run_layout(
            self.sets, self.rules, self.pixels_per_unit, canvas_width, canvas_height, iterations, rng=rng
        )
        self.sets = list(result.sets)
        return result

    def try_alternate(
        self,
        canvas_width: Optional[float],
        canvas_height: Optional[float],
        *,
        rng: RandomSource = None,
    ) -> LayoutResult:
        result = run_alternate_layout(
            self.sets, self.rules, self.pixels_per_unit, canvas_width, canvas_height, rng=rng
        )
        self.sets = list(result.sets)
        return result

    # -- serialization --------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extras)
        data.update(
            {
                "version": PROJECT_VERSION,
                "pixelsPerUnit": self.pixels_per_unit,
                "unit": self.unit,
                "sets": [s.to_dict() for s in self.sets],
                "nextSetId": self.next_set_id,
                "rules": [r.to_dict() for r in self.rules],
                "nextRuleId": self.next_rule_id,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Project":
        try:
            sets = [PlanSet.from_dict(item) for item in data.get("sets") or ()]
            rules = [Rule.from_dict(item) for item in data.get("rules") or ()]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"malformed project data: {exc}") from exc
        validate(sets, rules)
        return cls(
            pixels_per_unit=float(data.get("pixelsPerUnit") or 1.0),
            unit=str(data.get("unit") or "ft"),
            sets=sets,
            rules=rules,
            next_set_id=_next_id(sets, data.get("nextSetId")),
            next_rule_id=_next_id(rules, data.get("nextRuleId")),
            extras={key: value for key, value in data.items() if key not in _PROJECT_KEYS},
        )


def load_project(path: Union[str, Path]) -> Project:
    path = Path(path)
    logger.info("Loading project from %s", path)
    data = json.loads(path.read_text(encoding="utf-8"))
    project = Project.from_dict(data)
    logger.info("Loaded %d set(s) and %d rule(s)", len(project.sets), len(project.rules))
    return project


def save_project(project: Project, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(project.to_dict(), indent=2), encoding="utf-8")
    logger.info("Saved project to %s", path)

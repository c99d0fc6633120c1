"""Core value types shared by the geometry and layout engines."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

SetId = Union[int, str]
Point = Tuple[float, float]


class Rotation(IntEnum):
    """Right-angle rotations supported by the AABB and cutout math."""

    DEG_0 = 0
    DEG_90 = 90
    DEG_180 = 180
    DEG_270 = 270

    @classmethod
    def normalize(cls, value: Any) -> "Rotation":
        """Map any multiple of 90 degrees onto one of the four members."""

        if isinstance(value, Rotation):
            return value
        if value is None:
            return cls.DEG_0
        degrees = float(value)
        if not degrees.is_integer() or int(degrees) % 90 != 0:
            raise ValueError(f"rotation must be a multiple of 90 degrees, got {value!r}")
        return cls(int(degrees) % 360)

    @property
    def is_quarter_turn(self) -> bool:
        return self in (Rotation.DEG_90, Rotation.DEG_270)


class RuleType(str, Enum):
    NEAR = "NEAR"
    CONNECT = "CONNECT"
    SEPARATE = "SEPARATE"
    FIXED = "FIXED"

    @property
    def needs_partner(self) -> bool:
        return self is not RuleType.FIXED

    @property
    def uses_distance(self) -> bool:
        return self in (RuleType.NEAR, RuleType.SEPARATE)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle; pixel space for AABBs, local units for cutouts."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def area(self) -> float:
        return self.w * self.h

    @property
    def center(self) -> Point:
        return self.x + self.w / 2, self.y + self.h / 2

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rect":
        return cls(float(data["x"]), float(data["y"]), float(data["w"]), float(data["h"]))


# Cutouts share the rectangle shape but always live in a set's local frame.
Cutout = Rect

# JSON keys owned by PlanSet; anything else is carried in ``extras``.
_SET_KEYS = {
    "id",
    "x",
    "y",
    "width",
    "height",
    "rotation",
    "cutouts",
    "onPlan",
    "lockedToPdf",
    "category",
    "name",
    "noCut",
}


@dataclass(frozen=True)
class PlanSet:
    """A placeable rectangular object on the floor plan.

    ``x``/``y`` are canvas pixels and mark the top-left corner of the
    unrotated rectangle; ``width``/``height`` are real-world units.
    """

    id: SetId
    width: float
    height: float
    x: float = 100.0
    y: float = 100.0
    rotation: Rotation = Rotation.DEG_0
    cutouts: Tuple[Cutout, ...] = ()
    on_plan: bool = True
    locked: bool = False
    category: str = "Set"
    name: str = ""
    no_cut: bool = False
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotation", Rotation.normalize(self.rotation))
        object.__setattr__(self, "cutouts", tuple(self.cutouts))

    def moved_to(self, x: float, y: float) -> "PlanSet":
        return replace(self, x=float(x), y=float(y))

    def with_cutouts(self, cutouts: Iterable[Cutout]) -> "PlanSet":
        return replace(self, cutouts=tuple(cutouts))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extras)
        data.update(
            {
                "id": self.id,
                "name": self.name,
                "category": self.category,
                "x": self.x,
                "y": self.y,
                "width": self.width,
                "height": self.height,
                "rotation": int(self.rotation),
                "onPlan": self.on_plan,
                "lockedToPdf": self.locked,
                "noCut": self.no_cut,
            }
        )
        if self.cutouts:
            data["cutouts"] = [cut.to_dict() for cut in self.cutouts]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlanSet":
        return cls(
            id=data["id"],
            width=float(data["width"]),
            height=float(data["height"]),
            x=float(data.get("x", 100.0)),
            y=float(data.get("y", 100.0)),
            rotation=Rotation.normalize(data.get("rotation", 0)),
            cutouts=tuple(Rect.from_dict(cut) for cut in data.get("cutouts") or ()),
            # A missing flag means the set is on the plan.
            on_plan=data.get("onPlan") is not False,
            locked=bool(data.get("lockedToPdf", False)),
            category=str(data.get("category") or "Set"),
            name=str(data.get("name") or ""),
            no_cut=bool(data.get("noCut", False)),
            extras={key: value for key, value in data.items() if key not in _SET_KEYS},
        )


@dataclass(frozen=True)
class Rule:
    """Spatial rule between ``set_a`` and ``set_b`` (``set_b`` is None for FIXED)."""

    id: SetId
    type: RuleType
    set_a: SetId
    set_b: Optional[SetId] = None
    distance: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", RuleType(self.type))

    def references(self, set_id: SetId) -> bool:
        return self.set_a == set_id or self.set_b == set_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "setA": self.set_a,
            "setB": self.set_b,
            "distance": self.distance,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        distance = data.get("distance")
        return cls(
            id=data["id"],
            type=RuleType(str(data["type"]).upper()),
            set_a=data["setA"],
            set_b=data.get("setB"),
            distance=float(distance) if distance is not None else None,
        )


__all__ = [
    "Cutout",
    "PlanSet",
    "Point",
    "Rect",
    "Rotation",
    "Rule",
    "RuleType",
    "SetId",
]

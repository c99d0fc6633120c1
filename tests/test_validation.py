import pytest

from setplan import PlanSet, Rect, Rotation, Rule, RuleType, ValidationError, validate
from setplan.validate import coerce_rule_type, validate_rule, validate_set


@pytest.mark.parametrize(
    "value, expected",
    [(0, Rotation.DEG_0), (90, Rotation.DEG_90), (450, Rotation.DEG_90), (-90, Rotation.DEG_270), (180.0, Rotation.DEG_180), (None, Rotation.DEG_0)],
)
def test_rotation_normalize(value, expected):
    assert Rotation.normalize(value) is expected


@pytest.mark.parametrize("value", [45, 90.5, 10])
def test_rotation_rejects_non_right_angles(value):
    with pytest.raises(ValueError):
        Rotation.normalize(value)


def test_plan_set_normalizes_rotation_and_cutouts():
    plan_set = PlanSet(id=1, width=2, height=3, rotation=-270, cutouts=[Rect(0, 0, 1, 1)])

    assert plan_set.rotation is Rotation.DEG_90
    assert plan_set.cutouts == (Rect(0, 0, 1, 1),)


def test_plan_set_defaults_from_dict():
    plan_set = PlanSet.from_dict({"id": 7, "width": 2, "height": 1})

    assert plan_set.on_plan
    assert not plan_set.locked
    assert (plan_set.x, plan_set.y) == (100, 100)
    assert plan_set.category == "Set"


def test_validate_set_size():
    validate_set(PlanSet(id=1, width=0.1, height=0.1))
    with pytest.raises(ValidationError) as excinfo:
        validate_set(PlanSet(id=1, width=-1, height=3))
    assert "id=1" in str(excinfo.value)


def test_validate_rules():
    validate_rule(Rule(id=1, type=RuleType.FIXED, set_a=1))
    validate_rule(Rule(id=2, type=RuleType.CONNECT, set_a=1, set_b=2))

    with pytest.raises(ValidationError):
        validate_rule(Rule(id=3, type=RuleType.NEAR, set_a=1))
    with pytest.raises(ValidationError):
        validate_rule(Rule(id=4, type=RuleType.SEPARATE, set_a=1, set_b=1, distance=3))
    with pytest.raises(ValidationError):
        validate_rule(Rule(id=5, type=RuleType.NEAR, set_a=1, set_b=2, distance=-1))


def test_validate_rejects_duplicate_ids():
    sets = [PlanSet(id=1, width=1, height=1), PlanSet(id=1, width=2, height=2)]

    with pytest.raises(ValidationError):
        validate(sets)
    with pytest.raises(ValidationError):
        validate(sets[:1], [Rule(id=1, type="FIXED", set_a=1), Rule(id=1, type="FIXED", set_a=1)])


def test_dangling_rules_are_allowed():
    validate([PlanSet(id=1, width=1, height=1)], [Rule(id=1, type=RuleType.NEAR, set_a=1, set_b=9)])


def test_coerce_rule_type():
    assert coerce_rule_type("near") is RuleType.NEAR
    with pytest.raises(ValidationError):
        coerce_rule_type("ALIGN")

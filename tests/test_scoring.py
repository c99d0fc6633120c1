import pytest

from setplan.layout import ScoringWeights, score_arrangement, score_breakdown
from setplan.model import PlanSet, Rule, RuleType


def _square(set_id, x, y, size=10, **kwargs):
    return PlanSet(id=set_id, x=x, y=y, width=size, height=size, **kwargs)


def test_two_coincident_squares_score_1000():
    sets = [_square("a", 0, 0), _square("b", 0, 0)]

    assert score_arrangement(sets, [], 1.0) == 1000


def test_score_grows_with_overlap():
    base = _square("a", 0, 0)
    scores = [score_arrangement([base, _square("b", x, 0)], [], 1.0) for x in (9, 6, 3, 0)]

    assert scores == sorted(scores)
    assert len(set(scores)) == len(scores)
    assert scores[0] == pytest.approx(100.0)


def test_separated_sets_without_rules_score_zero():
    sets = [_square("a", 0, 0), _square("b", 10, 0), _square("c", 0, 10)]

    assert score_arrangement(sets, [], 1.0) == 0.0


def test_near_rule_boundary():
    rule = Rule(id=1, type=RuleType.NEAR, set_a="a", set_b="b", distance=20)
    at_threshold = [_square("a", 0, 0), _square("b", 20, 0)]
    past_threshold = [_square("a", 0, 0), _square("b", 21, 0)]

    assert score_arrangement(at_threshold, [rule], 1.0) == 0.0
    assert score_arrangement(past_threshold, [rule], 1.0) == pytest.approx(2.0)


def test_separate_rule_boundary():
    rule = Rule(id=1, type=RuleType.SEPARATE, set_a="a", set_b="b", distance=30)
    at_threshold = [_square("a", 0, 0), _square("b", 30, 0)]
    inside_threshold = [_square("a", 0, 0), _square("b", 29, 0)]

    assert score_arrangement(at_threshold, [rule], 1.0) == 0.0
    assert score_arrangement(inside_threshold, [rule], 1.0) == pytest.approx(3.0)


def test_rule_distance_is_scaled_to_pixels():
    rule = Rule(id=1, type=RuleType.NEAR, set_a="a", set_b="b", distance=2)
    sets = [_square("a", 0, 0, size=1), _square("b", 25, 0, size=1)]

    # threshold = 2 units * 10 px
    assert score_arrangement(sets, [rule], 10.0) == pytest.approx((25 - 20) * 2)


def test_near_rule_without_distance_uses_default():
    rule = Rule(id=1, type=RuleType.NEAR, set_a="a", set_b="b")
    sets = [_square("a", 0, 0), _square("b", 150, 0)]

    assert score_arrangement(sets, [rule], 1.0) == pytest.approx((150 - 100) * 2)


def test_zero_distance_uses_default():
    near = Rule(id=1, type=RuleType.NEAR, set_a="a", set_b="b", distance=0)
    separate = Rule(id=2, type=RuleType.SEPARATE, set_a="a", set_b="b", distance=0)
    sets = [_square("a", 0, 0), _square("b", 50, 0)]

    assert score_arrangement(sets, [near], 1.0) == 0.0
    assert score_arrangement(sets, [separate], 1.0) == pytest.approx((100 - 50) * 3)


def test_connect_rule_tolerates_small_gaps():
    rule = Rule(id=1, type=RuleType.CONNECT, set_a="a", set_b="b", distance=999)
    close = [_square("a", 0, 0), _square("b", 15, 0)]
    apart = [_square("a", 0, 0), _square("b", 20, 0)]

    assert score_arrangement(close, [rule], 1.0) == 0.0
    assert score_arrangement(apart, [rule], 1.0) == pytest.approx(50.0)


def test_fixed_and_dangling_rules_contribute_nothing():
    sets = [_square("a", 0, 0), _square("b", 500, 0)]
    rules = [
        Rule(id=1, type=RuleType.FIXED, set_a="a"),
        Rule(id=2, type=RuleType.NEAR, set_a="a", set_b="missing", distance=1),
        Rule(id=3, type=RuleType.CONNECT, set_a="gone", set_b="b"),
    ]

    assert score_arrangement(sets, rules, 1.0) == 0.0


def test_rotation_changes_overlap():
    upright = [PlanSet(id=1, x=0, y=0, width=20, height=5), _square(2, 0, 10)]
    turned = [PlanSet(id=1, x=0, y=0, width=20, height=5, rotation=90), _square(2, 0, 10)]

    assert score_arrangement(upright, [], 1.0) == 0.0
    assert score_arrangement(turned, [], 1.0) == pytest.approx(5 * 10 * 10)


def test_breakdown_matches_total():
    sets = [_square("a", 0, 0), _square("b", 5, 0), _square("c", 200, 0)]
    rules = [
        Rule(id="near", type=RuleType.NEAR, set_a="a", set_b="c", distance=50),
        Rule(id="sep", type=RuleType.SEPARATE, set_a="a", set_b="b", distance=40),
        Rule(id="fix", type=RuleType.FIXED, set_a="c"),
    ]

    breakdown = score_breakdown(sets, rules, 1.0)

    assert breakdown.overlap_area == pytest.approx(50.0)
    assert breakdown.overlap_penalty == pytest.approx(500.0)
    assert breakdown.rule_penalties == {
        "near": pytest.approx((200 - 50) * 2),
        "sep": pytest.approx((40 - 5) * 3),
    }
    assert breakdown.total == pytest.approx(score_arrangement(sets, rules, 1.0))


def test_custom_weights():
    sets = [_square("a", 0, 0), _square("b", 0, 0)]
    weights = ScoringWeights(overlap=1.0)

    assert score_arrangement(sets, [], 1.0, weights) == pytest.approx(100.0)

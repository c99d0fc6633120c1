from typing import Iterable, List, Set

from .model import PlanSet, Rule, RuleType, SetId


class ValidationError(ValueError):
    pass


def _label(item) -> str:
    return f'[{type(item).__name__} id={item.id!r}]'


def validate_set(plan_set: PlanSet) -> None:
    if not plan_set.width > 0 or not plan_set.height > 0:
        raise ValidationError(
            f'{_label(plan_set)} width and height must be positive '
            f'(got {plan_set.width}x{plan_set.height})'
        )
    for idx, cut in enumerate(plan_set.cutouts):
        if cut.w < 0 or cut.h < 0:
            raise ValidationError(f'{_label(plan_set)} cutout #{idx} has a negative size')


def validate_rule(rule: Rule) -> None:
    if rule.type.needs_partner:
        if rule.set_b is None:
            raise ValidationError(f'{_label(rule)} {rule.type.value} rule needs a second set')
        if rule.set_b == rule.set_a:
            raise ValidationError(f'{_label(rule)} {rule.type.value} rule cannot relate a set to itself')
    if rule.type.uses_distance and rule.distance is not None and rule.distance < 0:
        raise ValidationError(f'{_label(rule)} distance must not be negative (got {rule.distance})')


def validate(sets: Iterable[PlanSet], rules: Iterable[Rule] = ()) -> None:
    """Check sets and rules, including duplicate ids; rules may dangle."""

    seen: Set[SetId] = set()
    for plan_set in sets:
        validate_set(plan_set)
        if plan_set.id in seen:
            raise ValidationError(f'{_label(plan_set)} duplicate set id')
        seen.add(plan_set.id)

    rule_ids: List[SetId] = []
    for rule in rules:
        validate_rule(rule)
        if rule.id in rule_ids:
            raise ValidationError(f'{_label(rule)} duplicate rule id')
        rule_ids.append(rule.id)


def coerce_rule_type(value) -> RuleType:
    try:
        return RuleType(str(value).upper())
    except ValueError as exc:
        allowed = ', '.join(member.value for member in RuleType)
        raise ValidationError(f'unknown rule type {value!r} (expected one of {allowed})') from exc

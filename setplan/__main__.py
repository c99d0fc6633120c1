import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence, Tuple

from setplan import (
    CutError,
    ValidationError,
    load_project,
    polygon_area,
    save_project,
)
from setplan.layout import ScoreBreakdown, run_alternate_layout, run_layout
from setplan.model import SetId

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
        force=True,
    )


def _parse_id(value: str) -> SetId:
    value = value.strip()
    try:
        return int(value)
    except ValueError:
        return value


def _parse_cut(value: str) -> Tuple[SetId, SetId]:
    parts = [part for part in value.split(",") if part.strip()]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"cut expects CUTTER,TARGET (got {value!r})")
    return _parse_id(parts[0]), _parse_id(parts[1])


def _print_breakdown(label: str, breakdown: ScoreBreakdown) -> None:
    print(f"{label}: {breakdown.total:.3f}")
    print(f"  overlap area: {breakdown.overlap_area:.3f} (penalty {breakdown.overlap_penalty:.3f})")
    for rule_id, penalty in breakdown.rule_penalties.items():
        print(f"  rule {rule_id}: {penalty:.3f}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Arrange floor-plan sets and apply cuts")
    parser.add_argument("path", help="Path to the project JSON file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the layout search (default: fresh entropy)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Number of perturbation rounds (default: 100, or 150 with --alternate)",
    )
    parser.add_argument(
        "--alternate",
        action="store_true",
        help="Shuffle the set order before searching (try-alternate)",
    )
    parser.add_argument(
        "--canvas-width",
        type=float,
        default=2000.0,
        help="Canvas width in pixels used for shelf wrapping (default: 2000)",
    )
    parser.add_argument(
        "--canvas-height",
        type=float,
        default=2000.0,
        help="Canvas height in pixels (default: 2000)",
    )
    parser.add_argument(
        "--cut",
        type=_parse_cut,
        action="append",
        default=[],
        metavar="CUTTER,TARGET",
        help="Cut CUTTER into TARGET before arranging (repeatable)",
    )
    parser.add_argument(
        "--restore",
        type=_parse_id,
        action="append",
        default=[],
        metavar="ID",
        help="Clear all cutouts of a set before cutting (repeatable)",
    )
    parser.add_argument(
        "--score-only",
        action="store_true",
        help="Report the current score without rearranging",
    )
    parser.add_argument(
        "--output",
        help="Write the resulting project JSON to this path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        project = load_project(args.path)
        for set_id in args.restore:
            project.restore(set_id)
        for cutter_id, target_id in args.cut:
            project.cut_into(cutter_id, target_id)
    except (OSError, json.JSONDecodeError, ValidationError, CutError, KeyError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1)

    _print_breakdown("Score", project.score())

    if not args.score_only:
        runner = run_alternate_layout if args.alternate else run_layout
        result = runner(
            project.sets,
            project.rules,
            project.pixels_per_unit,
            args.canvas_width,
            args.canvas_height,
            args.iterations,
            rng=args.seed,
        )
        project.sets = list(result.sets)
        print(f"Accepted moves: {result.accepted}/{result.iterations}")
        if result.fixed_ids:
            print(f"Fixed sets: {', '.join(str(i) for i in sorted(result.fixed_ids, key=str))}")
        _print_breakdown("Final score", project.score())

    print("Sets:")
    for plan_set in project.sets:
        flags: List[str] = []
        if not plan_set.on_plan:
            flags.append("off-plan")
        if plan_set.cutouts:
            remaining = polygon_area(project.outline(plan_set.id))
            flags.append(f"{len(plan_set.cutouts)} cut(s), area {remaining:.2f}")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        label = plan_set.name or plan_set.category
        print(f"  {plan_set.id} {label}: ({plan_set.x:.1f}, {plan_set.y:.1f}){suffix}")

    if args.output:
        save_project(project, args.output)
        print(f"Project written to {args.output}")


if __name__ == "__main__":
    main(sys.argv[1:])

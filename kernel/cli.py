#!/usr/bin/env python3
"""
Auditor CLI -- Command-line front end for the Efficiency Auditor.

All work is delegated to the hosting entry points in wiring.py; this file
only parses arguments and renders results.

Usage:
  auditor audit FILE --size N [--ops N] [--param k=v ...] [--oracle | --no-oracle]
  auditor infer N:OPS N:OPS N:OPS ...
  auditor benchmark [--oracle] [--concurrency N] [--details]
  auditor bounds
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from domain.models import (
    BenchmarkSummary,
    BoundParams,
    EfficiencyResult,
    ProblemClass,
    get_class_label,
)
from kernel.config import load_settings
from kernel.console import configure, console

logger = logging.getLogger("auditor")

_PARAM_NAMES = ("n", "m", "v", "e", "k")
_METER_WIDTH = 30

# ---------------------------------------------------------------------------
# Argument parsing helpers
# ---------------------------------------------------------------------------


def parse_param(text: str) -> tuple[str, float]:
    """Parse a ``k=v`` bound parameter."""
    name, sep, value = text.partition("=")
    name = name.strip().lower()
    if not sep or name not in _PARAM_NAMES:
        raise argparse.ArgumentTypeError(
            f"expected one of {', '.join(_PARAM_NAMES)} as NAME=VALUE, got {text!r}"
        )
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{name} must be a number, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"{name} must be non-negative")
    return name, number


def parse_point(text: str) -> tuple[float, float]:
    """Parse an ``N:OPS`` measurement point."""
    size, sep, ops = text.partition(":")
    try:
        if not sep:
            raise ValueError
        return float(size), float(ops)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected N:OPS, got {text!r}") from None


# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------


def _render_efficiency(result: EfficiencyResult, *, measured: bool) -> None:
    from modules.calculator.core import efficiency_bar, format_efficiency, format_operations

    minimum = format_operations(result.theoretical_minimum)
    if result.missing_params:
        minimum = f"needs {', '.join(result.missing_params)}"

    console.kv(
        {
            "Class": f"{get_class_label(result.problem_class)} ({result.problem_class.value})",
            "Confidence": f"{result.classification_confidence:.2f}",
            "Input size": str(result.input_size),
            "Lower bound": result.notation
            + ("" if result.is_tight_bound or result.notation == "unknown" else " (not tight)"),
            "Theoretical minimum": minimum,
        },
        title="Classification",
    )
    if measured:
        overhead = (
            "n/a" if result.overhead_ratio == float("inf") else f"{result.overhead_ratio:.2f}x"
        )
        console.kv(
            {
                "Actual operations": format_operations(result.actual_operations),
                "Wasted operations": format_operations(result.wasted_operations),
                "Overhead": overhead,
            },
            title="Measurement",
        )
        console.meter(
            "Efficiency",
            efficiency_bar(result.efficiency_ratio, width=_METER_WIDTH),
            format_efficiency(result.efficiency_ratio),
            ratio=result.efficiency_ratio,
        )
    console.info(f"Optimal approach: {result.optimal_algorithm}")


def cmd_audit(args: argparse.Namespace) -> int:
    """Classify a source file and score its measured work."""
    import wiring

    path = Path(args.file)
    try:
        code = path.read_text(encoding="utf-8")
    except OSError as exc:
        console.error(f"Cannot read {path}: {exc.strerror or exc}")
        return 1

    params = BoundParams(**dict(args.param)) if args.param else None
    measured = args.ops is not None
    result = wiring.audit_code(
        code,
        input_size=args.size,
        params=params,
        actual_operations=args.ops if measured else 0,
        use_oracle=args.oracle,
    )

    console.section(f"Efficiency audit: {path.name}")
    _render_efficiency(result, measured=measured)
    if result.missing_params:
        flags = " ".join(f"--param {name}=..." for name in result.missing_params)
        console.warning(
            f"The {result.problem_class.value} bound needs {', '.join(result.missing_params)}; "
            f"rerun with {flags} to score it"
        )
    elif result.problem_class is ProblemClass.UNKNOWN:
        console.warning("Could not match the code to a class with a known lower bound")
    return 0


def cmd_infer(args: argparse.Namespace) -> int:
    """Fit a growth class to measured (size, operations) points."""
    import wiring

    estimate = wiring.infer_complexity(args.points)
    console.section("Empirical complexity")
    data = {
        "Complexity": estimate.complexity,
        "Confidence": f"{estimate.confidence:.1f}",
    }
    if estimate.slope is not None:
        data["Log-log slope"] = f"{estimate.slope:.3f}"
    if estimate.r_squared is not None:
        data["R²"] = f"{estimate.r_squared:.3f}"
    console.kv(data)
    if estimate.complexity == "unknown":
        console.warning("Need at least three positive points over two or more sizes")
        return 1
    return 0


def _render_summary(summary: BenchmarkSummary, *, details: bool) -> None:
    console.kv(
        {
            "Cases": str(summary.total_cases),
            "Correct": str(summary.correct_predictions),
            "Accuracy": f"{summary.accuracy:.1%}",
            "Mean confidence": f"{summary.average_confidence:.2f}",
            "Mean latency": f"{summary.average_time_ms:.1f} ms",
        },
        title="Overall",
    )
    console.table(
        ["Class", "Correct", "Total", "Accuracy"],
        [
            [cls.value, str(b.correct), str(b.total), f"{b.accuracy:.0%}"]
            for cls, b in summary.by_class
        ],
        title="By class",
    )
    console.table(
        ["Difficulty", "Correct", "Total", "Accuracy"],
        [
            [level.value, str(b.correct), str(b.total), f"{b.accuracy:.0%}"]
            for level, b in summary.by_difficulty
        ],
        title="By difficulty",
    )
    if details:
        misses = [r for r in summary.results if not r.correct]
        console.table(
            ["Case", "Expected", "Predicted", "Confidence"],
            [
                [r.case_id, r.expected_class.value, r.predicted_class.value, f"{r.confidence:.2f}"]
                for r in misses
            ],
            title=f"Misclassified ({len(misses)})",
        )


def cmd_benchmark(args: argparse.Namespace) -> int:
    """Run the labeled corpus through the classifier."""
    import wiring

    settings = load_settings()
    concurrency = args.concurrency if args.concurrency is not None else settings.benchmark_concurrency
    use_oracle = args.oracle if args.oracle is not None else settings.use_oracle

    console.section("Classifier benchmark")
    console.info(
        f"Mode: {'oracle' if use_oracle else 'heuristics only'}, concurrency {concurrency}"
    )
    summary = wiring.run_self_benchmark(
        use_oracle=use_oracle, concurrency=concurrency, settings=settings
    )
    _render_summary(summary, details=args.details)
    return 0


def cmd_bounds(args: argparse.Namespace) -> int:
    """List every registered lower bound with its citation."""
    from modules.bounds.core import all_bounds, format_citation

    rows = [
        [
            bound.problem_class.value,
            bound.notation,
            bound.operation_type.value,
            "yes" if bound.tight else "no",
            format_citation(bound.citation),
        ]
        for bound in all_bounds()
    ]
    console.table(["Class", "Bound", "Counts", "Tight", "Source"], rows, title="Lower bounds")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="auditor",
        description="Efficiency Auditor -- compare measured work against proven lower bounds",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--plain", action="store_true", help="Plain-text output even on a terminal"
    )
    sub = parser.add_subparsers(dest="command")

    # auditor audit
    audit_p = sub.add_parser("audit", help="Classify a source file and score its work")
    audit_p.add_argument("file", help="Python source file to audit")
    audit_p.add_argument("--size", type=int, required=True, help="Input size n of the run")
    audit_p.add_argument("--ops", type=int, default=None, help="Operations counted for the run")
    audit_p.add_argument(
        "--param",
        type=parse_param,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Extra bound parameter (m, v, e, k); repeatable",
    )
    audit_p.add_argument(
        "--oracle",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Consult the classification oracle (default: from config)",
    )
    audit_p.set_defaults(handler=cmd_audit)

    # auditor infer
    infer_p = sub.add_parser("infer", help="Infer growth class from N:OPS points")
    infer_p.add_argument("points", nargs="+", type=parse_point, metavar="N:OPS")
    infer_p.set_defaults(handler=cmd_infer)

    # auditor benchmark
    bench_p = sub.add_parser("benchmark", help="Measure classifier accuracy on the corpus")
    bench_p.add_argument(
        "--oracle",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Classify with the oracle (default: from config)",
    )
    bench_p.add_argument(
        "--concurrency", type=int, default=None, help="Cases classified at once"
    )
    bench_p.add_argument("--details", action="store_true", help="List misclassified cases")
    bench_p.set_defaults(handler=cmd_benchmark)

    # auditor bounds
    bounds_p = sub.add_parser("bounds", help="List the lower-bound registry")
    bounds_p.set_defaults(handler=cmd_bounds)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # -- Console configuration ----------------------------------------------
    configure(backend="plain" if args.plain else "auto")

    # -- Logging configuration ----------------------------------------------
    if args.verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, load_settings().log_level.upper(), logging.WARNING)
    logging.basicConfig(
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        level=level,
        stream=sys.stderr,
    )

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        sys.exit(1)
    sys.exit(handler(args))


if __name__ == "__main__":
    main()

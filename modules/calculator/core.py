"""Efficiency calculator — compare actual work against the theoretical minimum.

``efficiency_ratio`` is ``minimum / actual * 100`` capped at 100: a fragment
cannot beat the optimum, so anything above 100 is a measurement artifact.
Degenerate inputs are clamped, never divided by zero. Classes without a
bound produce an ``unknown`` result rather than an error.

``infer_complexity`` fits ``log(ops) = k * log(n) + c`` over a measurement
series and maps the slope ``k`` to a growth class.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any

import numpy as np

from domain.models import (
    BoundParams,
    ClassificationResult,
    ComplexityEstimate,
    EfficiencyResult,
    Measurement,
    OperationCounts,
    OperationType,
    ProblemClass,
    SizedAnalysis,
)
from kernel.config import DEFAULT_SIZES, MIN_COMPLEXITY_POINTS
from modules.bounds.core import calculate_theoretical_minimum, get_bound, get_optimal_algorithm
from modules.classifier.core import classify_code
from modules.instrumentation.core import measure_at_sizes

logger = logging.getLogger("auditor.calculator")

# ---------------------------------------------------------------------------
# Efficiency
# ---------------------------------------------------------------------------


def unknown_efficiency(input_size: int, actual_operations: int) -> EfficiencyResult:
    """Result for work that cannot be compared against any bound.

    An unknown class carries no classification, so its confidence is 0.
    """
    return EfficiencyResult(
        problem_class=ProblemClass.UNKNOWN,
        classification_confidence=0.0,
        input_size=input_size,
        theoretical_minimum=0.0,
        actual_operations=actual_operations,
        efficiency_ratio=0.0,
        wasted_operations=float(actual_operations),
        overhead_ratio=math.inf,
        notation="unknown",
        optimal_algorithm=get_optimal_algorithm(ProblemClass.UNKNOWN),
        is_tight_bound=False,
    )


def incomplete_efficiency(
    problem_class: ProblemClass,
    confidence: float,
    input_size: int,
    actual_operations: int,
    missing: Sequence[str],
) -> EfficiencyResult:
    """Result for a classified fragment whose bound lacks size parameters.

    The class, its notation and the optimal approach are kept; nothing can be
    scored, so the minimum and ratio are 0 and the overhead is infinite.
    """
    bound = get_bound(problem_class)
    assert bound is not None
    return EfficiencyResult(
        problem_class=problem_class,
        classification_confidence=confidence,
        input_size=input_size,
        theoretical_minimum=0.0,
        actual_operations=actual_operations,
        efficiency_ratio=0.0,
        wasted_operations=float(actual_operations),
        overhead_ratio=math.inf,
        notation=bound.notation,
        optimal_algorithm=get_optimal_algorithm(problem_class),
        is_tight_bound=bound.tight,
        missing_params=tuple(missing),
    )


def _compare(
    problem_class: ProblemClass,
    confidence: float,
    input_size: int,
    actual_operations: int,
    params: BoundParams,
) -> EfficiencyResult:
    """Build the result for a class that has a bound."""
    bound = get_bound(problem_class)
    assert bound is not None

    minimum = calculate_theoretical_minimum(problem_class, params)

    if actual_operations <= 0:
        ratio = 0.0
        overhead = math.inf
    else:
        ratio = min(100.0, minimum / actual_operations * 100)
        overhead = actual_operations / minimum if minimum > 0 else math.inf

    return EfficiencyResult(
        problem_class=problem_class,
        classification_confidence=confidence,
        input_size=input_size,
        theoretical_minimum=minimum,
        actual_operations=actual_operations,
        efficiency_ratio=ratio,
        wasted_operations=max(0.0, actual_operations - minimum),
        overhead_ratio=overhead,
        notation=bound.notation,
        optimal_algorithm=get_optimal_algorithm(problem_class),
        is_tight_bound=bound.tight,
    )


def calculate_efficiency(
    code: str,
    input_size: int,
    actual_operations: int,
    *,
    operation_type: OperationType | None = None,
    classification: ClassificationResult | None = None,
    params: BoundParams | None = None,
    classify: Callable[[str], ClassificationResult] = classify_code,
) -> EfficiencyResult:
    """Score *code* given how many operations it actually performed.

    Args:
        code: Source of the fragment (only used when it must be classified).
        input_size: Primary size ``n``.
        actual_operations: Operations counted for this run.
        operation_type: Unit of ``actual_operations``; a mismatch with the
            bound's unit is logged, not corrected.
        classification: Pre-computed classification; skips the classifier.
        params: Bound parameters. Defaults to ``BoundParams(n=input_size)``;
            a missing ``n`` is filled from ``input_size``.
        classify: Classifier used when ``classification`` is omitted.

    Returns:
        The efficiency result.

    Raises:
        MissingBoundParameterError: The class's bound needs a parameter
            that *params* does not supply.
    """
    if classification is None:
        classification = classify(code)

    problem_class = classification.problem_class
    bound = get_bound(problem_class)
    if bound is None:
        logger.info("No bound for %s; reporting unknown efficiency", problem_class.value)
        return unknown_efficiency(input_size, actual_operations)

    if params is None:
        params = BoundParams(n=input_size)
    elif params.n is None:
        params = replace(params, n=input_size)

    if operation_type is not None and operation_type is not bound.operation_type:
        logger.warning(
            "Counted %s but the %s bound is in %s",
            operation_type.value,
            problem_class.value,
            bound.operation_type.value,
        )

    return _compare(
        problem_class, classification.confidence, input_size, actual_operations, params
    )


def select_operations(operation_type: OperationType, counts: OperationCounts) -> int:
    """Pick the counts that a bound of *operation_type* is denominated in."""
    if operation_type is OperationType.COMPARISONS:
        return counts.comparisons
    if operation_type is OperationType.ACCESSES:
        return counts.reads + counts.writes
    return counts.total()


def calculate_efficiency_from_counts(
    problem_class: ProblemClass,
    counts: OperationCounts,
    params: BoundParams,
) -> EfficiencyResult:
    """Score a known class directly from instrumentation counts.

    The class is taken as given (confidence 1.0).
    """
    input_size = int(params.n or 0)
    bound = get_bound(problem_class)
    if bound is None:
        return unknown_efficiency(input_size, counts.comparisons + counts.reads + counts.writes)

    actual = select_operations(bound.operation_type, counts)
    return _compare(problem_class, 1.0, input_size, actual, params)


# ---------------------------------------------------------------------------
# Multi-size analysis
# ---------------------------------------------------------------------------


def analyze_at_sizes(
    problem_class: ProblemClass,
    generate_input: Callable[[int], Sequence[Any]],
    fn: Callable[..., Any],
    sizes: Sequence[int] = DEFAULT_SIZES,
    params: BoundParams | None = None,
) -> list[SizedAnalysis]:
    """Measure *fn* at each size and score every measurement.

    ``params`` supplies any non-``n`` bound parameters; ``n`` is always the
    measured input size.
    """
    base = params if params is not None else BoundParams()
    analyses = []
    for measurement in measure_at_sizes(generate_input, fn, sizes):
        sized = replace(base, n=measurement.input_size)
        efficiency = calculate_efficiency_from_counts(problem_class, measurement.counts, sized)
        analyses.append(SizedAnalysis(measurement=measurement, efficiency=efficiency))
    return analyses


# ---------------------------------------------------------------------------
# Complexity inference
# ---------------------------------------------------------------------------

# (exclusive upper slope, label, confidence)
_COMPLEXITY_BUCKETS: tuple[tuple[float, str, float], ...] = (
    (0.15, "O(1)", 0.8),
    (0.5, "O(log n)", 0.7),
    (1.15, "O(n)", 0.8),
    (1.6, "O(n log n)", 0.7),
    (2.3, "O(n²)", 0.7),
    (3.3, "O(n³)", 0.6),
    (math.inf, "O(2^n) or worse", 0.5),
)

_UNKNOWN_COMPLEXITY = ComplexityEstimate(complexity="unknown", confidence=0.0)


def _as_point(item: Measurement | tuple[float, float]) -> tuple[float, float]:
    if isinstance(item, Measurement):
        return float(item.input_size), float(item.counts.total())
    n, ops = item
    return float(n), float(ops)


def infer_complexity(points: Iterable[Measurement | tuple[float, float]]) -> ComplexityEstimate:
    """Infer the growth class of a size-indexed series.

    Args:
        points: ``(n, ops)`` pairs or ``Measurement`` objects (whose ops are
            ``counts.total()``). Points with non-positive ``n`` or ops are
            ignored.

    Returns:
        The bucketed estimate with the fitted slope and R², or ``unknown``
        with confidence 0 when fewer than three usable points (or fewer than
        two distinct sizes) remain.
    """
    usable = sorted(p for p in map(_as_point, points) if p[0] > 0 and p[1] > 0)
    if len(usable) < MIN_COMPLEXITY_POINTS or len({n for n, _ in usable}) < 2:
        return _UNKNOWN_COMPLEXITY

    log_n = np.log(np.array([n for n, _ in usable]))
    log_ops = np.log(np.array([ops for _, ops in usable]))
    slope, intercept = np.polyfit(log_n, log_ops, 1)

    fitted = slope * log_n + intercept
    ss_res = float(np.sum((log_ops - fitted) ** 2))
    ss_tot = float(np.sum((log_ops - log_ops.mean()) ** 2))
    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 1.0

    for upper, label, confidence in _COMPLEXITY_BUCKETS:
        if slope < upper:
            logger.debug("Fitted slope %.3f (R²=%.3f) -> %s", slope, r_squared, label)
            return ComplexityEstimate(
                complexity=label,
                confidence=confidence,
                slope=float(slope),
                r_squared=r_squared,
            )
    return _UNKNOWN_COMPLEXITY


def infer_complexity_from_measurements(measurements: Sequence[Measurement]) -> ComplexityEstimate:
    """``infer_complexity`` over total operation counts of a measurement series."""
    return infer_complexity(measurements)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_efficiency(ratio: float) -> str:
    """Render a ratio as a percentage with precision that grows as it shrinks."""
    if ratio >= 99.5:
        return "100%"
    if ratio >= 10:
        return f"{_round_half_up(ratio)}%"
    if ratio >= 1:
        return f"{ratio:.1f}%"
    return f"{ratio:.2f}%"


def format_operations(count: float) -> str:
    """Abbreviate an operation count with K, M or B suffixes."""
    if count >= 1_000_000_000:
        return f"{count / 1_000_000_000:.1f}B"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    if math.isfinite(count) and count == int(count):
        return str(int(count))
    return str(count)


def efficiency_bar(ratio: float, width: int = 50) -> str:
    """Render *ratio* (0 to 100) as a block bar of *width* cells."""
    clamped = min(100.0, max(0.0, ratio))
    filled = _round_half_up(clamped / 100 * width)
    return "█" * filled + "░" * (width - filled)

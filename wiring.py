"""
wiring.py — Hosting entry points with graceful degradation.

Binds the auditor's modules to concrete adapters. Callers (the CLI, editors,
notebooks) go through these functions rather than the modules directly:

- ``audit_code`` classifies a fragment and scores its measured work,
- ``infer_complexity`` fits a growth class to a measurement series,
- ``run_self_benchmark`` runs the labeled corpus through the classifier.

None of them raise for classification or bound problems. A failing step is
logged with a ``[fallback]`` marker and the caller receives the ``unknown``
result instead, except for a matched class whose bound lacks size
parameters: that result keeps the class and lists ``missing_params``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from functools import partial

from adapters.oracles.claude_cli import ClaudeCliOracle
from domain.models import (
    AuditorError,
    BenchmarkSummary,
    BoundParams,
    ClassificationResult,
    ComplexityEstimate,
    EfficiencyResult,
    Measurement,
    MissingBoundParameterError,
    OperationCounts,
)
from domain.ports import ClassificationOraclePort
from kernel.config import Settings, load_settings
from modules.benchmark.core import run_benchmark
from modules.bounds.core import get_bound
from modules.calculator.core import (
    calculate_efficiency,
    calculate_efficiency_from_counts,
    incomplete_efficiency,
    select_operations,
    unknown_efficiency,
)
from modules.calculator.core import infer_complexity as _infer_complexity
from modules.classifier.core import classify_code

logger = logging.getLogger("auditor.wiring")


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


def default_oracle(settings: Settings | None = None) -> ClassificationOraclePort:
    """Build the oracle configured in settings (the agent CLI adapter)."""
    if settings is None:
        settings = load_settings()
    return ClaudeCliOracle(command=settings.oracle_cmd, timeout=settings.oracle_timeout)


def _classify(
    code: str,
    *,
    use_oracle: bool,
    oracle: ClassificationOraclePort | None,
    settings: Settings,
) -> ClassificationResult:
    if use_oracle and oracle is None:
        oracle = default_oracle(settings)
    return classify_code(
        code, use_oracle=use_oracle, oracle=oracle, timeout=settings.oracle_timeout
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def audit_code(
    code: str,
    *,
    input_size: int,
    params: BoundParams | None = None,
    actual_operations: int | None = None,
    counts: OperationCounts | None = None,
    use_oracle: bool | None = None,
    oracle: ClassificationOraclePort | None = None,
    settings: Settings | None = None,
) -> EfficiencyResult:
    """Classify *code* and score the work it performed.

    Args:
        code: Source fragment to audit.
        input_size: Primary size ``n`` of the measured run.
        params: Extra bound parameters (``m``, ``v``, ``e``, ``k``); ``n``
            defaults to *input_size*.
        actual_operations: Operations counted for the run.
        counts: Instrumentation counts; takes precedence over
            *actual_operations* and is reduced to the bound's unit.
        use_oracle: Consult the oracle. Defaults to the ``use_oracle``
            setting.
        oracle: Oracle to consult; defaults to :func:`default_oracle`.
        settings: Effective settings; loaded from disk when omitted.

    Returns:
        The efficiency result. Classification failures and unsupported
        classes yield the ``unknown`` result with confidence 0. Missing bound
        parameters keep the matched class, name the parameters in
        ``missing_params`` and leave the score at 0.

    Raises:
        ValueError: Neither *actual_operations* nor *counts* was given.
    """
    if counts is None and actual_operations is None:
        raise ValueError("audit_code needs actual_operations or counts")

    fallback_ops = actual_operations if actual_operations is not None else counts.total()
    if settings is None:
        settings = load_settings()
    if use_oracle is None:
        use_oracle = settings.use_oracle

    try:
        classification = _classify(code, use_oracle=use_oracle, oracle=oracle, settings=settings)
    except Exception as exc:
        logger.warning(
            "[fallback] classification failed (%s: %s), reporting unknown",
            type(exc).__name__,
            exc,
        )
        return unknown_efficiency(input_size, fallback_ops)

    if params is None:
        params = BoundParams(n=input_size)
    elif params.n is None:
        params = replace(params, n=input_size)

    try:
        if counts is not None:
            result = calculate_efficiency_from_counts(
                classification.problem_class, counts, params
            )
            return replace(
                result,
                input_size=input_size,
                classification_confidence=classification.confidence,
            )
        return calculate_efficiency(
            code,
            input_size,
            actual_operations,
            classification=classification,
            params=params,
        )
    except MissingBoundParameterError as exc:
        logger.warning(
            "[fallback] %s bound needs %s; reporting the class without a score",
            classification.problem_class.value,
            ", ".join(exc.missing),
        )
        measured = fallback_ops
        bound = get_bound(classification.problem_class)
        if counts is not None and bound is not None:
            measured = select_operations(bound.operation_type, counts)
        return incomplete_efficiency(
            classification.problem_class,
            classification.confidence,
            input_size,
            measured,
            exc.missing,
        )
    except AuditorError as exc:
        logger.warning("[fallback] %s; reporting unknown efficiency", exc)
    except Exception:
        logger.exception("[fallback] efficiency calculation failed, reporting unknown")
    return unknown_efficiency(input_size, fallback_ops)


def infer_complexity(
    series: Iterable[Measurement | tuple[float, float]],
) -> ComplexityEstimate:
    """Infer the growth class of a measurement series; ``unknown`` on bad input."""
    try:
        return _infer_complexity(series)
    except Exception as exc:
        logger.warning(
            "[fallback] complexity inference failed (%s: %s)", type(exc).__name__, exc
        )
        return ComplexityEstimate(complexity="unknown", confidence=0.0)


def run_self_benchmark(
    *,
    use_oracle: bool = False,
    concurrency: int = 1,
    oracle: ClassificationOraclePort | None = None,
    settings: Settings | None = None,
) -> BenchmarkSummary:
    """Run the labeled corpus through the classifier.

    Heuristics only by default. Oracle-backed runs are throttled to the
    configured call-rate ceiling.
    """
    if settings is None:
        settings = load_settings()
    if use_oracle and oracle is None:
        oracle = default_oracle(settings)

    classify = partial(
        classify_code, use_oracle=use_oracle, oracle=oracle, timeout=settings.oracle_timeout
    )
    logger.info(
        "Self-benchmark: %s, concurrency=%d",
        "oracle" if use_oracle else "heuristics only",
        concurrency,
    )
    return run_benchmark(
        classify,
        concurrency=max(1, concurrency),
        max_calls_per_second=settings.benchmark_max_calls_per_second if use_oracle else None,
    )

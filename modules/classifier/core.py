"""Classifier — heuristics first, oracle second, one final answer.

``classify_code`` never raises for classification problems: oracle
timeouts, transport failures and malformed answers all degrade to an
``unknown`` result (or to the heuristic guess at reduced confidence) with
the reason recorded in ``reasoning``.

The oracle is injected through ``domain.ports.ClassificationOraclePort``;
this module never talks to the network itself. ``parse_oracle_response``
and ``build_classification_prompt`` are shared with the oracle adapters.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Any

from domain.models import (
    AlternativeClass,
    ClassificationResult,
    OracleResponseError,
    ProblemClass,
)
from kernel.config import (
    HEURISTIC_CONFIDENCE,
    HEURISTIC_FALLBACK_CONFIDENCE,
    MAX_ALTERNATIVES,
    ORACLE_TIMEOUT_SECONDS,
)
from modules.heuristics.core import detect_code_patterns, heuristic_classify

if TYPE_CHECKING:
    from domain.ports import ClassificationOraclePort

logger = logging.getLogger("auditor.classifier")

# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

_CLASS_DESCRIPTIONS: tuple[tuple[ProblemClass, str], ...] = (
    (
        ProblemClass.COMPARISON_SORT,
        "Sorting algorithms using element comparisons (bubble, merge, quick, heap, "
        "insertion, selection sort)",
    ),
    (
        ProblemClass.COUNTING_SORT,
        "Non-comparison sorts using counting/bucketing (counting sort, radix sort, bucket sort)",
    ),
    (ProblemClass.BINARY_SEARCH, "Searching in sorted arrays by halving (binary search, bisect)"),
    (ProblemClass.LINEAR_SEARCH, "Sequential search through elements (find, index, min/max scan)"),
    (ProblemClass.GRAPH_BFS, "Breadth-first graph traversal (level-order, unweighted shortest path)"),
    (
        ProblemClass.GRAPH_DFS,
        "Depth-first graph traversal (preorder, postorder, topological sort, cycle detection)",
    ),
    (ProblemClass.SHORTEST_PATH_DIJKSTRA, "Weighted shortest path with a priority queue"),
    (ProblemClass.STRING_MATCH_NAIVE, "Pattern matching with a sliding window"),
    (ProblemClass.STRING_MATCH_KMP, "Pattern matching with failure function preprocessing"),
    (ProblemClass.MATRIX_MULTIPLY, "Matrix multiplication operations"),
    (ProblemClass.TREE_TRAVERSAL, "Tree traversal (inorder, preorder, postorder)"),
    (ProblemClass.HASH_LOOKUP, "Hash table operations (get, set, delete)"),
    (ProblemClass.MEDIAN_FINDING, "Selection/median finding (quickselect, nth element)"),
    (ProblemClass.UNKNOWN, "Does not match any known problem class"),
)

_PROMPT_TEMPLATE = """\
You are an expert algorithms researcher. Analyze this code and classify it \
into ONE of the following problem classes:

PROBLEM CLASSES:
{classes}

CODE TO ANALYZE:
```
{code}
```

Respond in JSON format:
{{
  "class": "one of the problem classes above",
  "confidence": 0.0 to 1.0,
  "reasoning": "brief explanation of why this classification",
  "alternativeClasses": [{{"class": "...", "confidence": 0.X}}]
}}

Be precise. Only classify as a specific class if you are confident. \
Use "unknown" for ambiguous cases."""


def build_classification_prompt(code: str) -> str:
    """Render the oracle prompt for *code*."""
    classes = "\n".join(f"- {cls.value}: {text}" for cls, text in _CLASS_DESCRIPTIONS)
    return _PROMPT_TEMPLATE.format(classes=classes, code=code)


# ---------------------------------------------------------------------------
# Oracle response parsing
# ---------------------------------------------------------------------------

_DECODER = json.JSONDecoder()


def _first_json_object(text: str) -> dict[str, Any] | None:
    """Return the first well-formed JSON object embedded in *text*."""
    start = text.find("{")
    while start != -1:
        try:
            value, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, dict):
                return value
        start = text.find("{", start + 1)
    return None


def _is_valid_class(value: object) -> bool:
    return isinstance(value, str) and ProblemClass.parse(value).value == value.strip().lower()


def parse_oracle_response(text: str) -> ClassificationResult:
    """Parse an oracle answer that may wrap its JSON document in prose.

    Args:
        text: Raw oracle output.

    Returns:
        A validated ``ClassificationResult``: unknown class names become
        ``unknown``, confidences are clamped and alternatives are limited
        to valid classes (at most ``MAX_ALTERNATIVES``).

    Raises:
        OracleResponseError: No JSON object could be found.
    """
    data = _first_json_object(text)
    if data is None:
        raise OracleResponseError("No JSON object in oracle response")

    raw_alternatives = data.get("alternativeClasses", data.get("alternatives", [])) or []
    alternatives: list[AlternativeClass] = []
    if isinstance(raw_alternatives, list):
        for item in raw_alternatives:
            if not isinstance(item, dict) or not _is_valid_class(item.get("class")):
                continue
            alternatives.append(
                AlternativeClass(
                    problem_class=ProblemClass.parse(item["class"]),
                    confidence=item.get("confidence", 0),
                )
            )

    reasoning = data.get("reasoning") or ""
    return ClassificationResult(
        problem_class=ProblemClass.parse(data.get("class")),
        confidence=data.get("confidence") or 0,
        reasoning=str(reasoning),
        alternatives=tuple(alternatives[:MAX_ALTERNATIVES]),
    )


def _normalize(result: ClassificationResult) -> ClassificationResult:
    """Re-validate a result produced by an arbitrary oracle implementation."""
    alternatives = tuple(
        alt for alt in result.alternatives if isinstance(alt, AlternativeClass)
    )[:MAX_ALTERNATIVES]
    return ClassificationResult(
        problem_class=ProblemClass.parse(result.problem_class),
        confidence=result.confidence,
        reasoning=result.reasoning if isinstance(result.reasoning, str) else "",
        alternatives=alternatives,
    )


def _unknown(reasoning: str) -> ClassificationResult:
    return ClassificationResult(
        problem_class=ProblemClass.UNKNOWN,
        confidence=0.0,
        reasoning=reasoning,
    )


# ---------------------------------------------------------------------------
# Oracle call with a bounded wait
# ---------------------------------------------------------------------------


def consult_oracle(
    oracle: ClassificationOraclePort | None,
    code: str,
    *,
    timeout: float = ORACLE_TIMEOUT_SECONDS,
) -> ClassificationResult:
    """Ask *oracle* to classify *code*, waiting at most *timeout* seconds.

    Returns:
        The validated oracle answer, or an ``unknown`` result whose
        reasoning explains the failure. Never raises.
    """
    if oracle is None:
        return _unknown("No classification oracle configured")

    outcome: dict[str, Any] = {}

    def call() -> None:
        try:
            outcome["raw"] = oracle.classify(code)
        except Exception as exc:
            outcome["error"] = exc

    # Daemon, so a call that never returns cannot hold the process open.
    worker = threading.Thread(target=call, name="auditor-oracle", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        logger.warning("Oracle did not answer within %.1fs", timeout)
        return _unknown(f"Oracle timed out after {timeout:.1f}s")
    if "error" in outcome:
        exc = outcome["error"]
        logger.warning("Oracle classification failed: %s", exc)
        return _unknown(f"Oracle failed ({type(exc).__name__}): {exc}")

    raw = outcome.get("raw")
    if not isinstance(raw, ClassificationResult):
        logger.warning("Oracle returned %s instead of a classification", type(raw).__name__)
        return _unknown("Oracle returned a malformed response")

    return _normalize(raw)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def classify_code(
    code: str,
    *,
    use_oracle: bool = True,
    oracle: ClassificationOraclePort | None = None,
    timeout: float = ORACLE_TIMEOUT_SECONDS,
) -> ClassificationResult:
    """Classify *code* into a problem class.

    Heuristics run first. With ``use_oracle=False`` their guess is returned
    at a fixed confidence. Otherwise the oracle decides; when it answers
    ``unknown`` (or fails) the heuristic guess is kept at reduced
    confidence.

    Args:
        code: Source text of the fragment.
        use_oracle: Consult the oracle at all.
        oracle: Oracle implementation. ``None`` behaves like an oracle
            without credentials.
        timeout: Upper bound on the oracle call in seconds.

    Returns:
        The final ``ClassificationResult``.
    """
    patterns = detect_code_patterns(code)
    guess = heuristic_classify(code, patterns)

    if not use_oracle:
        if guess is None:
            return _unknown("No heuristic match and oracle disabled")
        return ClassificationResult(
            problem_class=guess,
            confidence=HEURISTIC_CONFIDENCE,
            reasoning="Heuristic classification based on code patterns",
        )

    answer = consult_oracle(oracle, code, timeout=timeout)

    if answer.problem_class is ProblemClass.UNKNOWN and guess is not None:
        logger.info("Oracle undecided, falling back to heuristic guess %s", guess.value)
        return ClassificationResult(
            problem_class=guess,
            confidence=HEURISTIC_FALLBACK_CONFIDENCE,
            reasoning=f"Heuristic fallback: {answer.reasoning}",
        )

    logger.debug(
        "Oracle classification: %s (%.2f)", answer.problem_class.value, answer.confidence
    )
    return answer

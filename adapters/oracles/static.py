"""Offline oracles — no network, deterministic answers.

``NullOracle`` stands in when no credentials are configured; ``StaticOracle``
answers from a fixed table keyed by source text (used for replaying recorded
classifications).
"""

from __future__ import annotations

from collections.abc import Mapping

from domain.models import ClassificationResult, ProblemClass


class NullOracle:
    """Always answers ``unknown`` with zero confidence."""

    def __init__(self, reason: str = "No oracle credentials configured") -> None:
        self._reason = reason

    def classify(self, code: str) -> ClassificationResult:
        return ClassificationResult(
            problem_class=ProblemClass.UNKNOWN,
            confidence=0.0,
            reasoning=self._reason,
        )


class StaticOracle:
    """Looks *code* up in a table of known answers.

    Unlisted code is answered with ``unknown``.
    """

    def __init__(
        self,
        answers: Mapping[str, ProblemClass],
        *,
        confidence: float = 0.9,
    ) -> None:
        self._answers = dict(answers)
        self._confidence = confidence

    def classify(self, code: str) -> ClassificationResult:
        problem_class = self._answers.get(code)
        if problem_class is None:
            return ClassificationResult(
                problem_class=ProblemClass.UNKNOWN,
                confidence=0.0,
                reasoning="No recorded answer for this code",
            )
        return ClassificationResult(
            problem_class=problem_class,
            confidence=self._confidence,
            reasoning="Recorded answer",
        )

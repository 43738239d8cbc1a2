"""Port interfaces for the Efficiency Auditor.

All ports are defined as typing.Protocol: structural subtyping means any class
with matching method signatures satisfies the Protocol without inheritance.

This module has ZERO external imports: only stdlib and typing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from domain.models import ClassificationResult


class ClassificationOraclePort(Protocol):
    """Abstraction over an external code classification service.

    Implementations may block on I/O and may raise (``OracleError`` or
    anything else); the classifier bounds the call with a timeout and turns
    every failure into an ``unknown`` classification.
    """

    def classify(self, code: str) -> ClassificationResult:
        """Classify *code* into one of the known problem classes."""
        ...

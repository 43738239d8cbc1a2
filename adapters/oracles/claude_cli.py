"""ClaudeCliOracle — ClassificationOraclePort backed by the Claude CLI.

Sends the classification prompt on stdin in ``--print`` mode, captures the
plain-text answer and parses the first JSON object out of it.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time

from domain.models import ClassificationResult, OracleResponseError, OracleUnavailableError
from kernel.config import ORACLE_CMD, ORACLE_TIMEOUT_SECONDS
from modules.classifier.core import build_classification_prompt, parse_oracle_response

logger = logging.getLogger("auditor.adapters.oracles")


class ClaudeCliOracle:
    """Oracle that invokes the Claude CLI once per classification.

    Satisfies ``domain.ports.ClassificationOraclePort`` via structural
    subtyping (PEP 544). Credentials are whatever the CLI itself is logged
    in with; a missing binary is reported as ``OracleUnavailableError``.
    """

    def __init__(
        self,
        *,
        command: str = ORACLE_CMD,
        timeout: float = ORACLE_TIMEOUT_SECONDS,
    ) -> None:
        self._command = command
        self._timeout = timeout

    def classify(self, code: str) -> ClassificationResult:
        """Classify *code* via the CLI.

        Raises:
            OracleUnavailableError: The CLI is missing or timed out.
            OracleResponseError: The CLI failed or answered without JSON.
        """
        logger.info("Calling %s for classification...", self._command)
        start_time = time.time()

        # Remove CLAUDE* env vars to allow nested invocation in --print mode
        env = {k: v for k, v in os.environ.items() if not k.startswith("CLAUDE")}

        try:
            proc = subprocess.run(
                [self._command, "--print", "--output-format", "text"],
                input=build_classification_prompt(code),
                capture_output=True,
                text=True,
                timeout=self._timeout,
                env=env,
            )
        except FileNotFoundError as exc:
            raise OracleUnavailableError(
                f"Oracle command '{self._command}' not found. "
                "Install it or set AUDITOR_ORACLE_CMD."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise OracleUnavailableError(
                f"Oracle timed out after {self._timeout:g} seconds"
            ) from exc

        elapsed = time.time() - start_time
        logger.debug("Oracle answered in %.1fs (exit %d)", elapsed, proc.returncode)

        stdout = proc.stdout or ""
        if proc.returncode != 0:
            detail = (proc.stderr or stdout or "oracle execution failed").strip()
            raise OracleResponseError(f"Oracle exited with {proc.returncode}: {detail[-500:]}")

        return parse_oracle_response(stdout)

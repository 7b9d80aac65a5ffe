"""
Static Audit Adapter

Sends contract source to the language model with the fixed audit instruction
and turns the answer into a StaticAnalysisResult.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from pydantic import ValidationError

from config import RampartConfig
from errors import InputValidationError, UpstreamParseError
from models.findings import StaticAnalysisResult
from agent.prompts import build_audit_prompt
from utils.json_sanitizer import safe_json_loads
from utils.llm_backend import LLMBackend
from utils.logging import AnalysisLogger

logger = logging.getLogger(__name__)


class StaticAuditAdapter:
    """
    One llm request per call, no retries on a bad answer.

    The backend retries transport errors on its own; a response that does not
    parse into the audit schema raises UpstreamParseError.
    """

    ENGINE = "static"

    def __init__(self, backend: LLMBackend, settings: RampartConfig,
                 analysis_logger: Optional[AnalysisLogger] = None):
        self.backend = backend
        self.settings = settings
        self.analysis_logger = analysis_logger

    def analyze(self, source_code: str) -> StaticAnalysisResult:
        if not source_code or not source_code.strip():
            raise InputValidationError("Source code to audit must not be empty.")

        prompt = build_audit_prompt(source_code)
        started = time.time()
        response = self.backend.generate(prompt, temperature=self.settings.LLM_TEMPERATURE)
        duration = time.time() - started

        if self.analysis_logger is not None:
            self.analysis_logger.log_ai_call(
                self.ENGINE,
                prompt_role="audit",
                prompt=prompt,
                response=response.text,
                cost=response.cost,
                duration_seconds=duration,
                model=response.model,
                prompt_tokens=response.prompt_tokens,
                output_tokens=response.output_tokens,
            )

        return self.parse_response(response.text)

    @staticmethod
    def parse_response(text: str) -> StaticAnalysisResult:
        """validate a raw model answer against the audit schema"""
        try:
            payload = safe_json_loads(text)
        except ValueError as e:
            raise UpstreamParseError(f"Audit response was not valid JSON: {e}", raw=text) from e

        if not isinstance(payload, dict):
            raise UpstreamParseError("Audit response was not a JSON object", raw=text)

        try:
            return StaticAnalysisResult.model_validate(payload)
        except ValidationError as e:
            raise UpstreamParseError(
                f"Audit response did not match the expected schema ({e.error_count()} errors)",
                raw=text,
            ) from e

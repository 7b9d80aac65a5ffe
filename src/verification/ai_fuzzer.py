"""
AI-Driven Fuzzer Pipeline

Sequential state machine:

    FETCH_ABI -> GENERATE_TEST -> EXECUTE_TEST -> PASSED
                                               -> INCOMPATIBLE
                                               -> INTERPRET -> FAILED_INTERPRETED

Any stage may instead end in UNAVAILABLE. The pipeline never raises; an
unavailable run is reported as an incompatible outcome with the standard
fallback reason.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from config import RampartConfig
from errors import PipelineFailure
from models.report import FuzzOutcome, FuzzStatus, ai_fuzz_fallback
from agent.explorer import ExplorerClient
from agent.prompts import build_fuzz_generation_prompt, build_failure_interpretation_prompt
from utils.json_sanitizer import extract_first_code_block
from utils.llm_backend import LLMBackend
from utils.logging import AnalysisLogger
from verification.foundry_executor import FuzzHarness

logger = logging.getLogger(__name__)

INCOMPATIBLE_REASON = "AI-generated test was not compatible or failed to compile."


class PipelineStage(Enum):
    FETCH_ABI = "fetch_abi"
    GENERATE_TEST = "generate_test"
    EXECUTE_TEST = "execute_test"
    INTERPRET = "interpret"
    PASSED = "passed"
    INCOMPATIBLE = "incompatible"
    FAILED_INTERPRETED = "failed_interpreted"
    UNAVAILABLE = "unavailable"


TERMINAL_STAGES = frozenset({
    PipelineStage.PASSED,
    PipelineStage.INCOMPATIBLE,
    PipelineStage.FAILED_INTERPRETED,
    PipelineStage.UNAVAILABLE,
})


@dataclass
class PipelineRun:
    """everything one pipeline execution produced, in stage order"""
    address: str
    trail: List[PipelineStage] = field(default_factory=list)
    abi: Optional[str] = None
    test_code: Optional[str] = None
    failure_log: Optional[str] = None
    outcome: Optional[FuzzOutcome] = None
    error: Optional[str] = None

    @property
    def final_stage(self) -> Optional[PipelineStage]:
        return self.trail[-1] if self.trail else None

    def enter(self, stage: PipelineStage) -> None:
        logger.debug("ai fuzz %s: %s", self.address, stage.value)
        self.trail.append(stage)


class AIFuzzerPipeline:
    ENGINE = "ai_fuzz"

    def __init__(self, explorer: ExplorerClient, backend: LLMBackend, harness: FuzzHarness,
                 settings: RampartConfig, analysis_logger: Optional[AnalysisLogger] = None):
        self.explorer = explorer
        self.backend = backend
        self.harness = harness
        self.settings = settings
        self.analysis_logger = analysis_logger

    def run(self, address: str) -> FuzzOutcome:
        return self.execute(address).outcome

    def execute(self, address: str) -> PipelineRun:
        run = PipelineRun(address=address)
        try:
            self._fetch_abi(run)
            self._generate_test(run)
            self._execute_test(run)
            if run.final_stage == PipelineStage.INTERPRET:
                self._interpret(run)
        except Exception as e:
            failed_stage = e.stage if isinstance(e, PipelineFailure) else (
                run.final_stage.value if run.final_stage else "start")
            logger.warning("ai fuzzing unavailable for %s at %s: %s", address, failed_stage, e)
            if self.analysis_logger is not None:
                self.analysis_logger.log_error(self.ENGINE, type(e).__name__, str(e),
                                               context={"address": address, "stage": failed_stage})
            run.error = str(e)
            run.enter(PipelineStage.UNAVAILABLE)
            run.outcome = ai_fuzz_fallback()
        return run

    def _fetch_abi(self, run: PipelineRun) -> None:
        run.enter(PipelineStage.FETCH_ABI)
        abi = self.explorer.get_abi(run.address)
        if not abi:
            raise PipelineFailure(PipelineStage.FETCH_ABI.value, "ABI not found for this contract.")
        run.abi = abi

    def _generate_test(self, run: PipelineRun) -> None:
        run.enter(PipelineStage.GENERATE_TEST)
        text = self._ask("generate_test", build_fuzz_generation_prompt(run.abi))
        code = extract_first_code_block(text)
        if not code:
            raise PipelineFailure(PipelineStage.GENERATE_TEST.value,
                                  "model response contained no fenced code block")
        run.test_code = code

    def _execute_test(self, run: PipelineRun) -> None:
        run.enter(PipelineStage.EXECUTE_TEST)
        harness_run = self.harness.run_test_file(run.address, run.test_code, engine=self.ENGINE)

        if harness_run.status == FuzzStatus.PASSED:
            run.enter(PipelineStage.PASSED)
            run.outcome = FuzzOutcome(status=FuzzStatus.PASSED, detail=harness_run.stdout)
        elif harness_run.status == FuzzStatus.INCOMPATIBLE:
            run.enter(PipelineStage.INCOMPATIBLE)
            run.outcome = FuzzOutcome(status=FuzzStatus.INCOMPATIBLE, detail=INCOMPATIBLE_REASON)
        else:
            run.failure_log = harness_run.log
            run.enter(PipelineStage.INTERPRET)

    def _interpret(self, run: PipelineRun) -> None:
        explanation = self._ask("interpret", build_failure_interpretation_prompt(run.failure_log or ""))
        run.enter(PipelineStage.FAILED_INTERPRETED)
        run.outcome = FuzzOutcome(status=FuzzStatus.FAILED, detail=explanation)

    def _ask(self, role: str, prompt: str) -> str:
        started = time.time()
        response = self.backend.generate(prompt, temperature=self.settings.LLM_TEMPERATURE)
        if self.analysis_logger is not None:
            self.analysis_logger.log_ai_call(
                self.ENGINE,
                prompt_role=role,
                prompt=prompt,
                response=response.text,
                cost=response.cost,
                duration_seconds=time.time() - started,
                model=response.model,
                prompt_tokens=response.prompt_tokens,
                output_tokens=response.output_tokens,
            )
        return response.text

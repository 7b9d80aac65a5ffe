"""address analysis orchestrator - run every engine against one deployed contract and merge"""

from concurrent.futures import ThreadPoolExecutor, ALL_COMPLETED, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import logging
import time

from errors import UpstreamFetchError
from models.findings import StaticAnalysisResult
from models.report import (
    AddressReport,
    FuzzOutcome,
    HoneypotVerdict,
    ai_fuzz_fallback,
    generic_fuzz_fallback,
    honeypot_fallback,
)
from agent.explorer import ExplorerClient
from agent.static_audit import StaticAuditAdapter
from agent.honeypot import HoneypotAdapter
from verification.generic_fuzzer import GenericFuzzerAdapter
from verification.ai_fuzzer import AIFuzzerPipeline
from utils.correlation import bind_context
from utils.logging import AnalysisLogger, EngineOutcome

logger = logging.getLogger(__name__)


@dataclass
class EngineResult:
    """settled outcome of one engine task: exactly one of value / error is meaningful"""
    engine: str
    value: Any = None
    error: Optional[BaseException] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class AddressOrchestrator:
    """
    Fans out the static audit, honeypot simulation, generic fuzzing and the
    AI fuzzing pipeline concurrently, waits for all four to settle, and
    substitutes a fallback for every engine that failed.

    Only a missing verified source aborts the analysis.
    """

    STATIC = "static"
    DYNAMIC = "honeypot"
    GENERIC = "generic_fuzz"
    AI = "ai_fuzz"

    def __init__(
        self,
        explorer: ExplorerClient,
        static_adapter: StaticAuditAdapter,
        honeypot: HoneypotAdapter,
        generic_fuzzer: GenericFuzzerAdapter,
        ai_pipeline: AIFuzzerPipeline,
        analysis_logger: Optional[AnalysisLogger] = None,
        max_workers: int = 4,
    ):
        self.explorer = explorer
        self.static_adapter = static_adapter
        self.honeypot = honeypot
        self.generic_fuzzer = generic_fuzzer
        self.ai_pipeline = ai_pipeline
        self.analysis_logger = analysis_logger
        self.max_workers = max_workers

    def analyze(self, address: str) -> AddressReport:
        """
        Raises:
            UpstreamFetchError: explorer unreachable or no verified source
        """
        verified = self.explorer.get_source(address)
        if verified is None:
            raise UpstreamFetchError(f"Could not fetch source code for {address}.")

        tasks: Dict[str, Callable[[], Any]] = {
            self.STATIC: lambda: self.static_adapter.analyze(verified.source_code),
            self.DYNAMIC: lambda: self.honeypot.run(address),
            self.GENERIC: lambda: self.generic_fuzzer.run(address),
            self.AI: lambda: self.ai_pipeline.run(address),
        }
        results = self._settle_all(address, tasks)

        static: Optional[StaticAnalysisResult] = self._value_or(results[self.STATIC], None)
        dynamic: HoneypotVerdict = self._value_or(results[self.DYNAMIC], honeypot_fallback())
        generic: FuzzOutcome = self._value_or(results[self.GENERIC], generic_fuzz_fallback())
        ai: FuzzOutcome = self._value_or(results[self.AI], ai_fuzz_fallback())

        return AddressReport(
            static_analysis=static,
            dynamic_analysis=dynamic,
            generic_fuzzing=generic,
            ai_fuzzing=ai,
        )

    def _settle_all(self, address: str, tasks: Dict[str, Callable[[], Any]]) -> Dict[str, EngineResult]:
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(tasks)),
                                thread_name_prefix="engine") as executor:
            futures = {
                engine: executor.submit(bind_context(self._timed), engine, fn)
                for engine, fn in tasks.items()
            }
            wait(futures.values(), return_when=ALL_COMPLETED)

        results = {engine: future.result() for engine, future in futures.items()}
        for result in results.values():
            self._record(address, result)
        return results

    @staticmethod
    def _timed(engine: str, fn: Callable[[], Any]) -> EngineResult:
        started = time.time()
        try:
            value = fn()
        except Exception as e:
            return EngineResult(engine=engine, error=e, duration=time.time() - started)
        return EngineResult(engine=engine, value=value, duration=time.time() - started)

    def _record(self, address: str, result: EngineResult) -> None:
        if result.ok:
            logger.info("%s finished for %s in %.1fs", result.engine, address, result.duration)
        else:
            logger.warning("%s failed for %s: %s", result.engine, address, result.error,
                           exc_info=result.error)

        if self.analysis_logger is None:
            return
        self.analysis_logger.log_engine_run(
            result.engine,
            address,
            EngineOutcome.SUCCEEDED if result.ok else EngineOutcome.FAILED,
            duration_seconds=result.duration,
            detail=None if result.ok else f"{type(result.error).__name__}: {result.error}",
        )

    @staticmethod
    def _value_or(result: EngineResult, fallback: Any) -> Any:
        return result.value if result.ok else fallback

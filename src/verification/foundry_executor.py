"""foundry executor - run forge fuzz campaigns in the fuzz-harness workspace"""

from typing import List, Sequence
from dataclasses import dataclass
from pathlib import Path
import logging
import threading
import time

from config import RampartConfig
from errors import EngineFailure
from models.report import FuzzStatus
from utils.process import ProcessRunner, ProcessResult

logger = logging.getLogger(__name__)

AI_TEST_RELPATH = "test/AIGeneratedFuzzer.t.sol"
# forge --skip filter (file-name substring) for generated test files
AI_TEST_SKIP_FILTER = "AIGeneratedFuzzer"


@dataclass
class HarnessRun:
    """
    Result of one forge invocation

    Attributes:
        status: passed / failed / incompatible
        result: raw process result
        execution_time: seconds spent in forge
    """
    status: FuzzStatus
    result: ProcessResult
    execution_time: float

    @property
    def log(self) -> str:
        return self.result.combined_output

    @property
    def stdout(self) -> str:
        return self.result.stdout


def classify(result: ProcessResult, markers: Sequence[str]) -> FuzzStatus:
    """
    Exit 0 is a pass. A non-zero exit whose output mentions a compiler-error
    marker means the suite never ran against the target (incompatible);
    anything else is a genuine property violation.
    """
    if result.exit_code == 0 and not result.timed_out:
        return FuzzStatus.PASSED
    output = result.combined_output.lower()
    if any(marker.lower() in output for marker in markers):
        return FuzzStatus.INCOMPATIBLE
    return FuzzStatus.FAILED


class FuzzHarness:
    """
    Runs forge against the shared harness workspace

    The target contract reaches the Solidity side through the TARGET_CONTRACT
    environment variable.
    """

    def __init__(self, runner: ProcessRunner, settings: RampartConfig):
        self.runner = runner
        self.settings = settings
        self.project_root = Path(settings.FUZZING_ENGINE_DIR)
        self.markers: List[str] = list(settings.COMPILER_ERROR_MARKERS)
        self._test_file_lock = threading.Lock()

    def _forge(self, engine: str, address: str, args: List[str]) -> HarnessRun:
        started = time.time()
        try:
            result = self.runner.run(
                "forge",
                args,
                cwd=self.project_root,
                env={"TARGET_CONTRACT": address},
            )
        except OSError as e:
            raise EngineFailure(engine, f"could not launch forge: {e}") from e

        if result.timed_out:
            raise EngineFailure(engine, "forge timed out")

        status = classify(result, self.markers)
        elapsed = time.time() - started
        logger.info("forge %s for %s -> %s (%.1fs)", engine, address, status.value, elapsed)
        return HarnessRun(status=status, result=result, execution_time=elapsed)

    def run_generic(self, address: str, engine: str = "generic_fuzz") -> HarnessRun:
        """forge test --fuzz-runs N --match-contract GenericFuzzer, never compiling generated tests"""
        return self._forge(engine, address, [
            "test",
            "--fuzz-runs", str(self.settings.FUZZ_RUNS),
            "--match-contract", self.settings.GENERIC_FUZZER_CONTRACT,
            "--skip", AI_TEST_SKIP_FILTER,
        ])

    def write_test_file(self, code: str, relpath: str = AI_TEST_RELPATH) -> Path:
        """(over)write a test file inside the harness workspace"""
        path = self.project_root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(code, encoding="utf-8")
        return path

    def run_test_file(self, address: str, code: str, relpath: str = AI_TEST_RELPATH,
                      engine: str = "ai_fuzz") -> HarnessRun:
        """
        Write code to relpath, run only that file, then remove it.

        Generated tests share one path in the harness workspace, so runs are
        serialized and the file never outlives its own run.
        """
        with self._test_file_lock:
            path = self.write_test_file(code, relpath)
            try:
                return self._forge(engine, address, [
                    "test",
                    "--match-path", relpath,
                    "--fuzz-runs", str(self.settings.FUZZ_RUNS),
                ])
            finally:
                path.unlink(missing_ok=True)

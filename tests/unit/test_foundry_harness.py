"""tests for forge invocation and outcome classification"""

import pytest

from conftest import FakeRunner
from errors import EngineFailure
from models.report import FuzzStatus
from utils.process import ProcessResult
from verification.foundry_executor import AI_TEST_RELPATH, FuzzHarness, classify

MARKERS = ["Compiler error", "compilation failed"]


class TestClassify:
    def test_exit_zero_passes(self):
        assert classify(ProcessResult(0, "Compiler error mentioned in a passing log", ""), MARKERS) == FuzzStatus.PASSED

    def test_marker_in_stdout(self):
        assert classify(ProcessResult(1, "Error: Compiler error (x)", ""), MARKERS) == FuzzStatus.INCOMPATIBLE

    def test_marker_in_stderr(self):
        assert classify(ProcessResult(1, "", "Compilation failed"), MARKERS) == FuzzStatus.INCOMPATIBLE

    def test_other_failure(self):
        result = ProcessResult(1, "[FAIL. Reason: assertion failed] invariant_totalSupply()", "")
        assert classify(result, MARKERS) == FuzzStatus.FAILED


class TestFuzzHarness:
    def test_generic_invocation(self, settings):
        runner = FakeRunner()
        run = FuzzHarness(runner, settings).run_generic("0xdead")

        assert run.status == FuzzStatus.PASSED
        call = runner.calls[0]
        assert call["command"] == "forge"
        assert call["args"] == [
            "test", "--fuzz-runs", "256", "--match-contract", "GenericFuzzer", "--skip", "AIGeneratedFuzzer",
        ]
        assert call["env"] == {"TARGET_CONTRACT": "0xdead"}
        assert call["cwd"] == settings.FUZZING_ENGINE_DIR

    def test_run_test_file_writes_code(self, settings):
        written = settings.FUZZING_ENGINE_DIR / AI_TEST_RELPATH
        seen = []

        def forge(command, args, cwd, env):
            seen.append(written.read_text(encoding="utf-8"))
            return ProcessResult(0, "", "")

        runner = FakeRunner(forge)
        code = "pragma solidity ^0.8.0;\ncontract AIGeneratedFuzzer {}"
        FuzzHarness(runner, settings).run_test_file("0xdead", code)

        assert seen == [code]
        assert runner.calls[0]["args"] == ["test", "--match-path", "test/AIGeneratedFuzzer.t.sol", "--fuzz-runs", "256"]
        assert runner.calls[0]["env"] == {"TARGET_CONTRACT": "0xdead"}

    def test_generated_file_removed_after_run(self, settings):
        FuzzHarness(FakeRunner(), settings).run_test_file("0xdead", "contract AIGeneratedFuzzer {}")
        assert not (settings.FUZZING_ENGINE_DIR / AI_TEST_RELPATH).exists()

    def test_generated_file_removed_when_forge_fails_to_launch(self, settings):
        def missing(command, args, cwd, env):
            raise FileNotFoundError("forge")

        with pytest.raises(EngineFailure):
            FuzzHarness(FakeRunner(missing), settings).run_test_file("0xdead", "contract AIGeneratedFuzzer {}")
        assert not (settings.FUZZING_ENGINE_DIR / AI_TEST_RELPATH).exists()

    def test_generated_file_never_in_generic_build(self, settings):
        harness = FuzzHarness(FakeRunner(), settings)
        harness.write_test_file("contract AIGeneratedFuzzer { broken")
        harness.run_generic("0xdead")
        args = harness.runner.calls[0]["args"]
        assert args[args.index("--skip") + 1] in AI_TEST_RELPATH

    def test_launch_failure(self, settings):
        def missing(command, args, cwd, env):
            raise FileNotFoundError("forge")

        with pytest.raises(EngineFailure) as exc:
            FuzzHarness(FakeRunner(missing), settings).run_generic("0xdead")
        assert exc.value.engine == "generic_fuzz"

    def test_timeout(self, settings):
        runner = FakeRunner(lambda *a: ProcessResult(-1, "", "Timeout", timed_out=True))
        with pytest.raises(EngineFailure):
            FuzzHarness(runner, settings).run_generic("0xdead")

    def test_log_combines_streams(self, settings):
        runner = FakeRunner(lambda *a: ProcessResult(1, "stdout part", "stderr part"))
        run = FuzzHarness(runner, settings).run_generic("0xdead")
        assert run.status == FuzzStatus.FAILED
        assert run.log == "stdout part\nstderr part"

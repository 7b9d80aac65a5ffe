"""tests for the process-execution capability"""

import subprocess
import sys
from unittest.mock import patch

import pytest

from utils.process import ProcessResult, ProcessRunner


class TestProcessResult:
    def test_ok(self):
        assert ProcessResult(0, "out", "").ok
        assert not ProcessResult(1, "out", "").ok
        assert not ProcessResult(0, "", "", timed_out=True).ok

    def test_combined_output(self):
        assert ProcessResult(1, "a", "b").combined_output == "a\nb"
        assert ProcessResult(1, "", "b").combined_output == "b"
        assert ProcessResult(1, "a", "").combined_output == "a"


class TestProcessRunner:
    def test_captures_output_and_exit_code(self, tmp_path):
        runner = ProcessRunner()
        result = runner.run(sys.executable, ["-c", "import sys; print('hi'); sys.exit(3)"], cwd=tmp_path)
        assert result.exit_code == 3
        assert result.stdout.strip() == "hi"

    def test_env_is_layered(self, tmp_path):
        runner = ProcessRunner()
        result = runner.run(
            sys.executable,
            ["-c", "import os; print(os.environ['TARGET_CONTRACT'], 'PATH' in os.environ)"],
            env={"TARGET_CONTRACT": "0xabc"},
        )
        assert result.stdout.split() == ["0xabc", "True"]

    def test_missing_executable_raises(self):
        with pytest.raises(OSError):
            ProcessRunner().run("definitely-not-a-real-binary-rampart")

    def test_timeout_becomes_result(self):
        runner = ProcessRunner(timeout=1)
        with patch("utils.process.subprocess.run",
                   side_effect=subprocess.TimeoutExpired(cmd="forge", timeout=1, output=b"partial")):
            result = runner.run("forge", ["test"])
        assert result.timed_out
        assert result.exit_code == -1
        assert result.stdout == "partial"
        assert not result.ok

    def test_zero_timeout_means_none(self):
        assert ProcessRunner(timeout=0).timeout is None

"""tests for logging setup and the analysis ledger"""

import json
import logging

import pytest

from conftest import make_settings
from utils.correlation import AnalysisContext
from utils.logging import AnalysisIdFilter, AnalysisLogger, EngineOutcome, LogCategory, setup_logging


class TestLogCategory:
    def test_category_values(self):
        assert LogCategory.ENGINE_RUN.value == "engine_runs"
        assert LogCategory.AI_CALL.value == "ai_calls"
        assert LogCategory.REPO_SCAN.value == "repo_scans"
        assert LogCategory.ERROR.value == "errors"

    def test_category_invalid_value_raises_error(self):
        with pytest.raises(ValueError):
            LogCategory("invalid_category")


class TestSetupLogging:
    def test_idempotent(self):
        root = logging.getLogger()
        setup_logging("DEBUG")
        setup_logging("WARNING")
        ours = [h for h in root.handlers if getattr(h, "_rampart", False)]
        assert len(ours) == 1
        assert root.level == logging.WARNING

    def test_filter_stamps_analysis_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        with AnalysisContext("cafe0001"):
            AnalysisIdFilter().filter(record)
        assert record.analysis_id == "cafe0001"

        AnalysisIdFilter().filter(record)
        assert record.analysis_id == "-"


class TestAnalysisLogger:
    def test_engine_run_json_and_sqlite(self, settings):
        ledger = AnalysisLogger(settings)
        with AnalysisContext("abcd1234"):
            entry = ledger.log_engine_run("generic_fuzz", "0xabc", EngineOutcome.FAILED,
                                          duration_seconds=1.23456, detail="forge missing")

        assert entry.outcome == "failed"
        assert entry.duration_seconds == 1.235
        files = list((settings.LOGS_RAW_DIR / "engine_runs").glob("*abcd1234_generic_fuzz_*.json"))
        assert len(files) == 1
        saved = json.loads(files[0].read_text())
        assert saved["analysis_id"] == "abcd1234"
        assert saved["detail"] == "forge missing"

        rows = ledger.query_runs("abcd1234")
        assert rows == [{"engine": "generic_fuzz", "target": "0xabc", "outcome": "failed",
                         "duration_seconds": 1.235, "detail": "forge missing"}]
        assert ledger.query_runs("other") == []

    def test_costs_aggregate_per_engine(self, settings):
        ledger = AnalysisLogger(settings)
        ledger.log_ai_call("static", "audit", cost=0.25)
        ledger.log_ai_call("static", "audit", cost=0.25)
        ledger.log_ai_call("ai_fuzz", "generate_test", cost=0.1)
        costs = {row["engine"]: row for row in ledger.query_costs()}
        assert costs["static"]["total_cost"] == pytest.approx(0.5)
        assert costs["static"]["num_calls"] == 2
        assert costs["ai_fuzz"]["num_calls"] == 1

    def test_repo_scan_and_error_records(self, settings):
        ledger = AnalysisLogger(settings)
        ledger.log_repo_scan("https://github.com/a/b", files_discovered=12, files_analyzed=10,
                             files_skipped=1, files_failed=1, batches=3, duration_seconds=4.0)
        ledger.log_error("repo_scan", "UnicodeDecodeError", "bad bytes", context={"file": "A.sol"})
        assert len(list((settings.LOGS_RAW_DIR / "repo_scans").iterdir())) == 1
        assert len(list((settings.LOGS_RAW_DIR / "errors").iterdir())) == 1

    def test_sqlite_disabled(self, tmp_path):
        settings = make_settings(tmp_path, LOG_TO_SQLITE=False, LOG_RAW_JSON=False)
        ledger = AnalysisLogger(settings)
        ledger.log_engine_run("static", "0xabc", EngineOutcome.SUCCEEDED)
        assert ledger.query_runs() == []
        assert not settings.LOGS_DB_PATH.exists()

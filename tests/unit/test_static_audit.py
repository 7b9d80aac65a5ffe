"""tests for the static audit adapter"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from conftest import FakeBackend, make_settings
from errors import InputValidationError, UpstreamParseError
from models.findings import Severity
from agent.static_audit import StaticAuditAdapter

VALID_AUDIT = json.dumps({
    "riskScore": "High",
    "summary": "Unchecked external call in withdraw.",
    "findings": [
        {"title": "Reentrancy", "description": "State updated after call", "severity": "High"},
    ],
})

SOURCE = "pragma solidity ^0.8.0;\ncontract Vault { function withdraw() external {} }"


class TestStaticAuditAdapter(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.settings = make_settings(Path(self._tmp.name))

    def tearDown(self):
        self._tmp.cleanup()

    def test_plain_json_response(self):
        backend = FakeBackend([VALID_AUDIT])
        result = StaticAuditAdapter(backend, self.settings).analyze(SOURCE)
        self.assertEqual(result.risk_score, Severity.HIGH)
        self.assertEqual(result.findings[0].title, "Reentrancy")

    def test_prompt_carries_instruction_and_source(self):
        backend = FakeBackend([VALID_AUDIT])
        StaticAuditAdapter(backend, self.settings).analyze(SOURCE)
        prompt = backend.prompts[0]
        self.assertIn("riskScore", prompt)
        self.assertIn("Here is the contract code:\n" + SOURCE, prompt)

    def test_fenced_response(self):
        backend = FakeBackend([f"```json\n{VALID_AUDIT}\n```"])
        result = StaticAuditAdapter(backend, self.settings).analyze(SOURCE)
        self.assertEqual(result.summary, "Unchecked external call in withdraw.")

    def test_lowercase_enums_are_normalized(self):
        reply = json.dumps({"riskScore": "critical", "summary": "s",
                            "findings": [{"title": "t", "description": "d", "severity": "low"}]})
        result = StaticAuditAdapter(FakeBackend([reply]), self.settings).analyze(SOURCE)
        self.assertEqual(result.risk_score, Severity.CRITICAL)
        self.assertEqual(result.findings[0].severity, Severity.LOW)

    def test_missing_findings_become_empty(self):
        reply = json.dumps({"riskScore": "Low", "summary": "Nothing found."})
        result = StaticAuditAdapter(FakeBackend([reply]), self.settings).analyze(SOURCE)
        self.assertEqual(result.findings, [])

    def test_unparsable_response(self):
        adapter = StaticAuditAdapter(FakeBackend(["I'm sorry, I can't do that."]), self.settings)
        with self.assertRaises(UpstreamParseError) as ctx:
            adapter.analyze(SOURCE)
        self.assertEqual(ctx.exception.raw, "I'm sorry, I can't do that.")

    def test_out_of_enum_risk_score(self):
        reply = json.dumps({"riskScore": "Catastrophic", "summary": "s", "findings": []})
        with self.assertRaises(UpstreamParseError):
            StaticAuditAdapter(FakeBackend([reply]), self.settings).analyze(SOURCE)

    def test_json_array_is_rejected(self):
        with self.assertRaises(UpstreamParseError):
            StaticAuditAdapter(FakeBackend(["[1, 2]"]), self.settings).analyze(SOURCE)

    def test_empty_source(self):
        backend = FakeBackend([VALID_AUDIT])
        with self.assertRaises(InputValidationError):
            StaticAuditAdapter(backend, self.settings).analyze("   ")
        self.assertEqual(backend.prompts, [])

    def test_backend_errors_propagate(self):
        adapter = StaticAuditAdapter(FakeBackend([RuntimeError("503 upstream")]), self.settings)
        with self.assertRaises(RuntimeError):
            adapter.analyze(SOURCE)

    def test_ai_call_logged(self):
        analysis_logger = MagicMock()
        StaticAuditAdapter(FakeBackend([VALID_AUDIT]), self.settings, analysis_logger).analyze(SOURCE)
        analysis_logger.log_ai_call.assert_called_once()
        self.assertEqual(analysis_logger.log_ai_call.call_args.kwargs["prompt_role"], "audit")


if __name__ == "__main__":
    unittest.main()

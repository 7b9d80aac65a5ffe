"""tests for request parsing and routing"""

import json
from unittest.mock import MagicMock

import pytest

from conftest import FakeBackend
from errors import InputValidationError
from models.findings import Severity, StaticAnalysisResult
from models.report import FilesReport, FileAnalysisEntry, InputType, report_to_dict
from agent.static_audit import StaticAuditAdapter
from api.dispatcher import Dispatcher, parse_request
from utils.correlation import get_analysis_id
from utils.validation import InputValidator

AUDIT = json.dumps({"riskScore": "High", "summary": "Reentrancy in withdraw.", "findings": []})


def make_dispatcher(settings, backend=None):
    orchestrator = MagicMock()
    scanner = MagicMock()
    static = StaticAuditAdapter(backend or FakeBackend([AUDIT]), settings)
    return Dispatcher(orchestrator, scanner, static), orchestrator, scanner


class TestParseRequest:
    @pytest.mark.parametrize("body", [
        None,
        {},
        {"inputType": "address"},
        {"input": "0xabc"},
        {"inputType": "", "input": "0xabc"},
        {"inputType": "address", "input": ""},
        "not a mapping",
    ])
    def test_missing_fields(self, body):
        with pytest.raises(InputValidationError, match="Input type and value are required."):
            parse_request(body)

    @pytest.mark.parametrize("input_type", ["zip", "ADDRESS", "repo"])
    def test_unknown_type(self, input_type):
        with pytest.raises(InputValidationError, match="Invalid input type."):
            parse_request({"inputType": input_type, "input": "x"})

    def test_valid(self):
        request = parse_request({"inputType": "github", "input": "https://github.com/a/b"})
        assert request.input_type is InputType.REPOSITORY
        assert request.payload == "https://github.com/a/b"


class TestDispatch:
    def test_snippet_report(self, settings):
        dispatcher, orchestrator, scanner = make_dispatcher(settings)
        report = dispatcher.dispatch({"inputType": "text", "input": "pragma solidity ^0.8.0; contract A {}"})

        data = report_to_dict(report)
        assert data["reportType"] == "text"
        assert len(data["files"]) == 1
        assert data["files"][0]["file"] == "PastedCode.sol"
        assert data["files"][0]["analysis"]["riskScore"] == "High"
        orchestrator.analyze.assert_not_called()
        scanner.scan.assert_not_called()

    def test_address_routes_to_orchestrator(self, settings):
        dispatcher, orchestrator, scanner = make_dispatcher(settings)
        sentinel = object()
        orchestrator.analyze.return_value = sentinel
        assert dispatcher.dispatch({"inputType": "address", "input": " 0xabc "}) is sentinel
        orchestrator.analyze.assert_called_once_with("0xabc")
        scanner.scan.assert_not_called()

    def test_repository_routes_to_scanner(self, settings):
        dispatcher, orchestrator, scanner = make_dispatcher(settings)
        analysis = StaticAnalysisResult(risk_score=Severity.LOW, summary="ok")
        scanner.scan.return_value = [FileAnalysisEntry(relative_path="src/A.sol", analysis=analysis)]

        report = dispatcher.dispatch({"inputType": "github", "input": "https://github.com/a/b"})

        assert isinstance(report, FilesReport)
        assert report.report_type == "repo"
        assert report.files[0].relative_path == "src/A.sol"
        orchestrator.analyze.assert_not_called()

    def test_leading_dash_url_reaches_scanner(self, settings):
        dispatcher, _, scanner = make_dispatcher(settings)
        scanner.scan.return_value = []
        dispatcher.dispatch({"inputType": "github", "input": "--upload-pack=touch /tmp/x"})
        scanner.scan.assert_called_once_with("--upload-pack=touch /tmp/x")

    @pytest.mark.parametrize("body", [
        {"inputType": "text", "input": "   \n\t  "},
        {"inputType": "github", "input": "  "},
        {"inputType": "address", "input": "\n"},
    ])
    def test_blank_payload_is_missing(self, settings, body):
        dispatcher, orchestrator, scanner = make_dispatcher(settings)
        with pytest.raises(InputValidationError, match="Input type and value are required."):
            dispatcher.dispatch(body)
        orchestrator.analyze.assert_not_called()
        scanner.scan.assert_not_called()

    def test_oversized_snippet_rejected_before_llm(self, settings):
        class SmallLimit(InputValidator):
            MAX_SNIPPET_SIZE = 64

        backend = FakeBackend([AUDIT])
        dispatcher = Dispatcher(MagicMock(), MagicMock(), StaticAuditAdapter(backend, settings), SmallLimit())
        with pytest.raises(InputValidationError, match="Source snippet too large"):
            dispatcher.dispatch({"inputType": "text", "input": "contract C {}" + " " * 100 + "//"})
        assert backend.prompts == []

    def test_malformed_address_still_dispatched(self, settings):
        dispatcher, orchestrator, _ = make_dispatcher(settings)
        dispatcher.dispatch({"inputType": "address", "input": "0xABC"})
        orchestrator.analyze.assert_called_once_with("0xABC")

    def test_request_runs_in_analysis_context(self, settings):
        dispatcher, orchestrator, _ = make_dispatcher(settings)
        seen = []
        orchestrator.analyze.side_effect = lambda address: seen.append(get_analysis_id())
        dispatcher.dispatch({"inputType": "address", "input": "0xabc"})
        assert seen[0] is not None
        assert get_analysis_id() is None

"""request dispatcher: validate an analysis request and route it to exactly one pipeline"""

import logging
from typing import Any, Mapping, Optional

from errors import InputValidationError
from models.report import (
    AnalysisReport,
    AnalysisRequest,
    AddressReport,
    FileAnalysisEntry,
    FilesReport,
    InputType,
)
from agent.orchestrator import AddressOrchestrator
from agent.static_audit import StaticAuditAdapter
from cal.repo_scanner import RepositoryScanner
from utils.correlation import AnalysisContext
from utils.validation import InputValidator, ValidationResult

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Input type and value are required."
INVALID_TYPE_MESSAGE = "Invalid input type."
SNIPPET_FILENAME = "PastedCode.sol"


def parse_request(body: Optional[Mapping[str, Any]]) -> AnalysisRequest:
    """
    Build an AnalysisRequest from a decoded `{inputType, input}` body.

    Raises:
        InputValidationError: a field is missing or empty, or inputType is unknown
    """
    if not isinstance(body, Mapping):
        raise InputValidationError(MISSING_FIELDS_MESSAGE)
    input_type = body.get("inputType")
    payload = body.get("input")
    # whitespace-only counts as missing
    if not input_type or not payload or (isinstance(payload, str) and not payload.strip()):
        raise InputValidationError(MISSING_FIELDS_MESSAGE)
    if not isinstance(input_type, str) or not isinstance(payload, str):
        raise InputValidationError(INVALID_TYPE_MESSAGE)
    try:
        kind = InputType(input_type)
    except ValueError:
        raise InputValidationError(INVALID_TYPE_MESSAGE) from None
    return AnalysisRequest(input_type=kind, payload=payload)


class Dispatcher:
    def __init__(
        self,
        orchestrator: AddressOrchestrator,
        scanner: RepositoryScanner,
        static_adapter: StaticAuditAdapter,
        validator: Optional[InputValidator] = None,
    ):
        self.orchestrator = orchestrator
        self.scanner = scanner
        self.static_adapter = static_adapter
        self.validator = validator or InputValidator()

    def dispatch(self, body: Optional[Mapping[str, Any]]) -> AnalysisReport:
        request = parse_request(body)
        with AnalysisContext() as analysis_id:
            logger.info("analysis %s: %s request", analysis_id, request.input_type.value)
            return self.handle(request)

    def handle(self, request: AnalysisRequest) -> AnalysisReport:
        if request.input_type == InputType.ADDRESS:
            self._check(self.validator.validate_address(request.payload))
            return self._analyze_address(request.payload.strip())
        if request.input_type == InputType.REPOSITORY:
            self._check(self.validator.validate_repository_url(request.payload))
            return FilesReport(report_type="repo", files=self.scanner.scan(request.payload.strip()))
        self._check(self.validator.validate_snippet(request.payload))
        return self._analyze_snippet(request.payload)

    def _analyze_address(self, address: str) -> AddressReport:
        return self.orchestrator.analyze(address)

    def _analyze_snippet(self, source: str) -> FilesReport:
        analysis = self.static_adapter.analyze(source)
        return FilesReport(
            report_type="text",
            files=[FileAnalysisEntry(relative_path=SNIPPET_FILENAME, analysis=analysis)],
        )

    @staticmethod
    def _check(result: ValidationResult) -> None:
        for warning in result.warnings:
            logger.warning(warning)
        if not result.valid:
            raise InputValidationError("; ".join(result.errors))

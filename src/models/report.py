"""report models returned by the analysis pipelines"""

from enum import Enum
from dataclasses import dataclass
from typing import List, Optional, Literal, Union, Any

from pydantic import BaseModel, ConfigDict, Field

from models.findings import StaticAnalysisResult


class InputType(str, Enum):
    """wire values accepted in `inputType`"""
    ADDRESS = "address"
    REPOSITORY = "github"
    SNIPPET = "text"


@dataclass(frozen=True)
class AnalysisRequest:
    input_type: InputType
    payload: str


class FuzzStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    INCOMPATIBLE = "incompatible"


class FuzzOutcome(BaseModel):
    """outcome of one fuzz campaign; `detail` travels as `reason`"""
    status: FuzzStatus
    detail: str = Field(..., alias="reason")

    model_config = ConfigDict(populate_by_name=True)


class HoneypotVerdict(BaseModel):
    is_honeypot: bool = Field(..., alias="isHoneypot")
    reason: str

    model_config = ConfigDict(populate_by_name=True)


class FileAnalysisEntry(BaseModel):
    relative_path: str = Field(..., alias="file")
    analysis: Optional[StaticAnalysisResult] = None

    model_config = ConfigDict(populate_by_name=True)


class AddressReport(BaseModel):
    """merged report for a deployed contract; every key is always present"""
    report_type: Literal["address"] = Field("address", alias="reportType")
    static_analysis: Optional[StaticAnalysisResult] = Field(..., alias="staticAnalysis")
    dynamic_analysis: HoneypotVerdict = Field(..., alias="dynamicAnalysis")
    generic_fuzzing: FuzzOutcome = Field(..., alias="genericFuzzing")
    ai_fuzzing: FuzzOutcome = Field(..., alias="aiFuzzing")

    model_config = ConfigDict(populate_by_name=True)


class FilesReport(BaseModel):
    """per-file results for a repository scan or a pasted snippet"""
    report_type: Literal["repo", "text"] = Field(..., alias="reportType")
    files: List[FileAnalysisEntry] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


AnalysisReport = Union[AddressReport, FilesReport]


def report_to_dict(report: AnalysisReport) -> dict[str, Any]:
    """serialize a report the way clients receive it"""
    return report.model_dump(mode="json", by_alias=True)


# fallbacks used when an engine fails inside an address analysis
HONEYPOT_FALLBACK_REASON = "Honeypot check failed."
GENERIC_FUZZ_FALLBACK_REASON = "Generic fuzzing failed."
AI_FUZZ_FALLBACK_REASON = "AI-driven fuzzing process failed to run."


def honeypot_fallback() -> HoneypotVerdict:
    return HoneypotVerdict(is_honeypot=False, reason=HONEYPOT_FALLBACK_REASON)


def generic_fuzz_fallback() -> FuzzOutcome:
    return FuzzOutcome(status=FuzzStatus.INCOMPATIBLE, detail=GENERIC_FUZZ_FALLBACK_REASON)


def ai_fuzz_fallback() -> FuzzOutcome:
    return FuzzOutcome(status=FuzzStatus.INCOMPATIBLE, detail=AI_FUZZ_FALLBACK_REASON)

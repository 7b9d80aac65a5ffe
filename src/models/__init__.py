from .findings import (
    Severity,
    RiskScore,
    Finding,
    StaticAnalysisResult,
)
from .report import (
    InputType,
    AnalysisRequest,
    FuzzStatus,
    FuzzOutcome,
    HoneypotVerdict,
    FileAnalysisEntry,
    AddressReport,
    FilesReport,
    AnalysisReport,
    report_to_dict,
)

__all__ = [
    'Severity',
    'RiskScore',
    'Finding',
    'StaticAnalysisResult',
    'InputType',
    'AnalysisRequest',
    'FuzzStatus',
    'FuzzOutcome',
    'HoneypotVerdict',
    'FileAnalysisEntry',
    'AddressReport',
    'FilesReport',
    'AnalysisReport',
    'report_to_dict',
]

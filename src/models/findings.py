from enum import Enum
from typing import List, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    """severity / risk classification"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def normalize(cls, value: Any) -> Any:
        """map case variants ("high", " HIGH ") onto the canonical value; leave anything else alone"""
        if isinstance(value, str):
            lookup = {member.value.lower(): member for member in cls}
            return lookup.get(value.strip().lower(), value)
        return value


# risk scores share the severity scale
RiskScore = Severity


class Finding(BaseModel):
    """single issue reported by the static audit"""
    title: str
    description: str
    severity: Severity

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> Any:
        return Severity.normalize(value)


class StaticAnalysisResult(BaseModel):
    """structured result of one llm audit"""
    risk_score: RiskScore = Field(..., alias="riskScore")
    summary: str = ""
    findings: List[Finding] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("risk_score", mode="before")
    @classmethod
    def _normalize_risk(cls, value: Any) -> Any:
        return Severity.normalize(value)

    @field_validator("findings", mode="before")
    @classmethod
    def _findings_never_absent(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_text(cls, value: Any) -> Any:
        return "" if value is None else value

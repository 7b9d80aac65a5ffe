"""logging types: categories for raw json files and the engine-run record"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


class LogCategory(Enum):
    """log categories; each maps to a subdirectory of the raw log dir"""
    ENGINE_RUN = "engine_runs"
    AI_CALL = "ai_calls"
    REPO_SCAN = "repo_scans"
    ERROR = "errors"


class EngineOutcome(Enum):
    """how an engine's task settled"""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class EngineRunEntry:
    """one engine invocation inside one analysis request"""
    timestamp: str
    analysis_id: Optional[str]
    engine: str
    target: str
    outcome: str
    duration_seconds: float
    detail: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

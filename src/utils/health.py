"""health check utilities: which engines can actually run on this host"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Dict, Any, Callable
import shutil

from config import RampartConfig


class HealthStatus(Enum):
    """health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"  # some non-critical checks failed
    UNHEALTHY = "unhealthy"  # critical checks failed


@dataclass
class HealthCheckResult:
    """result of a single health check."""
    name: str
    status: HealthStatus
    message: str
    details: Optional[Dict[str, Any]] = None
    is_critical: bool = True  # if false, failure results in degraded not unhealthy

    def to_dict(self) -> Dict[str, Any]:
        """convert to dictionary for json serialization."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details or {},
            "is_critical": self.is_critical
        }


class HealthChecker:
    """readiness of credentials and external tools for each engine."""

    def __init__(self, settings: RampartConfig, which: Callable[[str], Optional[str]] = shutil.which):
        self.settings = settings
        self._which = which
        self.results: List[HealthCheckResult] = []

    def _tool(self, name: str, binary: str, purpose: str, critical: bool) -> HealthCheckResult:
        path = self._which(binary)
        if path:
            return HealthCheckResult(name=name, status=HealthStatus.HEALTHY,
                                     message=f"{binary} found", details={"path": path},
                                     is_critical=critical)
        return HealthCheckResult(name=name, status=HealthStatus.UNHEALTHY,
                                 message=f"{binary} not found in PATH ({purpose} unavailable)",
                                 details={"path": None}, is_critical=critical)

    def check_llm_credentials(self) -> HealthCheckResult:
        if self.settings.OPENROUTER_API_KEY:
            return HealthCheckResult(name="llm_credentials", status=HealthStatus.HEALTHY,
                                     message=f"LLM API key set (model {self.settings.DEFAULT_MODEL})",
                                     details={"model": self.settings.DEFAULT_MODEL})
        return HealthCheckResult(name="llm_credentials", status=HealthStatus.UNHEALTHY,
                                 message="OPENROUTER_API_KEY not configured",
                                 details={"model": self.settings.DEFAULT_MODEL})

    def check_explorer_credentials(self) -> HealthCheckResult:
        ok = bool(self.settings.ETHERSCAN_API_KEY)
        return HealthCheckResult(
            name="explorer_credentials",
            status=HealthStatus.HEALTHY if ok else HealthStatus.UNHEALTHY,
            message="Explorer API key set" if ok else "ETHERSCAN_API_KEY not configured",
            details={"chain": self.settings.CHAIN},
            is_critical=False,
        )

    def check_fuzzing_engine(self) -> HealthCheckResult:
        engine_dir = self.settings.FUZZING_ENGINE_DIR
        if engine_dir.is_dir():
            return HealthCheckResult(name="fuzzing_engine", status=HealthStatus.HEALTHY,
                                     message="Fuzzing engine workspace present",
                                     details={"path": str(engine_dir)}, is_critical=False)
        return HealthCheckResult(name="fuzzing_engine", status=HealthStatus.UNHEALTHY,
                                 message="Fuzzing engine workspace missing",
                                 details={"path": str(engine_dir)}, is_critical=False)

    def run_all(self) -> List[HealthCheckResult]:
        self.results = [
            self.check_llm_credentials(),
            self.check_explorer_credentials(),
            self._tool("git", "git", "repository scans", critical=False),
            self._tool("foundry", "forge", "fuzzing", critical=False),
            self._tool("cast", "cast", "honeypot simulation", critical=False),
            self.check_fuzzing_engine(),
        ]
        return self.results

    def overall_status(self) -> HealthStatus:
        if not self.results:
            self.run_all()
        if any(r.status == HealthStatus.UNHEALTHY and r.is_critical for r in self.results):
            return HealthStatus.UNHEALTHY
        if any(r.status != HealthStatus.HEALTHY for r in self.results):
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def report(self) -> Dict[str, Any]:
        results = self.run_all()
        return {
            "status": self.overall_status().value,
            "checks": [r.to_dict() for r in results],
        }

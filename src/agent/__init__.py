"""address-level engines: explorer lookups, static audit, honeypot simulation and the orchestrator"""

from .explorer import ExplorerClient, VerifiedSource
from .static_audit import StaticAuditAdapter
from .honeypot import HoneypotAdapter
from .orchestrator import AddressOrchestrator, EngineResult

__all__ = [
    "ExplorerClient", "VerifiedSource",
    "StaticAuditAdapter", "HoneypotAdapter",
    "AddressOrchestrator", "EngineResult",
]

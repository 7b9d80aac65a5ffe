"""logging package: stdlib logging setup plus the json + sqlite analysis ledger"""

# import types
from .types import LogCategory, EngineOutcome, EngineRunEntry

# import core logger
from .core import AnalysisLogger, AnalysisIdFilter, setup_logging

# define public api
__all__ = [
    # types
    "LogCategory",
    "EngineOutcome",
    "EngineRunEntry",

    # core logger
    "AnalysisLogger",
    "AnalysisIdFilter",
    "setup_logging",
]

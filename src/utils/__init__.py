"""utilities for rampart"""
from .logging import AnalysisLogger, LogCategory
from .llm_backend import LLMBackend, create_backend, LLMResponse
from .process import ProcessRunner, ProcessResult

__all__ = [
    "AnalysisLogger",
    "LogCategory",
    "LLMBackend",
    "create_backend",
    "LLMResponse",
    "ProcessRunner",
    "ProcessResult",
]

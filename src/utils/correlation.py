"""correlation id management: every log line and engine-run record of one request share an analysis id"""
import contextvars
import uuid
from contextvars import ContextVar
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

# context variable for thread/async-safe correlation id
_analysis_id: ContextVar[Optional[str]] = ContextVar('analysis_id', default=None)


def generate_analysis_id() -> str:
    """generate a new analysis id. returns: 8-character hex string (e.g., "a3f9b2c4")"""
    return uuid.uuid4().hex[:8]


def set_analysis_id(analysis_id: Optional[str]) -> None:
    _analysis_id.set(analysis_id)


def get_analysis_id() -> Optional[str]:
    return _analysis_id.get()


def bind_context(fn: Callable[..., T]) -> Callable[..., T]:
    """
    Wrap fn so it runs inside a copy of the caller's context.

    Pool threads do not inherit contextvars; submit bind_context(fn) instead of fn.
    """
    ctx = contextvars.copy_context()

    def _run(*args, **kwargs) -> T:
        return ctx.copy().run(fn, *args, **kwargs)

    return _run


class AnalysisContext:
    """
    Context manager for request correlation.

    Usage:
        with AnalysisContext() as analysis_id:
            ...
    """

    def __init__(self, analysis_id: Optional[str] = None):
        self.analysis_id = analysis_id or generate_analysis_id()
        self._token = None

    def __enter__(self) -> str:
        self._token = _analysis_id.set(self.analysis_id)
        return self.analysis_id

    def __exit__(self, *args):
        if self._token is not None:
            _analysis_id.reset(self._token)
            self._token = None

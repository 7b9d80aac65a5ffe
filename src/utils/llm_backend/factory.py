"""llm backend factory"""

from typing import Optional

from config import RampartConfig
from utils.llm_backend.base import LLMBackend
from utils.llm_backend.openrouter import OpenRouterBackend


def create_backend(settings: RampartConfig, model: Optional[str] = None, **kwargs) -> LLMBackend:
    """create the backend shared by every adapter for the lifetime of the process"""
    return OpenRouterBackend(settings=settings, model=model or settings.DEFAULT_MODEL, **kwargs)

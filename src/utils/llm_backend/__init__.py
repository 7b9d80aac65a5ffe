"""llm backend package: one openai-compatible client shared by all adapters"""

# import base classes
from .base import LLMResponse, LLMBackend
from .openrouter import OpenRouterBackend

# import factory function
from .factory import create_backend


# define public api
__all__ = [
    "LLMResponse",
    "LLMBackend",
    "OpenRouterBackend",
    "create_backend",
]

"""llm backend base classes shared by every provider implementation"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class LLMResponse:
    """unified response format from any llm backend"""
    text: str
    prompt_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0
    model: str = ""
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        """initialize metadata dict if not provided."""
        if self.metadata is None:
            self.metadata = {}


class LLMBackend(ABC):
    """abstract base class for all llm backends. adapters only ever call generate()."""

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 4000,
        temperature: float = 0.7,
        **kwargs
    ) -> LLMResponse:
        """single-turn prompt/response exchange"""

    @abstractmethod
    def is_available(self) -> bool:
        """whether the backend is configured well enough to be called"""

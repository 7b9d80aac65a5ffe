from typing import Dict, Any, Optional, List
import logging
import time
import random

import httpx
from openai import OpenAI

from config import RampartConfig
from utils.llm_backend.base import LLMBackend, LLMResponse

logger = logging.getLogger(__name__)

RETRYABLE_PATTERNS = [
    "connection", "connect", "network", "socket", "reset by peer", "broken pipe", "eof",
    "ssl", "tls", "handshake", "closed", "timeout", "timed out", "deadline exceeded",
    "rate limit", "rate_limit", "too many requests", "quota exceeded", "throttl",
    "429", "500", "502", "503", "504", "520", "521", "522", "523", "524",
    "service unavailable", "bad gateway", "gateway timeout", "internal server error",
    "server error", "temporarily unavailable", "overloaded", "capacity", "upstream",
]


class OpenRouterBackend(LLMBackend):
    """openai-compatible chat completions through openrouter"""

    def __init__(self, settings: RampartConfig, model: Optional[str] = None,
                 api_key: Optional[str] = None, base_url: Optional[str] = None,
                 client: Optional[Any] = None):
        super().__init__(model or settings.DEFAULT_MODEL)
        self.settings = settings
        self.max_retries = settings.LLM_MAX_RETRIES
        self._http_client = None

        api_key = api_key or settings.OPENROUTER_API_KEY
        if client is not None:
            self.client = client
        else:
            if not api_key:
                raise ValueError("No LLM API key found. Set OPENROUTER_API_KEY")
            timeout = httpx.Timeout(300.0, connect=30.0, read=300.0)
            self._http_client = httpx.Client(timeout=timeout)
            self.client = OpenAI(api_key=api_key, base_url=base_url or settings.LLM_BASE_URL,
                                 http_client=self._http_client)

        if settings.DEBUG_LLM_CALLS:
            logger.debug("[OpenRouter] initialized model=%s", self.model)

    def close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def is_available(self) -> bool:
        return self.client is not None

    def _is_retryable_error(self, error: Exception) -> bool:
        error_str = str(error).lower()
        return any(pattern in error_str for pattern in RETRYABLE_PATTERNS)

    def _retry_with_backoff(self, func, base_delay: float = 3.0):
        last_exception = None
        start_time = time.time()
        MAX_TOTAL_TIME = 300

        for attempt in range(self.max_retries + 1):
            if time.time() - start_time > MAX_TOTAL_TIME:
                raise RuntimeError(f"Retry timeout exceeded ({MAX_TOTAL_TIME}s elapsed)")
            try:
                return func()
            except Exception as e:
                last_exception = e
                if not self._is_retryable_error(e):
                    raise
                if attempt >= self.max_retries:
                    logger.error("[OpenRouter] all %d attempts failed: %s", self.max_retries + 1, e)
                    raise
                delay = min(60.0, base_delay * (2 ** attempt)) + random.uniform(0, 2)
                logger.warning("[OpenRouter] attempt %d/%d failed: %s; retrying in %.1fs",
                               attempt + 1, self.max_retries + 1, e, delay)
                time.sleep(delay)
        raise last_exception

    def _build_messages(self, prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _calculate_cost(self, usage):
        if not usage:
            if self.settings.DEBUG_LLM_CALLS:
                logger.debug("[OpenRouter] response missing usage info")
            return 0, 0, 0.0

        prompt_tokens = getattr(usage, 'prompt_tokens', 0) or 0
        completion_tokens = getattr(usage, 'completion_tokens', 0) or 0

        pricing = self.settings.get_model_pricing(self.model)
        input_cost = (prompt_tokens / 1_000_000) * pricing["input"]
        output_cost = (completion_tokens / 1_000_000) * pricing["output"]
        return prompt_tokens, completion_tokens, input_cost + output_cost

    def generate(self, prompt: str, system_prompt: Optional[str] = None, max_tokens: int = 0,
                 temperature: Optional[float] = None, **kwargs) -> LLMResponse:
        request_params = {
            "model": self.model,
            "messages": self._build_messages(prompt, system_prompt),
            "max_tokens": max_tokens or self.settings.LLM_MAX_TOKENS,
            "temperature": self.settings.LLM_TEMPERATURE if temperature is None else temperature,
        }

        def _make_request():
            response = self.client.chat.completions.create(**request_params, **kwargs)
            if not response.choices:
                raise ValueError("OpenRouter API returned empty choices array")
            return response

        response = self._retry_with_backoff(_make_request)
        message = response.choices[0].message
        prompt_tokens, completion_tokens, cost = self._calculate_cost(getattr(response, "usage", None))

        if self.settings.DEBUG_LLM_CALLS:
            logger.debug("[OpenRouter] prompt_tokens=%s completion_tokens=%s cost=$%.5f",
                         prompt_tokens, completion_tokens, cost)

        return LLMResponse(text=message.content or "", prompt_tokens=prompt_tokens,
                           output_tokens=completion_tokens, cost=cost, model=self.model,
                           metadata={"provider": "openrouter",
                                     "stop_reason": response.choices[0].finish_reason})

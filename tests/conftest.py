"""shared fixtures: isolated settings plus fake process runner and llm backend"""

import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from config import RampartConfig
from utils.llm_backend.base import LLMBackend, LLMResponse
from utils.process import ProcessResult


class FakeRunner:
    """records every invocation; responder(command, args, cwd, env) decides the result"""

    def __init__(self, responder: Optional[Callable] = None):
        self.calls: List[dict] = []
        self._lock = threading.Lock()
        self.responder = responder or (lambda command, args, cwd, env: ProcessResult(0, "", ""))

    def run(self, command, args=(), cwd=None, env=None):
        with self._lock:
            self.calls.append({
                "command": command,
                "args": list(args),
                "cwd": cwd,
                "env": dict(env or {}),
            })
        return self.responder(command, list(args), cwd, env)


Reply = Union[str, Exception]


class FakeBackend(LLMBackend):
    """
    Scripted llm backend.

    replies is either a list consumed in order or a callable taking the prompt.
    An Exception reply is raised instead of returned.
    """

    def __init__(self, replies: Union[List[Reply], Callable[[str], Reply]], model: str = "fake/model"):
        super().__init__(model)
        self.replies = replies
        self.prompts: List[str] = []
        self._lock = threading.Lock()

    def generate(self, prompt, system_prompt=None, max_tokens=4000, temperature=0.7, **kwargs):
        with self._lock:
            self.prompts.append(prompt)
            if callable(self.replies):
                reply = self.replies(prompt)
            else:
                reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(text=reply, prompt_tokens=10, output_tokens=5, cost=0.0001, model=self.model)

    def is_available(self):
        return True


def make_settings(root: Path, **overrides) -> RampartConfig:
    values = dict(
        PROJECT_ROOT=root,
        OPENROUTER_API_KEY="test-openrouter-key-0123456789",
        ETHERSCAN_API_KEY="TESTETHERSCANKEY",
        RPC_URL="http://127.0.0.1:8545",
        FUZZING_ENGINE_DIR=root / "fuzzing_engine",
        HONEYPOT_WORKDIR=root / "server",
        WORKSPACE_ROOT=root / "workspaces",
    )
    values.update(overrides)
    return RampartConfig(**values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)

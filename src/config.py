import os
import re
import warnings
from pathlib import Path
from typing import Optional, List, Dict, Mapping
from dataclasses import dataclass, field


def safe_int(value: Optional[str], default: int, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
    if value is None or value == "":
        return default
    try:
        result = int(value)
        if min_val is not None and result < min_val:
            warnings.warn(
                f"Value {result} is below minimum {min_val}, using default {default}",
                RuntimeWarning,
                stacklevel=2
            )
            return default
        if max_val is not None and result > max_val:
            warnings.warn(
                f"Value {result} exceeds maximum {max_val}, using default {default}",
                RuntimeWarning,
                stacklevel=2
            )
            return default
        return result
    except (ValueError, TypeError):
        return default


def safe_float(value: Optional[str], default: float, min_val: Optional[float] = None, max_val: Optional[float] = None) -> float:
    if value is None or value == "":
        return default
    try:
        result = float(value)
        if min_val is not None and result < min_val:
            warnings.warn(
                f"Value {result} is below minimum {min_val}, using default {default}",
                RuntimeWarning,
                stacklevel=2
            )
            return default
        if max_val is not None and result > max_val:
            warnings.warn(
                f"Value {result} exceeds maximum {max_val}, using default {default}",
                RuntimeWarning,
                stacklevel=2
            )
            return default
        return result
    except (ValueError, TypeError):
        return default


def validate_api_key(key: Optional[str], key_name: str) -> bool:
    if not key:
        return False
    if not isinstance(key, str):
        warnings.warn(f"{key_name} must be a string", RuntimeWarning, stacklevel=2)
        return False

    if len(key) < 20:
        warnings.warn(
            f"{key_name} appears too short (min 20 characters expected)",
            RuntimeWarning,
            stacklevel=2
        )
        return False

    if len(key) > 500:
        warnings.warn(
            f"{key_name} appears too long (max 500 characters)",
            RuntimeWarning,
            stacklevel=2
        )
        return False

    if not re.match(r'^[A-Za-z0-9_\-\.]+$', key):
        warnings.warn(
            f"{key_name} contains invalid characters (only alphanumeric, -, _, . allowed)",
            RuntimeWarning,
            stacklevel=2
        )
        return False

    return True


DEFAULT_PROJECT_ROOT = Path(__file__).parent.parent.absolute()

MODEL_GEMINI_FLASH = "google/gemini-flash-1.5"

DEFAULT_MODEL_PRICING: Dict[str, Dict[str, float]] = {
    "google/gemini-flash-1.5": {"input": 0.075, "output": 0.30},
    "google/gemini-2.0-flash-001": {"input": 0.10, "output": 0.40},
    "x-ai/grok-4.1-fast": {"input": 0.20, "output": 0.50},
}


@dataclass(frozen=True)
class RampartConfig:
    """
    Process-wide settings.

    Built once at startup by load_config() and handed to every adapter,
    pipeline and the HTTP app. Nothing reads the environment after that.
    """
    PROJECT_ROOT: Path = DEFAULT_PROJECT_ROOT

    # credentials
    OPENROUTER_API_KEY: Optional[str] = None
    ETHERSCAN_API_KEY: Optional[str] = None

    # chain / explorer
    CHAIN: str = "sepolia"
    RPC_URL: Optional[str] = None
    EXPLORER_TIMEOUT: int = 15

    # language model
    DEFAULT_MODEL: str = MODEL_GEMINI_FLASH
    LLM_BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 8000
    LLM_MAX_RETRIES: int = 4
    MODEL_PRICING: Dict[str, Dict[str, float]] = field(default_factory=lambda: dict(DEFAULT_MODEL_PRICING))

    # fuzz harness / honeypot
    FUZZING_ENGINE_DIR: Path = DEFAULT_PROJECT_ROOT / "fuzzing_engine"
    FUZZ_RUNS: int = 256
    GENERIC_FUZZER_CONTRACT: str = "GenericFuzzer"
    HONEYPOT_COMMAND: str = "./honeypot_check.sh"
    HONEYPOT_WORKDIR: Path = DEFAULT_PROJECT_ROOT / "server"
    PROCESS_TIMEOUT: int = 0  # seconds, 0 = wait forever
    COMPILER_ERROR_MARKERS: List[str] = field(default_factory=lambda: [
        "Compiler error",
        "compilation failed",
    ])

    # repository scanner
    WORKSPACE_ROOT: Path = DEFAULT_PROJECT_ROOT / "data" / "workspaces"
    SCAN_BATCH_SIZE: int = 5
    SCAN_BATCH_DELAY_MS: int = 2000
    SCAN_MIN_CONTENT_LENGTH: int = 50
    SOURCE_EXTENSION: str = ".sol"

    # logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_SQLITE: bool = True
    LOG_RAW_JSON: bool = True
    DEBUG_LLM_CALLS: bool = False

    # http
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    @property
    def DATA_DIR(self) -> Path:
        return self.PROJECT_ROOT / "data"

    @property
    def LOGS_DIR(self) -> Path:
        return self.DATA_DIR / "logs"

    @property
    def LOGS_RAW_DIR(self) -> Path:
        return self.LOGS_DIR / "raw"

    @property
    def LOGS_DB_PATH(self) -> Path:
        return self.LOGS_DIR / "analytics.db"

    @property
    def PROCESS_TIMEOUT_SECONDS(self) -> Optional[int]:
        return self.PROCESS_TIMEOUT or None

    def get_model_pricing(self, model_name: str) -> Dict[str, float]:
        if model_name not in self.MODEL_PRICING:
            warnings.warn(f"Unknown model '{model_name}', using zero pricing", RuntimeWarning)
        return self.MODEL_PRICING.get(model_name, {"input": 0.0, "output": 0.0})

    def ensure_directories(self) -> None:
        for directory in (self.DATA_DIR, self.LOGS_DIR, self.LOGS_RAW_DIR, self.WORKSPACE_ROOT):
            directory.mkdir(parents=True, exist_ok=True)

    def validate(self) -> List[str]:
        """Return a list of configuration problems; empty when ready to serve."""
        problems: List[str] = []
        if not self.OPENROUTER_API_KEY:
            problems.append(
                "OPENROUTER_API_KEY environment variable not set. "
                "Set it with: export OPENROUTER_API_KEY='your-key'"
            )
        elif not validate_api_key(self.OPENROUTER_API_KEY, "OPENROUTER_API_KEY"):
            problems.append("OPENROUTER_API_KEY format validation failed")

        if not self.ETHERSCAN_API_KEY:
            problems.append(
                "ETHERSCAN_API_KEY environment variable not set. "
                "Address analysis needs verified source from the explorer."
            )

        if not self.FUZZING_ENGINE_DIR.exists():
            problems.append(f"Fuzzing engine directory does not exist: {self.FUZZING_ENGINE_DIR}")

        if not self.PROJECT_ROOT.exists():
            problems.append(f"Project root does not exist: {self.PROJECT_ROOT}")
        return problems

    def summary(self) -> str:
        llm_status = "Set" if self.OPENROUTER_API_KEY else "NOT SET"
        explorer_status = "Set" if self.ETHERSCAN_API_KEY else "NOT SET"

        return f"""
Rampart Configuration:
  Project Root: {self.PROJECT_ROOT}
  Data Dir: {self.DATA_DIR}
  Chain: {self.CHAIN}
  Model: {self.DEFAULT_MODEL}
  Fuzz Runs: {self.FUZZ_RUNS}
  Fuzzing Engine: {self.FUZZING_ENGINE_DIR}
  Honeypot Command: {self.HONEYPOT_COMMAND} (cwd {self.HONEYPOT_WORKDIR})
  Scan Batches: {self.SCAN_BATCH_SIZE} files, {self.SCAN_BATCH_DELAY_MS}ms apart
  Process Timeout: {self.PROCESS_TIMEOUT or 'None'}
  Logging: {self.LOG_LEVEL}{' + sqlite' if self.LOG_TO_SQLITE else ''}
  LLM API Key: {llm_status}
  Explorer API Key: {explorer_status}
""".strip()


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config(env: Optional[Mapping[str, str]] = None) -> RampartConfig:
    """Build the process configuration from environment variables."""
    env = os.environ if env is None else env

    root = Path(env.get("RAMPART_ROOT") or DEFAULT_PROJECT_ROOT)
    markers = [m.strip() for m in env.get("COMPILER_ERROR_MARKERS", "").split("|") if m.strip()]

    kwargs = dict(
        PROJECT_ROOT=root,
        OPENROUTER_API_KEY=env.get("OPENROUTER_API_KEY") or None,
        ETHERSCAN_API_KEY=env.get("ETHERSCAN_API_KEY") or None,
        CHAIN=(env.get("CHAIN") or "sepolia").lower(),
        RPC_URL=env.get("RPC_URL") or env.get("SEPOLIA_RPC_URL") or None,
        EXPLORER_TIMEOUT=safe_int(env.get("EXPLORER_TIMEOUT"), default=15, min_val=1, max_val=300),
        DEFAULT_MODEL=env.get("MODEL") or MODEL_GEMINI_FLASH,
        LLM_BASE_URL=env.get("LLM_BASE_URL") or "https://openrouter.ai/api/v1",
        LLM_TEMPERATURE=safe_float(env.get("LLM_TEMPERATURE"), default=0.2, min_val=0.0, max_val=2.0),
        LLM_MAX_TOKENS=safe_int(env.get("LLM_MAX_TOKENS"), default=8000, min_val=256, max_val=64000),
        LLM_MAX_RETRIES=safe_int(env.get("LLM_MAX_RETRIES"), default=4, min_val=0, max_val=10),
        FUZZING_ENGINE_DIR=Path(env.get("FUZZING_ENGINE_DIR") or root / "fuzzing_engine"),
        FUZZ_RUNS=safe_int(env.get("FUZZ_RUNS"), default=256, min_val=1, max_val=100000),
        GENERIC_FUZZER_CONTRACT=env.get("GENERIC_FUZZER_CONTRACT") or "GenericFuzzer",
        HONEYPOT_COMMAND=env.get("HONEYPOT_COMMAND") or "./honeypot_check.sh",
        HONEYPOT_WORKDIR=Path(env.get("HONEYPOT_WORKDIR") or root / "server"),
        PROCESS_TIMEOUT=safe_int(env.get("PROCESS_TIMEOUT"), default=0, min_val=0, max_val=7200),
        WORKSPACE_ROOT=Path(env.get("WORKSPACE_ROOT") or root / "data" / "workspaces"),
        SCAN_BATCH_SIZE=safe_int(env.get("SCAN_BATCH_SIZE"), default=5, min_val=1, max_val=50),
        SCAN_BATCH_DELAY_MS=safe_int(env.get("SCAN_BATCH_DELAY_MS"), default=2000, min_val=0, max_val=60000),
        SCAN_MIN_CONTENT_LENGTH=safe_int(env.get("SCAN_MIN_CONTENT_LENGTH"), default=50, min_val=0, max_val=10000),
        LOG_LEVEL=(env.get("LOG_LEVEL") or "INFO").upper(),
        LOG_TO_SQLITE=_env_flag(env, "LOG_TO_SQLITE", True),
        LOG_RAW_JSON=_env_flag(env, "LOG_RAW_JSON", True),
        DEBUG_LLM_CALLS=_env_flag(env, "DEBUG_LLM", False),
        HOST=env.get("HOST") or "0.0.0.0",
        PORT=safe_int(env.get("PORT"), default=3001, min_val=1, max_val=65535),
    )
    if markers:
        kwargs["COMPILER_ERROR_MARKERS"] = markers
    return RampartConfig(**kwargs)


if __name__ == "__main__":
    cfg = load_config()
    print(cfg.summary())
    print()
    problems = cfg.validate()
    if problems:
        print("problems:")
        for problem in problems:
            print(f"  - {problem}")

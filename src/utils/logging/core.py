"""
Analysis Logger Core Implementation

Dual-layer logging (JSON + SQLite) for the analysis pipelines, plus the
process-wide stdlib logging setup.

The logger captures:
- Engine runs (which engine, which target, succeeded/failed, timing)
- AI calls (prompt role, tokens, cost, timing)
- Repository scans (files discovered, analyzed, skipped, batches)
- Errors (type, message, context)
"""

import json
import logging
import sqlite3
import threading
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict, Any, Optional, List

from config import RampartConfig
from utils.logging.types import LogCategory, EngineRunEntry
from utils.correlation import get_analysis_id

LOG_FORMAT = "%(asctime)s %(levelname)s [%(analysis_id)s] %(name)s: %(message)s"

_log = logging.getLogger("rampart")


class AnalysisIdFilter(logging.Filter):
    """stamp every record with the current analysis id ("-" outside a request)"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.analysis_id = get_analysis_id() or "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    """configure the root logger once; repeated calls only adjust the level"""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(getattr(h, "_rampart", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(AnalysisIdFilter())
    handler._rampart = True
    root.addHandler(handler)


class AnalysisLogger:
    """
    Dual-layer logging system

    Usage:
        logger = AnalysisLogger(settings)
        logger.log_engine_run("static", "0xabc...", outcome=EngineOutcome.SUCCEEDED,
                              duration_seconds=3.2)
        logger.log_ai_call("static", prompt_role="audit", cost=0.0004)
    """

    def __init__(self, settings: RampartConfig):
        self.settings = settings
        self.raw_dir = settings.LOGS_RAW_DIR
        self.db_path = settings.LOGS_DB_PATH
        self.raw_json = settings.LOG_RAW_JSON
        self.to_sqlite = settings.LOG_TO_SQLITE

        # sqlite connections are per call; the lock serializes writers across pool threads
        self._db_lock = threading.Lock()
        self._seq_lock = threading.Lock()
        self._seq = 0

        if self.raw_json:
            for category in LogCategory:
                (self.raw_dir / category.value).mkdir(parents=True, exist_ok=True)

        if self.to_sqlite:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._init_database()

    def _init_database(self):
        """Initialize SQLite database with tables"""
        with self._db_lock, sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS engine_runs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    analysis_id TEXT,
                    engine TEXT NOT NULL,
                    target TEXT NOT NULL,
                    outcome TEXT NOT NULL,
                    duration_seconds REAL,
                    detail TEXT,
                    metadata TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS ai_calls (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    analysis_id TEXT,
                    engine TEXT NOT NULL,
                    prompt_role TEXT NOT NULL,
                    prompt_tokens INTEGER,
                    output_tokens INTEGER,
                    cost REAL,
                    duration_seconds REAL,
                    model TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS repo_scans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    analysis_id TEXT,
                    repository TEXT NOT NULL,
                    files_discovered INTEGER,
                    files_analyzed INTEGER,
                    files_skipped INTEGER,
                    files_failed INTEGER,
                    batches INTEGER,
                    duration_seconds REAL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS errors (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    analysis_id TEXT,
                    component TEXT NOT NULL,
                    error_type TEXT NOT NULL,
                    error_message TEXT NOT NULL,
                    context TEXT
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_engine_runs_analysis ON engine_runs(analysis_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_engine_runs_engine ON engine_runs(engine)")

            conn.commit()

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _next_seq(self) -> int:
        with self._seq_lock:
            self._seq += 1
            return self._seq

    def _save_json(self, category: LogCategory, stem: str, data: Dict[str, Any]):
        """Save raw JSON log file with analysis_id"""
        if not self.raw_json:
            return
        analysis_id = get_analysis_id()
        if analysis_id and "analysis_id" not in data:
            data["analysis_id"] = analysis_id

        filename = f"{datetime.now().strftime('%Y-%m-%d')}_{analysis_id or 'none'}_{stem}_{self._next_seq()}.json"
        filepath = self.raw_dir / category.value / filename
        with open(filepath, 'w', encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)

    def _insert(self, sql: str, params: tuple):
        if not self.to_sqlite:
            return
        with self._db_lock, sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(sql, params)
            conn.commit()

    def log_engine_run(
        self,
        engine: str,
        target: str,
        outcome,
        duration_seconds: float = 0.0,
        detail: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> EngineRunEntry:
        """
        Log one engine invocation

        Saves to:
        - JSON: data/logs/raw/engine_runs/YYYY-MM-DD_<analysis>_<engine>_N.json
        - SQLite: engine_runs table
        """
        entry = EngineRunEntry(
            timestamp=self._now(),
            analysis_id=get_analysis_id(),
            engine=engine,
            target=target,
            outcome=getattr(outcome, "value", str(outcome)),
            duration_seconds=round(duration_seconds, 3),
            detail=detail,
            metadata=metadata or {},
        )
        self._save_json(LogCategory.ENGINE_RUN, engine, dict(entry.__dict__))
        self._insert("""
            INSERT INTO engine_runs
            (timestamp, analysis_id, engine, target, outcome, duration_seconds, detail, metadata)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            entry.timestamp, entry.analysis_id, entry.engine, entry.target, entry.outcome,
            entry.duration_seconds, entry.detail, json.dumps(entry.metadata, default=str)
        ))
        self.info(f"{engine} {entry.outcome} in {entry.duration_seconds:.2f}s")
        return entry

    def log_ai_call(
        self,
        engine: str,
        prompt_role: str,
        prompt: str = "",
        response: str = "",
        cost: float = 0.0,
        duration_seconds: float = 0.0,
        model: str = "",
        prompt_tokens: int = 0,
        output_tokens: int = 0,
    ):
        """Log a language-model exchange (full text goes to JSON only)"""
        timestamp = self._now()
        self._save_json(LogCategory.AI_CALL, f"{engine}_{prompt_role}", {
            "timestamp": timestamp,
            "engine": engine,
            "prompt_role": prompt_role,
            "prompt": prompt,
            "response": response,
            "cost": cost,
            "duration_seconds": duration_seconds,
            "model": model,
            "tokens": {"prompt": prompt_tokens, "output": output_tokens},
        })
        self._insert("""
            INSERT INTO ai_calls
            (timestamp, analysis_id, engine, prompt_role, prompt_tokens, output_tokens, cost, duration_seconds, model)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (timestamp, get_analysis_id(), engine, prompt_role, prompt_tokens, output_tokens,
              cost, duration_seconds, model))

    def log_repo_scan(
        self,
        repository: str,
        files_discovered: int,
        files_analyzed: int,
        files_skipped: int,
        files_failed: int,
        batches: int,
        duration_seconds: float,
    ):
        timestamp = self._now()
        self._save_json(LogCategory.REPO_SCAN, "scan", {
            "timestamp": timestamp,
            "repository": repository,
            "files_discovered": files_discovered,
            "files_analyzed": files_analyzed,
            "files_skipped": files_skipped,
            "files_failed": files_failed,
            "batches": batches,
            "duration_seconds": duration_seconds,
        })
        self._insert("""
            INSERT INTO repo_scans
            (timestamp, analysis_id, repository, files_discovered, files_analyzed, files_skipped,
             files_failed, batches, duration_seconds)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (timestamp, get_analysis_id(), repository, files_discovered, files_analyzed,
              files_skipped, files_failed, batches, duration_seconds))

    def log_error(
        self,
        component: str,
        error_type: str,
        error_message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Consistent sink for failures that are recovered rather than raised"""
        timestamp = self._now()
        self._save_json(LogCategory.ERROR, f"{component}_error", {
            "timestamp": timestamp,
            "component": component,
            "error_type": error_type,
            "error_message": error_message,
            "context": context or {},
        })
        self._insert("""
            INSERT INTO errors
            (timestamp, analysis_id, component, error_type, error_message, context)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (timestamp, get_analysis_id(), component, error_type, error_message,
              json.dumps(context or {}, default=str)))

        self.error(f"{component} failed during {error_type}: {error_message}")

    def query_runs(self, analysis_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Query engine runs, optionally for one analysis"""
        if not self.to_sqlite:
            return []
        with self._db_lock, sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            if analysis_id:
                cursor.execute("""
                    SELECT engine, target, outcome, duration_seconds, detail
                    FROM engine_runs WHERE analysis_id = ? ORDER BY id
                """, (analysis_id,))
            else:
                cursor.execute("""
                    SELECT engine, target, outcome, duration_seconds, detail
                    FROM engine_runs ORDER BY id
                """)
            return [
                {
                    "engine": row[0],
                    "target": row[1],
                    "outcome": row[2],
                    "duration_seconds": row[3],
                    "detail": row[4],
                }
                for row in cursor.fetchall()
            ]

    def query_costs(self) -> List[Dict[str, Any]]:
        """Total llm spend per engine"""
        if not self.to_sqlite:
            return []
        with self._db_lock, sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT engine, SUM(cost) as total_cost, COUNT(*) as num_calls
                FROM ai_calls
                GROUP BY engine
            """)
            return [
                {"engine": row[0], "total_cost": row[1], "num_calls": row[2]}
                for row in cursor.fetchall()
            ]

    # convenience methods mirror the stdlib logger
    def debug(self, message: str):
        _log.debug(message)

    def info(self, message: str):
        _log.info(message)

    def warning(self, message: str):
        _log.warning(message)

    def error(self, message: str):
        _log.error(message)

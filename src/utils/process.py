"""narrow process-execution capability used by every engine that shells out"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of one external process.

    Attributes:
        exit_code: process return code (-1 if it never produced one)
        stdout: captured standard output
        stderr: captured standard error
        timed_out: True when the configured timeout killed the process
    """
    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    @property
    def combined_output(self) -> str:
        parts = [p for p in (self.stdout, self.stderr) if p]
        return "\n".join(parts)


class ProcessRunner:
    """
    Runs `command args...` in a working directory and captures the result.

    Engines depend on this class, never on subprocess directly, so tests can
    hand them a fake runner.
    """

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout or None

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ProcessResult:
        """
        Execute a command and wait for it.

        Args:
            command: executable (resolved by the OS, or a relative path from cwd)
            args: arguments, passed without a shell
            cwd: working directory
            env: extra environment variables layered over the current environment

        Raises:
            OSError: the executable could not be launched
        """
        cmd = [command, *args]
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        logger.debug("running %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=full_env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning("%s timed out after %ss", command, self.timeout)
            return ProcessResult(
                exit_code=-1,
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr) or "Timeout",
                timed_out=True,
            )

        return ProcessResult(exit_code=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")


def _as_text(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data

"""honeypot simulation: deposit/withdraw round-trip on a fork, judged by an external script"""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from config import RampartConfig
from errors import EngineFailure
from models.report import HoneypotVerdict
from utils.process import ProcessRunner

logger = logging.getLogger(__name__)


class HoneypotAdapter:
    ENGINE = "honeypot"

    def __init__(self, runner: ProcessRunner, settings: RampartConfig, rpc_url: Optional[str] = None):
        self.runner = runner
        self.settings = settings
        self.rpc_url = rpc_url or settings.RPC_URL

    def run(self, address: str) -> HoneypotVerdict:
        """
        Run the honeypot command as `<command> <rpc_url> <address>`.

        Raises:
            EngineFailure: no rpc url, launch failure, non-zero exit, or stdout
                that is not a verdict object
        """
        if not self.rpc_url:
            raise EngineFailure(self.ENGINE, "no RPC URL configured (set RPC_URL or SEPOLIA_RPC_URL)")

        try:
            result = self.runner.run(
                self.settings.HONEYPOT_COMMAND,
                [self.rpc_url, address],
                cwd=self.settings.HONEYPOT_WORKDIR,
            )
        except OSError as e:
            raise EngineFailure(self.ENGINE, f"could not launch {self.settings.HONEYPOT_COMMAND}: {e}") from e

        if result.timed_out:
            raise EngineFailure(self.ENGINE, "simulation timed out")
        if result.exit_code != 0:
            raise EngineFailure(self.ENGINE, f"exit code {result.exit_code}: {result.stderr.strip()[:500]}")

        stdout = result.stdout.strip()
        if not stdout:
            raise EngineFailure(self.ENGINE, "simulation produced no output")

        try:
            return HoneypotVerdict.model_validate(json.loads(stdout))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.debug("unparsable honeypot output: %r", stdout[:500])
            raise EngineFailure(self.ENGINE, f"unparsable simulation output: {e}") from e

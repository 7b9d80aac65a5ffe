# spdx-license-identifier: mit
"""source and abi lookups against an etherscan-compatible explorer"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from config import RampartConfig
from errors import UpstreamFetchError
from agent.chain_config import ChainCfg, get_chain

logger = logging.getLogger(__name__)


@dataclass
class VerifiedSource:
    """verified source payload for one address"""
    address: str
    source_code: str
    contract_name: str = ""
    compiler_version: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


class ExplorerClient:
    """
    Read-only explorer lookups ("getsourcecode" and "getabi").

    Missing source or abi is a normal answer (None), not an exception;
    transport errors raise UpstreamFetchError.
    """

    def __init__(self, settings: RampartConfig, session: Optional[requests.Session] = None,
                 chain: Optional[ChainCfg] = None):
        self.settings = settings
        self.chain = chain or get_chain(settings.CHAIN)
        self.api_key = settings.ETHERSCAN_API_KEY or ""
        self.timeout = settings.EXPLORER_TIMEOUT
        self.session = session or requests.Session()

    def _query(self, action: str, address: str) -> Dict[str, Any]:
        params = {
            "module": "contract",
            "action": action,
            "address": address,
            "apikey": self.api_key,
        }
        try:
            response = self.session.get(self.chain.etherscan_base, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamFetchError(f"explorer {action} request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamFetchError(f"explorer {action} returned HTTP {response.status_code}")
        try:
            payload = response.json()
        except (ValueError, requests.exceptions.JSONDecodeError) as e:
            raise UpstreamFetchError(f"explorer {action} returned non-JSON body") from e
        if not isinstance(payload, dict):
            raise UpstreamFetchError(f"explorer {action} returned unexpected payload")
        return payload

    def get_source(self, address: str) -> Optional[VerifiedSource]:
        """verified source for address, or None when the explorer has none"""
        payload = self._query("getsourcecode", address)
        result = payload.get("result")
        if not isinstance(result, list) or not result:
            logger.info("no source entry for %s (status=%s)", address, payload.get("status"))
            return None

        entry = result[0] if isinstance(result[0], dict) else {}
        source = entry.get("SourceCode") or ""
        if not source.strip():
            logger.info("explorer has no verified source for %s", address)
            return None

        return VerifiedSource(
            address=address,
            source_code=source,
            contract_name=entry.get("ContractName", ""),
            compiler_version=entry.get("CompilerVersion", ""),
            raw=entry,
        )

    def get_abi(self, address: str) -> Optional[str]:
        """abi json text for address, or None when not available"""
        payload = self._query("getabi", address)
        if payload.get("status") != "1":
            logger.info("abi not found for %s: %s", address, payload.get("result"))
            return None
        result = payload.get("result")
        if isinstance(result, list):
            return json.dumps(result)
        if not isinstance(result, str) or not result.strip():
            return None
        return result

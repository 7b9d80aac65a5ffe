# spdx-license-identifier: mit
"""extract json and code blocks from llm responses"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

FENCE_MARKER = re.compile(r"```[A-Za-z0-9_+\-]*")
FENCED_BLOCK = re.compile(r"```[A-Za-z0-9_+\-]*[ \t]*\n?(.*?)```", re.DOTALL)
JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """remove every ``` / ```json marker and trim"""
    return FENCE_MARKER.sub("", text).strip()


def extract_first_code_block(text: str) -> Optional[str]:
    """inner text of the first fenced block, trimmed; None when there is none"""
    match = FENCED_BLOCK.search(text or "")
    if not match:
        return None
    return match.group(1).strip()


def _extract_json_object(text: str) -> Optional[str]:
    match = JSON_OBJECT.search(text)
    if match:
        return match.group(0)
    return None


def safe_json_loads(text: str) -> Any:
    """parse a model response as json after removing fences"""
    candidate = strip_code_fences(text or "")
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        # chatter around the object ("Here is the result: {...}")
        embedded = _extract_json_object(candidate)
        if embedded is None or embedded == candidate:
            raise ValueError(f"Failed to parse JSON payload: {exc}") from exc
        try:
            return json.loads(embedded)
        except json.JSONDecodeError as inner:
            raise ValueError(f"Failed to parse JSON payload: {inner}") from inner

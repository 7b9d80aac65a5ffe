"""
Prompt Templates Module

Centralized location for the prompt templates sent to the language model.

Exports:
    From audit_prompts:
        - AUDIT_PROMPT: static audit instruction (json-only answer)
        - FUZZ_GENERATION_PROMPT: Foundry fuzz test generation from an ABI
        - FAILURE_INTERPRETATION_PROMPT: explanation of a failing fuzz log
        - build_* helpers that append the payload to each template
"""

from .audit_prompts import (
    AUDIT_PROMPT,
    FUZZ_GENERATION_PROMPT,
    FAILURE_INTERPRETATION_PROMPT,
    build_audit_prompt,
    build_fuzz_generation_prompt,
    build_failure_interpretation_prompt,
)

__all__ = [
    "AUDIT_PROMPT",
    "FUZZ_GENERATION_PROMPT",
    "FAILURE_INTERPRETATION_PROMPT",
    "build_audit_prompt",
    "build_fuzz_generation_prompt",
    "build_failure_interpretation_prompt",
]

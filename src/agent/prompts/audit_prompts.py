"""
Analysis Prompt Templates

Prompt templates used by the static audit adapter and the AI fuzzing pipeline.
"""

# static audit: answer must be a bare json object
AUDIT_PROMPT = (
    "You are a world-class smart contract security auditor. Analyze the provided Solidity "
    "contract for vulnerabilities. Provide a response ONLY in a valid JSON format. The JSON "
    "object must have three keys: \"riskScore\" (string: \"Low\", \"Medium\", \"High\", or "
    "\"Critical\"), \"summary\" (string: a one-sentence summary), and \"findings\" (array of "
    "objects). Each finding object must have \"title\", \"description\", and \"severity\". "
    "Do not include any text, markdown, or apologies outside of the JSON object."
)

FUZZ_GENERATION_PROMPT = (
    "You are an expert smart contract security engineer specializing in writing Foundry fuzz "
    "tests. Analyze the functions in the provided ABI and write a complete, ready-to-run "
    "Foundry test file (`.t.sol`) that implements critical fuzz tests for state-changing "
    "functions. The test contract should be named \"AIGeneratedFuzzer\". Focus on invariants "
    "for functions involving value transfers, minting/burning, or critical parameter changes. "
    "Return the file inside a single ```solidity code block."
)

FAILURE_INTERPRETATION_PROMPT = (
    "You are an expert smart contract security analyst. I will provide you with a failed test "
    "log from a Foundry fuzz test. Read the log, identify the function that failed and the "
    "specific inputs (the \"counterexample\") that caused the failure. Explain the likely "
    "security vulnerability in simple, clear English."
)


def build_audit_prompt(source_code: str) -> str:
    return f"{AUDIT_PROMPT}\n\nHere is the contract code:\n{source_code}"


def build_fuzz_generation_prompt(abi: str) -> str:
    return f"{FUZZ_GENERATION_PROMPT}\n\nHere is the ABI:\n{abi}"


def build_failure_interpretation_prompt(log: str) -> str:
    return f"{FAILURE_INTERPRETATION_PROMPT}\n\nHere is the failed test log:\n{log}"

"""input validation utilities"""

from typing import List
from dataclasses import dataclass, field
from urllib.parse import urlparse
import re


@dataclass
class ValidationResult:
    """result of input validation."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        """allow using validationresult in boolean context."""
        return self.valid

    def __str__(self) -> str:
        """string representation for easy error reporting."""
        lines = []
        if self.errors:
            lines.append("ERRORS:")
            for error in self.errors:
                lines.append(f"  - {error}")
        if self.warnings:
            lines.append("WARNINGS:")
            for warning in self.warnings:
                lines.append(f"  - {warning}")
        return "\n".join(lines) if lines else "Validation passed"

    def add_error(self, error: str) -> None:
        """add an error and mark as invalid."""
        self.errors.append(error)
        self.valid = False

    def add_warning(self, warning: str) -> None:
        """add a warning without invalidating."""
        self.warnings.append(warning)


class InputValidator:
    """
    Soft checks on request payloads.

    Only hard errors block a request; shape problems the explorer or git will
    reject anyway are reported as warnings and logged by the dispatcher.
    """

    ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')
    SOLIDITY_MARKERS = re.compile(r'\b(pragma\s+solidity|contract|library|interface)\b')
    ALLOWED_REPO_SCHEMES = {"https", "http", "ssh", "git"}

    # pasted snippets above this size are almost certainly not a single contract
    MAX_SNIPPET_SIZE = 10 * 1024 * 1024

    def validate_address(self, address: str) -> ValidationResult:
        result = ValidationResult(valid=True)
        if not address or not isinstance(address, str):
            result.add_error("Address must be a non-empty string")
            return result
        if not self.ADDRESS_PATTERN.match(address.strip()):
            result.add_warning(f"Address does not look like a 20-byte hex address: {address}")
        return result

    def validate_repository_url(self, url: str) -> ValidationResult:
        result = ValidationResult(valid=True)
        if not url or not isinstance(url, str):
            result.add_error("Repository URL must be a non-empty string")
            return result

        url = url.strip()
        # scp-like syntax: git@github.com:org/repo.git
        if re.match(r'^[\w.\-]+@[\w.\-]+:', url):
            return result

        parsed = urlparse(url)
        if parsed.scheme not in self.ALLOWED_REPO_SCHEMES:
            result.add_warning(f"Unexpected repository URL scheme '{parsed.scheme or 'none'}': {url}")
        elif not parsed.netloc:
            result.add_warning(f"Repository URL has no host: {url}")
        return result

    def validate_snippet(self, source: str) -> ValidationResult:
        result = ValidationResult(valid=True)
        if not source or not source.strip():
            result.add_error("Source snippet must not be empty")
            return result
        if len(source.encode("utf-8", errors="ignore")) > self.MAX_SNIPPET_SIZE:
            result.add_error(f"Source snippet too large (max {self.MAX_SNIPPET_SIZE} bytes)")
            return result
        if not self.SOLIDITY_MARKERS.search(source):
            result.add_warning("Snippet may not be valid Solidity (no pragma/contract keywords)")
        return result

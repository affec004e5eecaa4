"""Boundary validation and user-facing error formatting.

The core trusts its records. Everything typed by a user or sent over HTTP
passes through ``InputValidator`` first, and exceptions shown to a user go
through ``ErrorFormatter`` so paths and tracebacks never leak.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from quhua.errors import BuildFailure, HierarchyCycleError
from quhua.loaders.base import LoaderError

logger = logging.getLogger(__name__)

# Codes in the national dataset are 12 digits
CODE_LENGTH = 12
MAX_NAME_QUERY_LENGTH = 100

_DIGITS = re.compile(r"^\d+$")
# Characters that could be used for path traversal
_TRAVERSAL_PATTERN = re.compile(r"(\.\.[\\/]|[\\/]\.\.)")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class ValidationError(ValueError):
    """Raised when input validation fails."""


class InputValidator:
    """Validate inputs at system boundaries.

    All methods raise ``ValidationError`` on failure unless
    documented otherwise.

    Args:
        strict_codes: Require codes to be exactly CODE_LENGTH digits.
    """

    def __init__(self, strict_codes: bool = True) -> None:
        self.strict_codes = strict_codes

    def validate_code(self, code: str) -> str:
        """Validate a region code typed by a user.

        Returns:
            The code with surrounding whitespace removed.
        """
        cleaned = code.strip()
        if not cleaned:
            raise ValidationError("Code must not be empty.")
        if not _DIGITS.match(cleaned):
            raise ValidationError("Code must contain digits only.")
        if self.strict_codes and len(cleaned) != CODE_LENGTH:
            raise ValidationError(f"Code must be exactly {CODE_LENGTH} digits.")
        return cleaned

    def validate_name_query(self, name: str) -> str:
        """Validate a name search pattern.

        Returns:
            The sanitized pattern.
        """
        cleaned = self.sanitize_string(name, max_length=MAX_NAME_QUERY_LENGTH + 1)
        if not cleaned:
            raise ValidationError("Name must not be empty.")
        if len(cleaned) > MAX_NAME_QUERY_LENGTH:
            raise ValidationError(
                f"Name must be shorter than {MAX_NAME_QUERY_LENGTH + 1} characters."
            )
        return cleaned

    def validate_file_path(
        self,
        path: str | Path,
        *,
        must_exist: bool = True,
        allowed_extensions: tuple[str, ...] | None = None,
    ) -> Path:
        """Validate a file path, preventing traversal attacks.

        Args:
            path: Raw path from user input.
            must_exist: Require the file to exist on disk.
            allowed_extensions: Restrict to these suffixes (e.g. (".csv",)).

        Returns:
            Resolved, validated Path.
        """
        raw = str(path)
        if "\x00" in raw or _TRAVERSAL_PATTERN.search(raw):
            raise ValidationError("Path contains disallowed sequences.")
        resolved = Path(raw).resolve()

        if allowed_extensions is not None:
            if resolved.suffix.lower() not in {e.lower() for e in allowed_extensions}:
                allowed = ", ".join(allowed_extensions)
                raise ValidationError(f"File type not allowed. Accepted types: {allowed}")

        if must_exist and not resolved.is_file():
            raise ValidationError("File does not exist.")

        return resolved

    @staticmethod
    def sanitize_string(value: str, *, max_length: int = 1000) -> str:
        """Strip control characters and surrounding whitespace, then truncate."""
        cleaned = _CONTROL_CHARS.sub("", value).strip()
        return cleaned[:max_length]


@dataclass
class UserFriendlyError:
    """A structured error designed for end-user consumption.

    Attributes:
        message: Clear description for the user.
        suggestion: Actionable guidance.
        component: Originating stage (load, build, query).
        error_code: Machine-readable identifier (e.g. "LOAD_001").
        technical_detail: Debugging info for logs only, never shown to users.
    """

    message: str
    suggestion: str
    component: str
    error_code: str
    technical_detail: str = ""

    def to_dict(self) -> dict[str, str]:
        """Serialize for API responses (excludes technical_detail)."""
        return {
            "message": self.message,
            "suggestion": self.suggestion,
            "component": self.component,
            "error_code": self.error_code,
        }

    def __str__(self) -> str:
        return f"{self.message} {self.suggestion}"


class ErrorFormatter:
    """Convert internal exceptions to user-friendly messages."""

    def format_load_error(self, error: Exception) -> UserFriendlyError:
        return self._format(error, component="load", code_prefix="LOAD")

    def format_build_error(self, error: Exception) -> UserFriendlyError:
        return self._format(error, component="build", code_prefix="BUILD")

    def format_query_error(self, error: Exception) -> UserFriendlyError:
        return self._format(error, component="query", code_prefix="QUERY")

    def _format(self, error: Exception, *, component: str, code_prefix: str) -> UserFriendlyError:
        message, suggestion, code_suffix = _classify_error(error)
        logger.debug("Formatted %s error %s: %r", component, code_suffix, error)
        return UserFriendlyError(
            message=message,
            suggestion=suggestion,
            component=component,
            error_code=f"{code_prefix}_{code_suffix}",
            technical_detail=repr(error),
        )


def _classify_error(error: Exception) -> tuple[str, str, str]:
    """Map an exception to (message, suggestion, code_suffix)."""
    if isinstance(error, (FileNotFoundError, LoaderError)):
        return (
            "The region data file could not be read.",
            "Check that the file exists and is a CSV region file.",
            "001",
        )
    if isinstance(error, PermissionError):
        return (
            "Permission denied when accessing a resource.",
            "Check file permissions and ensure the application has access.",
            "002",
        )
    if isinstance(error, (MemoryError, BuildFailure)):
        return (
            "The region hierarchy could not be built.",
            "Check the data for duplicate codes, or free memory and try again.",
            "004",
        )
    if isinstance(error, HierarchyCycleError):
        return (
            "The region data contains a circular parent reference.",
            "Fix the parent codes in the source data.",
            "007",
        )
    if isinstance(error, ValidationError):
        return (
            f"Invalid input: {error}",
            "Check the input values and try again.",
            "005",
        )
    if isinstance(error, ValueError):
        return (
            "Invalid input was provided.",
            "Check the input values and try again.",
            "005",
        )
    return (
        "An unexpected error occurred.",
        "If this keeps happening, please report the issue.",
        "999",
    )

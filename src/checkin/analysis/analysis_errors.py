"""Error codes surfaced by the analysis pipeline."""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable failure codes; callers branch on these, not on exception types."""

    SAVE_FAILED = "SAVE_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    SECURITY_ERROR = "SECURITY_ERROR"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    FILE_PROCESSING_FAILED = "FILE_PROCESSING_FAILED"
    FILE_PROCESSING_TIMEOUT = "FILE_PROCESSING_TIMEOUT"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"
    PARSE_FAILED = "PARSE_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"


class AnalysisError(Exception):
    """Raised by every pipeline stage with exactly one ``ErrorCode``."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message

    def __repr__(self) -> str:
        return f"AnalysisError(code={self.code.value!r}, message={self.message!r})"


def describe_exception(exc: BaseException) -> str:
    """Return the cause text used when wrapping lower-level errors."""
    text = str(exc).strip()
    return text or exc.__class__.__name__

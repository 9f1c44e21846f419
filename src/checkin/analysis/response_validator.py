"""Turn the provider's raw text into a validated ``ClinicalAnalysis``.

The provider output is untrusted: it may be wrapped in a markdown fence, may
not be JSON at all, and may violate the clinical schema in several places at
once. Rejections never raise from :func:`parse_analysis_response`; they are
reported as a :class:`ValidationResult` carrying the failure code and every
offending field path.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from pydantic import ValidationError
import structlog

from .analysis_errors import AnalysisError, ErrorCode
from .analysis_schemas import ClinicalAnalysis

logger = structlog.get_logger(__name__)

FENCE = "```"


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    """Single schema violation."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}" if self.path else self.reason


@dataclass(slots=True)
class ValidationResult:
    """Outcome of parsing a provider response."""

    data: ClinicalAnalysis | None = None
    code: ErrorCode | None = None
    error: str | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.data is not None

    def unwrap(self) -> ClinicalAnalysis:
        if self.data is not None:
            return self.data
        raise AnalysisError(
            self.code or ErrorCode.INVALID_RESPONSE,
            f"Invalid analysis response: {self.error}",
        )


def strip_code_fence(text: str) -> str:
    """Drop a surrounding ```/```json fence, if any."""
    stripped = text.strip()
    if not stripped.startswith(FENCE):
        return stripped

    lines = stripped.split("\n")
    start = 1
    end = len(lines)
    if end > 1 and lines[-1].strip() == FENCE:
        end -= 1
    return "\n".join(lines[start:end]).strip()


def parse_analysis_response(text: str) -> ValidationResult:
    payload = strip_code_fence(text)

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as exc:
        logger.warning("analysis.response.parse_failed", error=str(exc))
        return ValidationResult(
            code=ErrorCode.PARSE_FAILED,
            error=f"Failed to parse JSON: {exc}",
        )

    try:
        analysis = ClinicalAnalysis.model_validate(parsed)
    except ValidationError as exc:
        issues = _collect_issues(exc)
        summary = ", ".join(str(issue) for issue in issues)
        logger.warning(
            "analysis.response.validation_failed",
            issue_count=len(issues),
            issues=summary,
        )
        return ValidationResult(
            code=ErrorCode.VALIDATION_FAILED,
            error=f"Invalid analysis format: {summary}",
            issues=issues,
        )

    return ValidationResult(data=analysis)


def validate_analysis_response(text: str) -> ClinicalAnalysis:
    """Strict variant of :func:`parse_analysis_response` raising ``AnalysisError``."""
    return parse_analysis_response(text).unwrap()


def _collect_issues(exc: ValidationError) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for error in exc.errors(include_url=False):
        path = ".".join(str(part) for part in error.get("loc", ()))
        issues.append(ValidationIssue(path=path, reason=error.get("msg", "invalid value")))
    return issues

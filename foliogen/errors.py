"""
errors.py — Exception taxonomy for the generation pipeline.

Only UpstreamError ever crosses a module boundary as a raised exception
(invoker → continuation controller). The others are raised and caught
locally, or simply logged, so callers always receive a structured result.
"""

from __future__ import annotations

from typing import Optional


class FoliogenError(Exception):
    """Base class for all pipeline errors."""


class AnalysisDegraded(FoliogenError):
    """A fusion sub-signal failed or was unavailable; defaults were used."""

    def __init__(self, signal: str, reason: str):
        self.signal = signal
        self.reason = reason
        super().__init__(f"{signal} analysis degraded: {reason}")


# ── Upstream (Gemini) failures ───────────────────────────────────────────────

RATE_LIMIT = "rate_limit"
AUTH = "auth"
MALFORMED_REQUEST = "malformed_request"
TRANSIENT = "transient"

_KIND_MARKERS = (
    (RATE_LIMIT, ("429", "quota", "rate limit", "resource_exhausted", "resource exhausted")),
    (AUTH, ("401", "403", "api key", "api_key", "permission_denied", "unauthenticated")),
    (MALFORMED_REQUEST, ("400", "invalid_argument", "invalid argument", "bad request")),
)


def classify_upstream(exc: BaseException) -> str:
    """Map an SDK/transport exception onto one of the four upstream kinds."""
    code = getattr(exc, "code", None)
    if isinstance(code, int):
        if code == 429:
            return RATE_LIMIT
        if code in (401, 403):
            return AUTH
        if code == 400:
            return MALFORMED_REQUEST
        if code >= 500:
            return TRANSIENT

    err_str = f"{type(exc).__name__} {exc}".lower()
    for kind, markers in _KIND_MARKERS:
        if any(m in err_str for m in markers):
            return kind
    # timeouts, 5xx, "unavailable", "overloaded", connection resets
    return TRANSIENT


class UpstreamError(FoliogenError):
    """The generative or vision service failed or timed out."""

    def __init__(self, kind: str, message: str, cause: Optional[BaseException] = None):
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(f"[{kind}] {message}")

    @classmethod
    def from_exception(cls, exc: BaseException) -> "UpstreamError":
        if isinstance(exc, UpstreamError):
            return exc
        return cls(classify_upstream(exc), str(exc) or type(exc).__name__, cause=exc)


class GenerationTruncated(FoliogenError):
    """Generated document is structurally incomplete."""

    def __init__(self, attempt_number: int, estimated_completion: float, issues):
        self.attempt_number = attempt_number
        self.estimated_completion = estimated_completion
        self.issues = list(issues)
        super().__init__(
            f"attempt {attempt_number} truncated at ~{estimated_completion:.0%}: "
            + "; ".join(self.issues[:3])
        )


class AssetResolutionMismatch(FoliogenError):
    """A placeholder token had no matching catalog entry."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"no catalog entry for placeholder {token!r}")


class ValidationFailure(FoliogenError):
    """A validator raised or produced an unusable result."""

    def __init__(self, validator: str, reason: str):
        self.validator = validator
        self.reason = reason
        super().__init__(f"{validator} validator failed: {reason}")

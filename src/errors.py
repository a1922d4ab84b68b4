"""Typed errors raised by the rate engine.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer maps it to, so callers catch by type and never parse messages.

    RateEngineError
    +-- UpstreamError
    |   +-- UpstreamUnavailable   network failure, timeout or 5xx (retryable)
    |   +-- UpstreamMalformed     payload failed schema validation
    +-- LookupFailure
    |   +-- AwardNotFound
    |   +-- ClassificationNotFound
    |   +-- NoApplicableRate
    +-- InputError
    |   +-- InvalidBaseRate
    |   +-- InvalidCostConfig
    |   +-- InvalidStatusTransition
    +-- ResolverError             wraps any of the above during template checks
"""

from datetime import date
from typing import Any


class RateEngineError(Exception):
    """Base class for all rate engine errors."""

    code = "RATE_ENGINE_ERROR"
    http_status = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form used in API error bodies."""
        return {
            "code": self.code,
            "message": self.message,
            "context": {k: str(v) if isinstance(v, date) else v for k, v in self.context.items()},
        }


# --- Upstream ---


class UpstreamError(RateEngineError):
    code = "UPSTREAM_ERROR"
    http_status = 502


class UpstreamUnavailable(UpstreamError):
    """The statutory rates source could not be reached in time."""

    code = "UPSTREAM_UNAVAILABLE"
    http_status = 503
    retryable = True


class UpstreamMalformed(UpstreamError):
    """The statutory rates source returned a payload we cannot trust."""

    code = "UPSTREAM_MALFORMED"
    http_status = 502
    retryable = False


# --- Lookups ---


class LookupFailure(RateEngineError):
    """No rate is available for the supplied inputs."""

    code = "NOT_FOUND"
    http_status = 404


class AwardNotFound(LookupFailure):
    code = "AWARD_NOT_FOUND"

    def __init__(self, award_code: str) -> None:
        super().__init__(f"Award {award_code} not found", award_code=award_code)
        self.award_code = award_code


class ClassificationNotFound(LookupFailure):
    code = "CLASSIFICATION_NOT_FOUND"

    def __init__(self, award_code: str, selector: str) -> None:
        super().__init__(
            f"No classification in award {award_code} matches {selector}",
            award_code=award_code,
            selector=selector,
        )
        self.award_code = award_code


class NoApplicableRate(LookupFailure):
    code = "NO_APPLICABLE_RATE"

    def __init__(self, award_code: str, classification_code: str, as_of: date) -> None:
        super().__init__(
            f"No rate for {award_code}/{classification_code} is effective on or before {as_of}",
            award_code=award_code,
            classification_code=classification_code,
            as_of=as_of,
        )
        self.as_of = as_of


# --- Caller input ---


class InputError(RateEngineError):
    code = "INVALID_INPUT"
    http_status = 422


class InvalidBaseRate(InputError):
    code = "INVALID_BASE_RATE"


class InvalidCostConfig(InputError):
    code = "INVALID_COST_CONFIG"


class InvalidStatusTransition(InputError):
    code = "INVALID_STATUS_TRANSITION"
    http_status = 409


# --- Template validation ---


class ResolverError(RateEngineError):
    """The statutory floor for a template could not be resolved.

    The underlying error is chained as ``__cause__`` and kept on ``cause``.
    """

    code = "RESOLVER_ERROR"

    def __init__(self, message: str, cause: RateEngineError, **context: Any) -> None:
        super().__init__(message, cause_code=cause.code, **context)
        self.cause = cause
        self.http_status = cause.http_status

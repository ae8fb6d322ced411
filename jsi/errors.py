"""Error taxonomy for the JSI engine.

Every error is terminal for the operation that raised it; the engine never
retries. The HTTP layer maps ``error_code`` to a status code in ``jsi.main``.
"""
from typing import Optional


class JSIError(Exception):
    """Base class for all engine errors."""

    error_code: str = "jsi_error"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class ConfigDisabled(JSIError):
    """Scoring requested while the customer's ScoringConfig is disabled."""

    error_code = "config_disabled"


class ValidationError(JSIError):
    """Missing identifiers or out-of-range dimension values."""

    error_code = "validation_error"


class EmptyPopulation(JSIError):
    """A baseline or insight was requested over zero matching records."""

    error_code = "empty_population"


class NotFound(JSIError):
    """A referenced customer, industry or configuration does not exist."""

    error_code = "not_found"


class NoEligibleTopics(JSIError):
    """All messaging topics are disabled, or none are configured."""

    error_code = "no_eligible_topics"


class UnsupportedFormat(JSIError):
    """Export requested with an unknown format or export type."""

    error_code = "unsupported_format"

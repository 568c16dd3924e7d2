"""Exception hierarchy for contract risk analysis."""

from __future__ import annotations


class ContractRiskError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ContractRiskError):
    """Rule/template data or runtime settings are invalid."""


class TextTooShortError(ContractRiskError, ValueError):
    """The input text is too short to be analyzed.

    This is a validation failure meant to be shown to the user, not a
    system fault.
    """

    def __init__(self, length: int, minimum: int) -> None:
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Text too short for analysis ({length} characters, minimum is {minimum})."
        )


class ExtractionError(ContractRiskError):
    """A document could not be converted to plain text."""


class InsightError(ContractRiskError):
    """The language-model round trip failed.

    The rules-derived result is unaffected; ``retryable`` tells the caller
    whether trying again later may succeed.
    """

    retryable: bool = True


class InsightConfigurationError(InsightError):
    """Missing or rejected API credentials, or the provider SDK is unavailable."""

    retryable = False


class InsightRateLimitError(InsightError):
    """The provider rejected the request because of rate limiting."""


class InsightGenerationError(InsightError):
    """Any other provider failure."""

"""
Custom exceptions and error handling for the Grant Discovery pipeline.

Provides:
- Typed exception hierarchy for different failure modes
- Error context preservation for debugging
- Mapping of provider exceptions into the hierarchy

Run-fatal errors (ConfigError, ExtractionError, ParseError) abort a discovery
run before anything is merged. NotificationError is recovered by the
orchestrator: it is logged and the run still finalizes.
"""

from typing import Any


class GrantDiscoveryError(Exception):
    """Base exception for all grant discovery errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Client Errors
# =============================================================================


class ClientError(GrantDiscoveryError):
    """Base class for client-related errors."""

    pass


class OpenAIError(ClientError):
    """Error from OpenAI API calls."""

    pass


class OpenAIRateLimitError(OpenAIError):
    """Rate limit exceeded on OpenAI API."""

    pass


class OpenAIModelError(OpenAIError):
    """Model refused request or returned invalid response."""

    pass


class MailError(ClientError):
    """Error from the mail-service webhook."""

    pass


# =============================================================================
# Pipeline Errors
# =============================================================================


class PipelineError(GrantDiscoveryError):
    """Base class for pipeline-related errors."""

    pass


class ExtractionError(PipelineError):
    """Provider unreachable, or returned no usable text."""

    pass


class ConfigError(ExtractionError):
    """Missing credentials. Raised before any network call is made."""

    pass


class ParseError(PipelineError):
    """No bracket-delimited JSON array could be recovered from the response."""

    pass


class NotificationError(PipelineError):
    """Dispatch of the new-grant digest failed."""

    pass


# =============================================================================
# Error Handling Utilities
# =============================================================================


def wrap_openai_error(exc: Exception, context: dict[str, Any] | None = None) -> OpenAIError:
    """
    Wrap an OpenAI exception in our typed error hierarchy.

    Args:
        exc: The original exception
        context: Additional context for debugging

    Returns:
        Typed OpenAIError subclass
    """
    error_str = str(exc).lower()
    ctx = context or {}
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__

    if 'rate limit' in error_str or 'rate_limit' in error_str:
        return OpenAIRateLimitError(
            f"OpenAI rate limit exceeded: {exc}",
            context=ctx,
        )
    elif 'content policy' in error_str or 'refused' in error_str:
        return OpenAIModelError(
            f"OpenAI model refused request: {exc}",
            context=ctx,
        )
    else:
        return OpenAIError(
            f"OpenAI API error: {exc}",
            context=ctx,
        )

"""Error taxonomy and per-provider error tracking for codepilot."""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class MCPError(Exception):
    """Base exception class for MCP-related errors."""
    def __init__(self, message: str, error_code: str = "MCP_ERROR", details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(MCPError):
    """Exception for missing or invalid configuration."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIG_ERROR", details)


class ProtocolError(MCPError):
    """A provider answered with a non-success, non-429 HTTP status."""
    def __init__(self, status: int, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.status = status
        super().__init__(message or f"provider returned HTTP {status}", "PROTOCOL_ERROR", details)


class RateLimitExhausted(MCPError):
    """A provider kept answering 429 until the attempt budget ran out."""
    def __init__(self, attempts: int, details: Optional[Dict[str, Any]] = None):
        self.attempts = attempts
        super().__init__(f"rate limited after {attempts} attempts", "RATE_LIMITED", details)


class DecodeError(MCPError):
    """A 2xx response body carried no usable JSON-RPC result."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DECODE_ERROR", details)


class ProviderConnectionError(MCPError):
    """The provider endpoint could not be reached at the transport level."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONNECTION_ERROR", details)


class LLMError(MCPError):
    """Base class for failures of the language model service."""


class LLMTimeout(LLMError):
    """The language model call did not finish within its time budget."""
    def __init__(self, timeout: float, details: Optional[Dict[str, Any]] = None):
        self.timeout = timeout
        super().__init__(f"LLM request timed out after {timeout:g}s", "LLM_TIMEOUT", details)


class LLMFailure(LLMError):
    """The language model call completed with an error."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "LLM_FAILURE", details)


class NoMatchingTool(MCPError):
    """No catalog entry scored above zero for a query."""
    def __init__(self, query: str, suggestions: Optional[List[Any]] = None):
        self.query = query
        self.suggestions = list(suggestions or [])
        super().__init__(f"no relevant tool found for query: {query!r}", "NO_MATCHING_TOOL")


class ErrorHandler:
    """Logs handled errors and tracks them per provider."""

    def __init__(self, max_errors_per_minute: int = 10):
        self.error_counts: Dict[str, int] = {}
        self.error_timestamps: Dict[str, List[datetime]] = {}
        self.max_errors_per_minute = max_errors_per_minute
        self.error_window = timedelta(minutes=1)

    def handle_error(self, provider: str, error: Exception, context: str = "") -> Dict[str, Any]:
        """Record an error for a provider and return a description of it."""
        error_info = self._log_error(provider, error, context)
        self._track_error(provider)
        if self.is_throttled(provider):
            logger.warning(
                f"High error rate for {provider}: "
                f"{self._recent_errors(provider)} errors per minute"
            )
        return error_info

    def _log_error(self, provider: str, error: Exception, context: str) -> Dict[str, Any]:
        error_info = {
            "provider": provider,
            "error_type": type(error).__name__,
            "error_code": getattr(error, "error_code", "UNEXPECTED"),
            "error_message": str(error),
            "context": context,
            "timestamp": datetime.now().isoformat(),
        }

        # Level depends on how actionable the error is for an operator
        if isinstance(error, ConfigurationError):
            logger.error(f"Provider {provider} - {error_info['error_type']}: {error_info['error_message']}")
        elif isinstance(error, (ProviderConnectionError, ProtocolError, RateLimitExhausted)):
            logger.warning(f"Provider {provider} - {error_info['error_type']}: {error_info['error_message']}")
        elif isinstance(error, MCPError):
            logger.info(f"Provider {provider} - {error_info['error_type']}: {error_info['error_message']}")
        else:
            logger.error(f"Provider {provider} - Unexpected error: {error_info['error_message']}")

        return error_info

    def _track_error(self, provider: str) -> None:
        now = datetime.now()
        self.error_counts[provider] = self.error_counts.get(provider, 0) + 1
        timestamps = self.error_timestamps.setdefault(provider, [])
        timestamps.append(now)

        cutoff_time = now - self.error_window
        self.error_timestamps[provider] = [ts for ts in timestamps if ts > cutoff_time]

    def _recent_errors(self, provider: str) -> int:
        cutoff_time = datetime.now() - self.error_window
        return len([ts for ts in self.error_timestamps.get(provider, []) if ts > cutoff_time])

    def is_throttled(self, provider: str) -> bool:
        """True when a provider produced more errors in the last minute than allowed."""
        return self._recent_errors(provider) > self.max_errors_per_minute

    def get_provider_error_stats(self, provider: str) -> Dict[str, Any]:
        recent_errors = self._recent_errors(provider)
        return {
            "total_errors": self.error_counts.get(provider, 0),
            "recent_errors": recent_errors,
            "throttled": recent_errors > self.max_errors_per_minute,
        }

"""
Error taxonomy for AI provider calls.

Adapters raise only ProviderError subclasses; the executor treats every
ProviderError as "provider unavailable right now" and falls back.
ConfigurationError and AllProvidersFailedError are terminal.
"""

from enum import Enum
from typing import List, NamedTuple, Optional


class ErrorKind(str, Enum):
    """Classified reason a single provider call failed."""

    UNAUTHORIZED = "Unauthorized"
    RATE_LIMITED = "RateLimited"
    BAD_REQUEST = "BadRequest"
    TIMEOUT = "Timeout"
    PROTOCOL_ERROR = "ProtocolError"
    UNKNOWN = "Unknown"


class AIError(Exception):
    """Base class for all orchestration errors."""


class ConfigurationError(AIError):
    """No usable provider configuration (e.g. no credentials at all)."""


class ProviderError(AIError):
    """A single provider call failed with a classified kind."""

    default_kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        provider_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind
        self.provider_id = provider_id
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {
            "providerId": self.provider_id,
            "errorKind": self.kind.value,
            "message": self.message,
        }


class TransportError(ProviderError):
    """Network failure or timeout before a usable response arrived."""


class AuthError(ProviderError):
    default_kind = ErrorKind.UNAUTHORIZED


class RateLimitError(ProviderError):
    default_kind = ErrorKind.RATE_LIMITED


class BadRequestError(ProviderError):
    default_kind = ErrorKind.BAD_REQUEST


class ProtocolError(ProviderError):
    """Response arrived but lacked the fields the protocol promises."""

    default_kind = ErrorKind.PROTOCOL_ERROR


class UpstreamError(ProviderError):
    """Server-side (5xx) or otherwise unexpected status."""


class Attempt(NamedTuple):
    provider_id: str
    error: ProviderError


class AllProvidersFailedError(AIError):
    """Every configured provider was tried once and failed."""

    def __init__(self, attempts: List[Attempt]):
        self.attempts = list(attempts)
        tried = ", ".join(f"{a.provider_id} ({a.error.kind.value})" for a in self.attempts)
        super().__init__(f"All AI providers failed: {tried}" if tried else "All AI providers failed")

"""
domain.exceptions - Custom exception hierarchy for COSMO agents.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class CosmoApiError(DomainError):
    """Raised when the COSMO backend answers with a non-2xx status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"COSMO API Error: {status} - {body}")


class ModelTimeoutError(DomainError):
    """Raised when a language model call exceeds its timeout."""


class AuthenticationError(DomainError):
    """Raised when authentication fails (bad credentials, expired token)."""


class ConfigurationError(DomainError):
    """Raised when the system is wired incorrectly or a required setting is missing."""


class BackendUnavailableError(DomainError):
    """Raised when the COSMO backend cannot be reached or times out."""


class TurnCancelledError(DomainError):
    """Raised inside an agent loop when the caller's cancel event is set."""

# src/p2pex/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions that represent
business rule violations and domain errors.
"""


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class FeedUnavailableError(DomainError):
    """Raised when the reference-rate feed cannot be fetched or parsed."""
    pass


class StoreError(DomainError):
    """Raised when the config store cannot be written."""
    pass

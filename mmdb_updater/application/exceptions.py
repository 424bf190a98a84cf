"""
Core exceptions for the updater.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains. Every error may carry
a short stage label naming the step that failed; the underlying cause is
chained with ``raise ... from``.
"""

from typing import Optional


class UpdaterError(Exception):
    """Base exception for all component-specific errors."""

    def __init__(self, message: str, *, stage: Optional[str] = None):
        self.stage = stage
        super().__init__(f"{stage}: {message}" if stage else message)


# --- Configuration Errors ---

class ConfigurationError(UpdaterError):
    """Raised for errors related to configuration or credentials."""
    pass


# --- Infrastructure Errors ---

class InfrastructureError(UpdaterError):
    """Base class for errors related to external systems (network, disk)."""
    pass


class TransportError(InfrastructureError):
    """Raised when a request fails or returns a non-success status."""
    pass


class FilesystemError(InfrastructureError):
    """Raised when a directory or file cannot be created, read or written."""
    pass


# --- Domain Errors ---

class DomainError(UpdaterError):
    """Base class for errors about the archive contents."""
    pass


class DecodeError(DomainError):
    """Raised when the archive is not valid gzip or tar."""
    pass


class EntryNotFoundError(DomainError):
    """Raised in strict mode when the archive lacks the requested entry."""
    pass

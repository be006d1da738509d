"""SDB exception hierarchy.

Structural and integrity failures are fatal and surface as distinct
types. Errors raised by byte source and sink collaborators are
``OSError`` instances and are never wrapped.
"""

from __future__ import annotations


class SdbError(Exception):
    """Base exception for all SDB failures."""


class SdbConfigError(SdbError):
    """Raised for invalid runtime configuration."""


class SdbValidationError(SdbError):
    """Raised when an insert is rejected before the store is mutated."""


class SdbEncodeError(SdbError):
    """Raised when record content cannot be represented as text."""


class SdbFormatError(SdbError):
    """Raised for structural violations while reading an artifact."""


class SdbChecksumError(SdbError):
    """Raised when the artifact payload does not match its checksum."""

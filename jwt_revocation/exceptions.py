"""Exceptions raised by the revocation engine and its stores."""


class RevocationError(Exception):
    """Base class for all revocation errors."""


class RevocationValidationError(RevocationError, ValueError):
    """Claims or arguments are missing or malformed.

    Always raised to the caller; never converted into a verdict.
    """


class StoreError(RevocationError):
    """The backing store failed to read or write."""

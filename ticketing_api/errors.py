from __future__ import annotations


class DomainError(Exception):
    """Base class for errors raised by the category domain and its use-cases."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    """A value failed a domain rule (bad name, unknown parent, protected row)."""


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    """The change would clash with existing data (duplicate name, cycle)."""


class ConfigurationError(DomainError):
    """Required reference data is missing from the store."""

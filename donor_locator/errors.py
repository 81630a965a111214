"""Error kinds raised by the registry and the matcher.

The request layer tells them apart to pick the response it sends back;
none of them is retried inside the core.
"""

from __future__ import annotations

from typing import Any


class DonorLocatorError(Exception):
    """Base class for every error raised by donor_locator."""


class ValidationError(DonorLocatorError):
    """Missing, malformed or out-of-range input."""

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: Any, message: str = "Please provide all required fields.") -> "ValidationError":
        """Build from a ``pydantic.ValidationError``, one entry per bad field."""
        errors = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
            errors.append({"field": field, "message": err.get("msg", "invalid value")})
        return cls(message, errors)


class DuplicateDonorError(DonorLocatorError):
    """A donor with the same phone number is already registered."""

    def __init__(self, phone: str):
        super().__init__(f"A donor with phone {phone!r} is already registered.")
        self.phone = phone


class StorageError(DonorLocatorError):
    """The storage collaborator failed; the underlying error is chained as __cause__."""

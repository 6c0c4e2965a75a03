"""Exceptions raised when the storefront API cannot satisfy a request."""

from shared.api_errors import ErrorCategory, ParsedApiError


class StorefrontApiError(Exception):
    """
    Base exception for storefront API failures.

    Carries a human-readable message suitable for display, the semantic error
    category and, when a response was received, the HTTP status code.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = "internal",
        status_code: int | None = None,
    ) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def from_parsed(cls, parsed: ParsedApiError) -> "StorefrontApiError":
        """Build from a parsed HTTP error."""
        return cls(parsed.message, parsed.category, parsed.status_code)


class FetchFailedError(StorefrontApiError):
    """
    Raised when a query (list or children fetch) fails.

    The cache is left at its last-known-good state. Fetches are safe to retry.
    """


class MutationFailedError(StorefrontApiError):
    """
    Raised when a create, update or delete fails.

    The cache is never touched before the server confirms a mutation, so no
    local state needs rolling back. Creates must not be retried blindly.
    """

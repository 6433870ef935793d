"""Shared exceptions for service layer operations."""


class WapsError(Exception):
    """
    Base exception for service-layer failures.

    Each subclass carries a stable ``code`` that the API layer returns to
    callers alongside the human-readable message.
    """

    code = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(WapsError):
    """Raised when a referenced board, board item or website does not exist."""

    code = "not_found"

    def __init__(self, entity: str, identifier: object | None = None) -> None:
        self.entity = entity
        self.identifier = identifier
        message = f"{entity} not found" if identifier is None else f"{entity} '{identifier}' not found"
        super().__init__(message)


class ForbiddenError(WapsError):
    """Raised when the caller's owner key does not own the resource."""

    code = "forbidden"

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class ConflictError(WapsError):
    """Raised on uniqueness violations (e.g. a board slug the owner already uses)."""

    code = "conflict"


class InvalidInputError(WapsError):
    """Raised on malformed input that schema validation could not catch."""

    code = "invalid"


class UpstreamError(WapsError):
    """
    Raised when the metadata scanner cannot fetch a page.

    Never surfaced to API callers: the scanner converts it into
    hostname-derived defaults.
    """

    code = "upstream"

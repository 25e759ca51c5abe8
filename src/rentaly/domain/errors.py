"""Domain error taxonomy.

Every error carries the HTTP status it maps to; the API layer renders
``{"error": str(exc)}`` with that status.
"""


class DomainError(Exception):
    """Base class for errors raised by the reservation core."""

    status_code = 500


class ValidationError(DomainError):
    """Missing or malformed input, or a value outside an enumerated set."""

    status_code = 400


class AuthenticationError(DomainError):
    """No authenticated caller, or a token that does not verify."""

    status_code = 401


class AuthorizationError(DomainError):
    """Caller lacks the role or ownership required for the operation."""

    status_code = 403


class NotFoundError(DomainError):
    """An entity id does not resolve."""

    status_code = 404


class ReservationNotFoundError(NotFoundError):
    pass


class ListingNotFoundError(NotFoundError):
    pass


class TransactionNotFoundError(NotFoundError):
    pass


class ConflictError(DomainError):
    """A state-machine precondition does not hold."""

    status_code = 400


class DatesUnavailableError(ConflictError):
    """Requested stay intersects an existing reservation or a blocked date."""

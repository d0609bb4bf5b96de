class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login fails (unknown username, missing email, bad password, missing profile)."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the requested entity does not exist."""


class PreconditionFailed(DomainError):
    """Raised when an entity is not in the state an operation requires."""


class ConflictError(DomainError):
    """Raised when a write collides with an existing row (unique key)."""


class StorageError(DomainError):
    """Raised when the database or the object store cannot be reached or refuses a request."""

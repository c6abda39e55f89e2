class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced subject, entry, record or code does not exist."""


class DuplicateRecordError(DomainError):
    """Raised when attendance is already marked for a slot and date."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the session is missing."""


class AuthorizationError(DomainError):
    """Raised when a user touches data owned by someone else."""


class PersistenceError(DomainError):
    """Raised when the record store call fails."""


class AIServiceError(DomainError):
    """Raised when the AI gateway fails or answers with an error."""


class RateLimitedError(AIServiceError):
    """AI gateway answered 429."""


class PaymentRequiredError(AIServiceError):
    """AI gateway answered 402."""


class InvalidInputError(AIServiceError):
    """Image or chat payload rejected before it reaches the AI gateway."""

"""Domain error taxonomy.

Every error here is a normal, recoverable per-request outcome. Services raise
them before any persistence happens; ``main.py`` maps them to HTTP responses.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed or out-of-range input, unparsable JSON, bad slug."""

    status_code = 422


class NotFoundError(DomainError):
    """Unknown id, unknown slug, or a page hidden from the public boundary."""

    status_code = 404


class InvalidStateError(DomainError):
    """Operation not allowed in the entity's current state."""

    status_code = 409


class ConflictError(DomainError):
    """Uniqueness violation (slug, push token)."""

    status_code = 409

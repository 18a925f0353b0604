"""Domain error taxonomy.

Every error carries a machine-usable ``category`` that the API layer echoes
back in the failure body.  ``NotFoundError`` and ``InvariantViolation`` are
expected rejections; ``PersistenceFault`` is the only unexpected one.
"""


class DomainError(Exception):
    """Base class for all domain-level rejections."""

    category = "DomainError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    category = "NotFound"


class ValidationError(DomainError):
    category = "ValidationError"


class AuthorizationError(DomainError):
    category = "AuthorizationError"


class InvariantViolation(DomainError):
    category = "InvariantViolation"


class AlreadyPresentError(InvariantViolation):
    category = "AlreadyPresent"


class NotInSetError(InvariantViolation):
    category = "NotInSet"


class DuplicateNameError(InvariantViolation):
    category = "DuplicateName"


class DuplicatePresentError(InvariantViolation):
    category = "DuplicatePresent"


class NotInPlaylistError(InvariantViolation):
    category = "NotInPlaylist"


class PersistenceFault(DomainError):
    """Storage or collaborator failure. Logged, surfaced opaquely, never retried."""

    category = "Fault"

"""
Error types raised by the user service core.

Every error derives from UserServiceError so the HTTP layer can map the whole
family in one place. Storage and key material errors are internal; their
messages are logged but never sent back to the client.
"""
from typing import List, Optional


class UserServiceError(Exception):
    """Base class for user service failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(UserServiceError):
    """One or more user-correctable field errors. Nothing was persisted."""

    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages))


class ConflictError(UserServiceError):
    """The phone number is already registered to an account."""


class AuthError(UserServiceError):
    """Bad credentials, or a token that cannot be trusted."""


class InvalidTokenError(AuthError):
    MALFORMED = "malformed"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    BAD_ALGORITHM = "bad_algorithm"

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason or self.MALFORMED


class NotFoundError(UserServiceError):
    """No account matches the given identifier or phone number."""


class StorageError(UserServiceError):
    """Transaction or connection failure in the relational store."""


class KeyMaterialError(UserServiceError):
    """Signing keys are missing, unreadable or unusable."""


class KeyLoadError(KeyMaterialError):
    pass


class SigningError(KeyMaterialError):
    pass

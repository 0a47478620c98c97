"""Custom exception classes for the help system.

Every failure the core reports belongs to one of a closed set of kinds. The
``kind`` attribute is stable and is what the HTTP layer maps to a status code.
"""

from typing import Optional


class HelpSystemError(Exception):
    """Base exception for all help system errors."""

    kind = "error"


class AuthFailedError(HelpSystemError):
    """Raised when credentials do not match a user."""

    kind = "auth_failed"

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class NotFoundError(HelpSystemError):
    """Raised when a requested record cannot be found."""

    kind = "not_found"

    def __init__(self, entity: str, key: object):
        """Initialize the exception.

        Args:
            entity: Name of the record type, e.g. "User".
            key: The key that was looked up.
        """
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' not found")


class DuplicateKeyError(HelpSystemError):
    """Raised on a primary key or unique constraint collision."""

    kind = "duplicate_key"


class InvalidArgumentError(HelpSystemError):
    """Raised when a value is outside its allowed set."""

    kind = "invalid_argument"


class OTPExpiredError(HelpSystemError):
    """Raised when a one-time password is used after its expiry date."""

    kind = "otp_expired"

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"One-time password for '{username}' has expired")


class OTPInvalidError(HelpSystemError):
    """Raised when a one-time password does not match or was already used."""

    kind = "otp_invalid"

    def __init__(self, message: str = "One-time password invalid"):
        super().__init__(message)


class PermissionDeniedError(HelpSystemError):
    """Raised when the caller may not observe or mutate a resource."""

    kind = "permission_denied"


class BackendUnavailableError(HelpSystemError):
    """Raised when the store is not initialized or the database fails."""

    kind = "backend_unavailable"


class BackupMalformedError(HelpSystemError):
    """A backup row that could not be restored.

    Restores collect these as warnings instead of raising them.
    """

    kind = "backup_malformed"

    def __init__(self, line_number: int, reason: str, row: Optional[str] = None):
        """Initialize the warning.

        Args:
            line_number: 1-based line number in the backup file.
            reason: Why the row was rejected.
            row: The raw row text, if available.
        """
        self.line_number = line_number
        self.reason = reason
        self.row = row
        super().__init__(f"Line {line_number}: {reason}")


class CodecFailureError(HelpSystemError):
    """Raised when group content cannot be wrapped or unwrapped."""

    kind = "codec_failure"

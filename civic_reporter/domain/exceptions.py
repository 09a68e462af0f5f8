"""
Error taxonomy for the civic reporter core.

Every error is raised to the immediate caller. Only StorageError is
considered possibly transient; the core never retries on its own.
"""
from typing import Optional


class CivicReporterError(Exception):
    """Base class for all core errors."""
    pass


class ValidationError(CivicReporterError):
    """Input failed validation. `field` names the first failing field."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        self.message = message or f"Invalid value for {field}"
        super().__init__(self.message)


class AccountNotFoundError(CivicReporterError):
    """No account is registered under the given mobile number."""

    def __init__(self, mobile_number: str):
        self.mobile_number = mobile_number
        super().__init__("Account not found. Please sign up first.")


class InvalidCredentialsError(CivicReporterError):
    """Password does not match the stored account."""

    def __init__(self):
        super().__init__("Invalid password. Please try again.")


class NotAuthenticatedError(CivicReporterError):
    """Operation needs an active session."""

    def __init__(self):
        super().__init__("Sign in to submit a report.")


class StorageError(CivicReporterError):
    """Raised when the key-value store cannot be read or written."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Storage {operation} failed: {message}")


class LocationUnavailableError(CivicReporterError):
    """Location collaborator could not produce coordinates."""
    pass

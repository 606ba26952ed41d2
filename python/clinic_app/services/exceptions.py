"""
Exceptions raised by the Wellness+ data services.
"""


class DataStoreError(Exception):
    """Raised when a call to the remote data store fails."""

    def __init__(self, operation: str, table: str, reason: str):
        self.operation = operation
        self.table = table
        self.reason = reason
        super().__init__(f"{operation} on '{table}' failed: {reason}")


class AuthenticationError(Exception):
    """Raised when the data store rejects the supplied credentials."""


class RegistrationError(Exception):
    """Raised when a registration draft cannot be persisted."""

    def __init__(self, reason: str, errors: dict = None):
        self.reason = reason
        self.errors = errors or {}
        super().__init__(f"Registration failed: {reason}")

# src/s3copy/exceptions.py
"""Custom exceptions for the s3copy application."""


class S3CopyError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigError(S3CopyError):
    """Raised for configuration-related issues."""

    pass


class AuthError(S3CopyError):
    """Raised when the credentials are rejected at startup."""

    pass


class ObjectStoreError(S3CopyError):
    """Raised when a call to the object store fails."""

    pass


class ListError(S3CopyError):
    """Raised when listing the source bucket cannot continue."""

    pass


class CopyError(S3CopyError):
    """Raised when one step of a copy-with-ACL sequence fails."""

    def __init__(self, key: str, step: str, message: str) -> None:
        super().__init__(f"Failed to {step} for '{key}': {message}")
        self.key: str = key
        self.step: str = step


class ExistenceCheckError(S3CopyError):
    """Raised when a destination HEAD fails for a reason other than not-found."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"Existence check failed for '{key}': {message}")
        self.key: str = key

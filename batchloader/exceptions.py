"""Exceptions for the batchloader package."""

from __future__ import annotations


class BatchLoaderError(Exception):
    """Base exception for batchloader.

    Exceptions raised by a fetch function are never wrapped in this type;
    they reach callers unchanged.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception.

        Args:
            message: The error message.
        """
        super().__init__(message)


class InvalidOptionsError(BatchLoaderError):
    """Exception raised when coordinator options fail validation."""

    def __init__(self, message: str, option: str | None = None) -> None:
        """Initialize with the offending option.

        Args:
            message: The error message.
            option: Name of the option that failed validation, if known.
        """
        super().__init__(message)
        self.option = option


class LoaderContractError(BatchLoaderError, TypeError):
    """Exception raised when a fetch function returns something unusable.

    A fetch function must return a sequence aligned with its keys. Anything
    that cannot be indexed positionally fails the whole batch with this error.
    """

    def __init__(self, message: str, expected: int = 0, actual: object = None) -> None:
        """Initialize with contract details.

        Args:
            message: The error message.
            expected: Number of keys handed to the fetch function.
            actual: The value the fetch function returned.
        """
        super().__init__(message)
        self.expected = expected
        self.actual = actual


__all__ = ["BatchLoaderError", "InvalidOptionsError", "LoaderContractError"]

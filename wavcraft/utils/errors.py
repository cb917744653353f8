"""
Custom exceptions for WavCraft.

This module defines a hierarchy of exceptions for handling the error
conditions of buffer transforms, WAV I/O and configuration.
"""

from typing import Optional, Any


class WavCraftError(Exception):
    """Base exception for all WavCraft errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class FileReadError(WavCraftError):
    """Raised when a WAV file is missing, unreadable or not a valid container."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class UnsupportedFormatError(FileReadError):
    """Raised when a file's container or sample encoding is not supported."""

    def __init__(
        self,
        message: str,
        format: Optional[str] = None,
        file_path: Optional[str] = None,
    ):
        super().__init__(message, file_path=file_path)
        self.format = format
        self.details = {"format": format, "file_path": file_path}


class FileTooLargeError(FileReadError):
    """Raised when a WAV file exceeds the configured size limit."""

    def __init__(
        self,
        message: str,
        file_size: Optional[int] = None,
        max_size: Optional[int] = None,
        file_path: Optional[str] = None,
    ):
        super().__init__(message, file_path=file_path)
        self.file_size = file_size
        self.max_size = max_size
        self.details = {"file_size": file_size, "max_size": max_size}


class WriteError(WavCraftError):
    """Raised when an output file cannot be written."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class EmptyInputError(WavCraftError):
    """Raised when an aggregate operation receives no buffers."""

    def __init__(self, message: str = "No WAV files provided", operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.details = {"operation": operation} if operation else None


class InvalidBufferError(WavCraftError):
    """Raised when an AudioBuffer would violate its format invariants."""


class ConfigurationError(WavCraftError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}

"""
Custom exceptions for fwtargets.

This module defines the error kinds raised while resolving a firmware
version selector, loading a device description document and deriving
devices or user defines from it. Every error surfaces to the caller as a
distinct, inspectable type.
"""

from typing import Optional


class FwTargetsError(Exception):
    """
    Base exception for all fwtargets errors.

    All custom exceptions in fwtargets inherit from this class so callers
    can catch every application-specific failure at once.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(FwTargetsError):
    """Exception raised when configuration is invalid or missing."""

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read."""

    pass


class ConfigValidationError(ConfigurationError):
    """Exception raised when a configuration value has the wrong type."""

    pass


# =============================================================================
# Request Errors
# =============================================================================


class ValidationError(FwTargetsError):
    """
    Exception raised when request validation fails.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidRequestError(ValidationError):
    """
    Exception raised for a malformed version selector.

    Raised before any I/O, e.g. for a pull request without a head commit
    hash or a tag selector without a tag name.
    """

    pass


class UnsupportedSourceError(FwTargetsError):
    """Exception raised when a firmware source kind has no resolution rule."""

    def __init__(self, source: object, details: Optional[str] = None) -> None:
        super().__init__(
            f"unsupported firmware source for the targets service: {source}",
            details,
        )
        self.source = source


# =============================================================================
# Tooling and Fetch Errors
# =============================================================================


class ToolNotFoundError(FwTargetsError):
    """
    Exception raised when a required executable cannot be located.

    Attributes:
        tool: Name of the executable that was searched for.
        search_path: The search path that was used.
    """

    def __init__(
        self,
        tool: str,
        search_path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(f"Failed to find {tool} executable", details)
        self.tool = tool
        self.search_path = search_path


class FetchError(FwTargetsError):
    """Base exception for failures while materializing target data."""

    pass


class GitCommandError(FetchError):
    """
    Exception raised when a git invocation exits with a non-zero status.

    Attributes:
        command: The argument vector that was executed.
        returncode: Process exit status.
        stderr: Captured standard error output.
    """

    def __init__(
        self,
        command: list,
        returncode: int,
        stderr: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"git command failed with exit code {returncode}: {' '.join(command)}",
            (stderr or "").strip() or None,
        )
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


# =============================================================================
# Concurrency Errors
# =============================================================================


class LockTimeoutError(FwTargetsError):
    """Exception raised when exclusive access is not acquired in time."""

    def __init__(self, timeout_ms: float) -> None:
        super().__init__(f"Failed to acquire lock within {timeout_ms} ms")
        self.timeout_ms = timeout_ms


# =============================================================================
# Description Errors
# =============================================================================


class DescriptionError(FwTargetsError):
    """
    Base exception for device description document failures.

    Attributes:
        path: Path of the description file involved, if known.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class DescriptionNotFoundError(DescriptionError):
    """Exception raised when the description file does not exist."""

    pass


class DescriptionParseError(DescriptionError):
    """Exception raised when the description file is malformed."""

    pass


class UnknownDeviceError(FwTargetsError):
    """Exception raised when a device id is absent from the loaded document."""

    def __init__(self, device_id: str) -> None:
        super().__init__(f"failed to find device description for {device_id}")
        self.device_id = device_id


class UnrecognizedUploadMethodError(FwTargetsError):
    """Exception raised for an upload method outside the known set."""

    def __init__(self, upload_method: str) -> None:
        super().__init__(f"Upload Method {upload_method} Not Recognized!")
        self.upload_method = upload_method

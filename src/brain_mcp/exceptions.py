"""Custom exceptions for the Brain MCP server.

Provides a structured exception hierarchy with error codes and
machine-readable error information for the request/response boundary.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Resource errors (1xxx)
    RESOURCE_NOT_FOUND = 1001
    RESOURCE_PATH_CONFLICT = 1002
    NOTE_TITLE_INVALID = 1003

    # Link errors (2xxx)
    LINK_INVALID = 2001
    LINK_ALREADY_EXISTS = 2002

    # Tag errors (3xxx)
    TAG_INVALID = 3002

    # Storage errors (4xxx)
    STORAGE_WRITE_FAILED = 4002
    STORAGE_CONNECTION_FAILED = 4004
    STORAGE_LOCK_TIMEOUT = 4008

    # File system errors (5xxx)
    FILE_WRITE_FAILED = 5002
    FILE_DELETE_FAILED = 5003

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001

    # Validation errors (7xxx)
    VALIDATION_FAILED = 7001


class BrainError(Exception):
    """Base exception for all knowledge base errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class ResourceNotFoundError(BrainError):
    """Raised when a resource id has no row."""

    def __init__(self, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Resource with ID '{resource_id}' not found",
            code=ErrorCode.RESOURCE_NOT_FOUND,
            details={"resource_id": resource_id}
        )
        self.resource_id = resource_id


class StorageError(BrainError):
    """Raised for database query, constraint, lock or connection failures."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        code: ErrorCode = ErrorCode.STORAGE_WRITE_FAILED,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.original_error = original_error


class FileOperationError(BrainError):
    """Raised when reading, writing or removing a backing file fails."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        code: ErrorCode = ErrorCode.FILE_WRITE_FAILED,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if path:
            # Only the file name, full paths stay in the logs
            details["path_hint"] = path.replace("\\", "/").split("/")[-1]
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.path = path
        self.operation = operation
        self.original_error = original_error


class ValidationError(BrainError):
    """Raised for input validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]

        super().__init__(message, code=code, details=details)
        self.field = field
        self.value = value


class LinkError(BrainError):
    """Raised for link-related errors."""

    def __init__(
        self,
        message: str,
        source_id: Optional[str] = None,
        target_id: Optional[str] = None,
        code: ErrorCode = ErrorCode.LINK_INVALID
    ):
        details = {}
        if source_id:
            details["source_id"] = source_id
        if target_id:
            details["target_id"] = target_id

        super().__init__(message, code=code, details=details)
        self.source_id = source_id
        self.target_id = target_id


class TagError(BrainError):
    """Raised for tag-related errors."""

    def __init__(
        self,
        message: str,
        tag_name: Optional[str] = None,
        code: ErrorCode = ErrorCode.TAG_INVALID
    ):
        details = {}
        if tag_name:
            details["tag_name"] = tag_name

        super().__init__(message, code=code, details=details)
        self.tag_name = tag_name


class ConfigurationError(BrainError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key

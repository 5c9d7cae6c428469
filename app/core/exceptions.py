from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST
from typing import Any, Dict, Optional, Union


class AppException(Exception):
    def __init__(self, message: str,
                 error_code: Optional[str] = None,
                 status_code: int = HTTP_400_BAD_REQUEST,
                 details: Optional[Dict[str, Any]] = None,):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', status_code={self.status_code})"


class ValidationException(AppException):
    """Raised when submitted record fields are missing or malformed."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.field = field
        self.value = value

        exception_details = details or {}
        if field:
            exception_details["field"] = field
        if value is not None:
            exception_details["value"] = value

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=exception_details,
            status_code=400,
        )


class NotFoundError(AppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Union[str, int]] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.resource = resource
        self.resource_id = resource_id

        if not message:
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' not found"
            else:
                message = f"{resource} not found"

        exception_details = details or {}
        exception_details.update({
            "resource": resource,
            "resource_id": resource_id,
        })

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            details=exception_details,
            status_code=404,
        )


class UnauthorizedError(AppException):
    """Exception raised when authentication fails."""

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            details=details,
            status_code=401,
        )


class ForbiddenError(AppException):
    """Exception raised when access is forbidden."""

    def __init__(
        self,
        message: str = "Access forbidden",
        resource: Optional[str] = None,
        action: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.resource = resource
        self.action = action

        exception_details = details or {}
        if resource:
            exception_details["resource"] = resource
        if action:
            exception_details["action"] = action

        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            details=exception_details,
            status_code=403,
        )


class ConflictError(AppException):
    """Exception raised when there's a conflict with current state."""

    def __init__(
        self,
        message: str = "Conflict with current state",
        resource: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.resource = resource

        exception_details = details or {}
        if resource:
            exception_details["resource"] = resource

        super().__init__(
            message=message,
            error_code="CONFLICT",
            details=exception_details,
            status_code=409,
        )


class BadRequestError(AppException):
    """Exception raised for bad requests."""

    def __init__(
        self,
        message: str = "Bad request",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_code="BAD_REQUEST",
            details=details,
            status_code=400,
        )


class FileError(AppException):
    """Raised when an uploaded proof file is rejected."""

    def __init__(
        self,
        message: str = "Invalid file",
        filename: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        exception_details = details or {}
        if filename:
            exception_details["filename"] = filename

        super().__init__(
            message=message,
            error_code="FILE_ERROR",
            details=exception_details,
            status_code=400,
        )


class FileStorageError(AppException):
    """Exception raised for file storage-related errors."""

    def __init__(
        self,
        message: str = "File storage error occurred",
        operation: Optional[str] = None,
        file_path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation
        self.file_path = file_path

        exception_details = details or {}
        if operation:
            exception_details["operation"] = operation
        if file_path:
            exception_details["file_path"] = file_path

        super().__init__(
            message=message,
            error_code="FILE_STORAGE_ERROR",
            details=exception_details,
            status_code=500,
        )


class ExportError(AppException):
    """
    Raised inside the export manager when a CSV or workbook step fails.

    Never surfaces to HTTP clients: the manager converts it into a
    boolean result at its public boundary.
    """

    def __init__(
        self,
        message: str = "Export failed",
        kind: Optional[str] = None,
        step: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        self.step = step

        exception_details = details or {}
        if kind:
            exception_details["kind"] = kind
        if step:
            exception_details["step"] = step

        super().__init__(
            message=message,
            error_code="EXPORT_ERROR",
            details=exception_details,
            status_code=500,
        )


class CSVParseError(ValueError):
    """A delimited line could not be parsed (unbalanced quotes, wrong width)."""

    def __init__(self, message: str, line: Optional[str] = None):
        self.line = line
        super().__init__(message)


def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "type": exc.error_code,
                "message": exc.message,
                "details": exc.details,
            },
        },
    )

"""
Base service class providing common functionality for all services.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, NoReturn, Optional

from app.core.exceptions import AppException
from app.utils.logger import get_logger


class BaseService(ABC):
    """Base class for all services."""

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Log service operation."""
        log_msg = f"Service operation: {operation}"
        if details:
            log_msg += f" - Details: {details}"
        self.logger.info(log_msg)

    def handle_error(self, error: Exception, operation: str) -> NoReturn:
        """Log and re-raise; unexpected errors become a 500 AppException."""
        if isinstance(error, AppException):
            self.logger.warning(f"{operation} rejected: {error.message}")
            raise error
        error_msg = f"Error in {operation}: {str(error)}"
        self.logger.error(error_msg)
        raise AppException(error_msg, error_code="SERVICE_ERROR", status_code=500) from error

    @abstractmethod
    def get_service_name(self) -> str:
        """Return the service name."""
        pass

"""
Exception hierarchy for the achievement & progress engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

import psycopg

logger = logging.getLogger(__name__)


class ProgressEngineError(Exception):
    """
    Base exception for all progress engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise ProgressEngineError(
            message="Failed to credit points",
            user_id="user-123",
            operation="add_points",
            context={"delta": 25}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        if request_id is None and isinstance(cause, ProgressEngineError):
            request_id = cause.request_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # 'message' is reserved by logging
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if isinstance(self.cause, ProgressEngineError):
            # Cause already logged itself at ERROR with its traceback
            log_data["cause"] = self.cause.__class__.__name__
            logger.warning(
                f"{self.__class__.__name__}: {self.message} (caused by {self.cause.__class__.__name__})",
                extra=log_data
            )
        elif self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


def _merge_context(base: Dict[str, Any], kwargs: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    merged.update(kwargs.pop("context", None) or {})
    return merged


# ==========================================
# Validation Errors
# ==========================================

class ValidationError(ProgressEngineError):
    """
    Raised when engine input fails validation

    Examples:
    - Catalog row with a non-positive criteria target
    - Negative points delta

    Example:
        raise ValidationError(
            message="Points delta must be non-negative",
            field="delta",
            value=-5,
            user_id="user-123"
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context=_merge_context({"field": field, "value": value}, kwargs),
            **kwargs
        )


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(ProgressEngineError):
    """
    Base class for database-related errors
    """
    pass


class ConnectionError(DatabaseError):
    """Database connection failed"""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(
            message=message,
            user_message="We're having trouble connecting to the database. Please try again in a moment.",
            **kwargs
        )


class QueryError(DatabaseError):
    """Database query execution failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        super().__init__(
            message=message,
            user_message="We encountered an issue saving your progress. Please try again.",
            context=_merge_context({"query": query}, kwargs),
            **kwargs
        )


# ==========================================
# Points Ledger Errors
# ==========================================

class PointsLedgerError(ProgressEngineError):
    """
    Crediting points failed during an achievement check

    Unlock records written earlier in the same check are not rolled back.
    """

    def __init__(
        self,
        message: str,
        delta: Optional[int] = None,
        achievement_ids: Optional[list] = None,
        **kwargs
    ):
        self.delta = delta
        self.achievement_ids = achievement_ids or []
        super().__init__(
            message=message,
            user_message="Your achievements were saved but your points could not be updated.",
            context=_merge_context({"delta": delta, "achievement_ids": self.achievement_ids}, kwargs),
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(ProgressEngineError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context=_merge_context({"config_key": config_key}, kwargs),
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> ProgressEngineError:
    """
    Wrap external exceptions (psycopg, etc.) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate ProgressEngineError subclass

    Example:
        try:
            await queries.insert_user_achievement(user_id, achievement_id)
        except psycopg.Error as e:
            raise wrap_external_exception(
                e,
                operation="insert_user_achievement",
                user_id=user_id,
            )
    """
    if isinstance(error, ProgressEngineError):
        return error

    if isinstance(error, psycopg.OperationalError):
        return ConnectionError(
            message=f"Database connection failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return QueryError(
            message=f"Database query failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    return ProgressEngineError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )

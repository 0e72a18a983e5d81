"""
Standardized exception hierarchy for learnquest
Provides rich context and consistent logging for progression failures
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class LearnQuestError(Exception):
    """
    Base exception for all learnquest errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - Structured context
    - Automatic logging

    Example:
        raise LearnQuestError(
            message="Failed to save learner progress",
            learner_id="learner-42",
            operation="write_profile",
            context={"fields": ["xp", "level"]}
        )
    """

    def __init__(
        self,
        message: str,
        learner_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.learner_id = learner_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # 'message' is reserved by logging
            "request_id": self.request_id,
            "learner_id": self.learner_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if isinstance(self.cause, LearnQuestError):
            # The cause logged itself with the traceback when it was created
            log_data["cause"] = str(self.cause)
            log_data["cause_request_id"] = self.cause.request_id
            logger.debug(f"{self.__class__.__name__}: {self.message}", extra=log_data)
        elif self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for callers that want to report it"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Caller Input)
# ==========================================

class ValidationError(LearnQuestError):
    """
    Raised when a mutation argument is out of range

    Example:
        raise ValidationError(
            message="XP amount must be non-negative",
            field="amount",
            value=-5
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
        context = {"field": field, "value": value, **(kwargs.pop("context", None) or {})}
        super().__init__(message=message, context=context, **kwargs)


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(LearnQuestError):
    """
    Base class for database-related errors
    """
    pass


class ConnectionError(DatabaseError):
    """Database connection failed"""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(message=message, **kwargs)


class QueryError(DatabaseError):
    """Database query execution failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        context = {"query": query, **(kwargs.pop("context", None) or {})}
        super().__init__(message=message, context=context, **kwargs)


# ==========================================
# Progress Synchronization Errors
# ==========================================

class PersistenceError(DatabaseError):
    """
    A write-back of an optimistic mutation failed.

    Only ever logged; the in-memory mutation stays committed.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message=message, operation=operation, **kwargs)


class HydrationError(DatabaseError):
    """Loading a learner snapshot from the store failed"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, operation="fetch_progress", **kwargs)


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(LearnQuestError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        context = {"config_key": config_key, **(kwargs.pop("context", None) or {})}
        super().__init__(message=message, context=context, **kwargs)


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    learner_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> LearnQuestError:
    """
    Wrap external exceptions (psycopg, etc.) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        learner_id: Learner ID if applicable
        context: Additional context

    Returns:
        Appropriate LearnQuestError subclass

    Example:
        try:
            await store.write_profile(identity, fields)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="write_profile")
    """
    import psycopg

    if isinstance(error, LearnQuestError):
        return error

    if isinstance(error, psycopg.OperationalError):
        return ConnectionError(
            message=f"Database connection failed: {str(error)}",
            learner_id=learner_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return QueryError(
            message=f"Database query failed: {str(error)}",
            learner_id=learner_id,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    return LearnQuestError(
        message=f"{operation} failed: {str(error)}",
        learner_id=learner_id,
        operation=operation,
        context=context,
        cause=error
    )

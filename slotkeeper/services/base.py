# slotkeeper/services/base.py
"""
Base Service Pattern for SlotKeeper

Provides common functionality for all service classes:
- A logger named after the concrete service
- Operation timing with slow-call warnings
- Structured operation logging

Transactions belong to the repositories (``repository.transaction()``).
"""

from functools import wraps
import logging
import time
from typing import Any, Callable, Optional, TypeVar, cast

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """Base class for all service layer components."""

    def __init__(self, db: Optional[Session] = None):
        """
        Initialize base service.

        Args:
            db: Database session (None for services that never touch storage)
        """
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to time a service operation.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data):
                # Method implementation

        Every call is logged at debug level with its duration; calls slower
        than SLOW_OPERATION_SECONDS are logged as warnings.
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                start_time = time.perf_counter()
                success = False
                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                finally:
                    elapsed = time.perf_counter() - start_time
                    service_logger = getattr(self, "logger", logger)

                    if elapsed > SLOW_OPERATION_SECONDS:
                        service_logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )
                    else:
                        service_logger.debug(
                            f"{operation_name} finished in {elapsed * 1000:.1f}ms (success={success})"
                        )

            wrapper._operation_name = operation_name  # type: ignore[attr-defined]
            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log an operation with context.

        Args:
            operation: Operation name
            **context: Additional context to log
        """
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

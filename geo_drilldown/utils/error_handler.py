"""
Error handling utilities for the geographic drill-down engine.

This module provides retry with exponential backoff for calls into the
external data source, plus helpers for building and logging error context.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from ..exceptions import DataSourceError, get_error_severity


class RetryConfig:
    """Configuration for retry mechanisms."""

    def __init__(self, max_attempts: int = 3, base_delay: float = 0.5,
                 max_delay: float = 10.0, backoff_factor: float = 2.0,
                 retry_exceptions: Optional[List[Type[Exception]]] = None):
        """
        Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts
            base_delay: Base delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            backoff_factor: Factor to multiply delay by for exponential backoff
            retry_exceptions: List of exception types to retry on
        """
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.retry_exceptions = retry_exceptions or [
            DataSourceError, ConnectionError, TimeoutError, OSError
        ]

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given failed attempt (1-based)."""
        return min(
            self.base_delay * (self.backoff_factor ** (attempt - 1)),
            self.max_delay
        )

    def should_retry(self, error: Exception) -> bool:
        """Check whether an exception type is retried."""
        return any(isinstance(error, exc_type) for exc_type in self.retry_exceptions)


async def retry_async(operation: Callable[[], Awaitable[Any]], operation_name: str,
                      retry_config: Optional[RetryConfig] = None,
                      logger: Optional[logging.Logger] = None) -> Any:
    """
    Await an operation, retrying transient failures with exponential backoff.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        operation_name: Name of the operation for logging
        retry_config: Configuration for retry behavior
        logger: Optional logger instance

    Returns:
        Result of the operation

    Raises:
        DataSourceError: If the operation fails after all retries, or fails
            with an exception type that is not retried
    """
    if retry_config is None:
        retry_config = RetryConfig()

    if logger is None:
        logger = logging.getLogger(__name__)

    for attempt in range(1, retry_config.max_attempts + 1):
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not retry_config.should_retry(e):
                logger.error(f"Non-recoverable error during {operation_name}: {e}")
                raise DataSourceError(
                    f"Data source operation '{operation_name}' failed: {e}",
                    operation=operation_name,
                    attempts=attempt,
                    original_error=e
                ) from e

            if attempt == retry_config.max_attempts:
                logger.error(
                    f"{operation_name} failed after {retry_config.max_attempts} attempts: {e}"
                )
                raise DataSourceError(
                    f"Data source operation '{operation_name}' failed after "
                    f"{retry_config.max_attempts} attempts",
                    operation=operation_name,
                    attempts=attempt,
                    original_error=e
                ) from e

            delay = retry_config.delay_for(attempt)
            logger.warning(
                f"{operation_name} failed (attempt {attempt}/{retry_config.max_attempts}): {e}. "
                f"Retrying in {delay:.2f} seconds"
            )
            await asyncio.sleep(delay)

    # Only reachable with max_attempts < 1
    raise DataSourceError(
        f"Data source operation '{operation_name}' was never attempted",
        operation=operation_name,
        attempts=0
    )


def create_error_context(operation: str, **kwargs) -> Dict[str, Any]:
    """
    Create standardized error context dictionary.

    Args:
        operation: Name of the operation being performed
        **kwargs: Additional context information

    Returns:
        Dictionary with error context information
    """
    context = {
        'operation': operation,
        'timestamp': time.time(),
    }
    context.update(kwargs)
    return context


def log_error_details(logger: logging.Logger, error: Exception,
                      context: Optional[Dict[str, Any]] = None):
    """
    Log detailed error information.

    Args:
        logger: Logger instance to use
        error: Exception to log
        context: Optional context information
    """
    error_details = {
        'error_type': type(error).__name__,
        'error_message': str(error),
        'severity': get_error_severity(error)
    }

    if hasattr(error, 'to_dict'):
        error_details.update(error.to_dict())

    if context:
        error_details['context'] = context

    severity = error_details.get('severity', 'medium')
    if severity == 'critical':
        logger.critical(f"Critical error occurred: {error_details}")
    elif severity == 'high':
        logger.error(f"High severity error: {error_details}")
    elif severity == 'medium':
        logger.warning(f"Medium severity error: {error_details}")
    else:
        logger.info(f"Low severity error: {error_details}")

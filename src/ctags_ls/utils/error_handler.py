"""
Decorator-based error handling for protocol entry points.

Requests and notifications fail differently: a failed request is still
answered (with an empty result), a failed notification is simply dropped.
Either way the failure is logged and never escapes into the message loop.
"""

import functools
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


def handle_request_errors(default: Callable[[], Any] = list) -> Callable:
    """
    Decorator to answer failed requests with a default result.

    Args:
        default: Factory for the result returned when the handler raises.
            Goto requests use ``list`` so the client receives ``[]``.

    Returns:
        Decorator function that wraps a request handler with error handling

    Example:
        @handle_request_errors(default=list)
        def definition(self, params):
            return self.goto_service.goto(GotoKind.DEFINITION, ...)
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Failed to handle request {func.__name__}: {e}", exc_info=True)
                return default()

        return wrapper

    return decorator


def handle_notification_errors(func: Callable) -> Callable:
    """Decorator to log and discard failures in notification handlers."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> None:
        try:
            func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Failed to handle notification {func.__name__}: {e}", exc_info=True)

    return wrapper

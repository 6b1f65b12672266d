"""Error types and graceful-degradation helpers for Recipe Matcher.

Error taxonomy:
- CatalogUnavailableError: the recipe catalog cannot be read at all. This is the
  only condition surfaced to end users ("no results, retrieval unavailable").
- RemoteSearchUnavailableError: network failure, timeout, non-2xx status or a
  malformed payload from the remote search service. Always recovered locally.
- InvalidSearchRequestError: the search service received an empty ingredient list.

Helpers:
- safe_execute_async(): await a coroutine, log failures, return a default
- safe_execute_sync(): same pattern for plain callables
"""

from src.utils.logger import logger


class RecipeMatcherError(Exception):
    """Base class for all recipe matcher errors."""


class CatalogUnavailableError(RecipeMatcherError):
    """Raised when the recipe catalog cannot be read."""

    user_message = "No results: recipe retrieval unavailable"

    def __init__(self, message: str = user_message) -> None:
        super().__init__(message)


class RemoteSearchUnavailableError(RecipeMatcherError):
    """Raised when the remote search service cannot produce a usable response.

    Attributes:
        status: HTTP status code if the service answered, None otherwise.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class InvalidSearchRequestError(RecipeMatcherError, ValueError):
    """Raised when a search request carries no usable ingredients."""


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning") -> None:
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


async def safe_execute_async(
    coro,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
):
    """Safely execute async operation with consistent error logging.

    Used for optional operations that should degrade gracefully, e.g. the
    remote search attempt (fall back to local matching) or the hosted
    ingredient list (fall back to names derived from cached recipes).

    Args:
        coro: Awaitable coroutine to execute.
        operation_name: Description for logging (e.g., "Remote recipe search").
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None.

    Returns:
        Result of coroutine if successful, default_return otherwise.
    """
    try:
        return await coro
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return


def safe_execute_sync(
    func,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
):
    """Synchronous version of safe_execute_async.

    Args:
        func: Callable to execute (no args).
        operation_name: Description for logging.
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None.

    Returns:
        Result of func if successful, default_return otherwise.
    """
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return

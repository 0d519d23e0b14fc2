"""Conversion of relay errors into proxy responses."""

import logging
from collections.abc import Callable
from functools import wraps

from image_relay.exceptions.base import ImageRelayError
from image_relay.types import LambdaResponse

logger = logging.getLogger(__name__)


def create_error_response(exception: ImageRelayError) -> LambdaResponse:
    """Plain-text response carrying only the error message."""
    return {
        "statusCode": exception.response_status,
        "headers": {"content-type": "text/plain; charset=utf-8"},
        "body": exception.message,
    }


def create_exception_handler[**P, T](
    func: Callable[P, T],
) -> Callable[P, T | LambdaResponse]:
    """Wrap a handler so that relay errors become error responses.

    Anything that is not an ImageRelayError propagates to the runtime.

    Args:
        func: The handler function to wrap.

    Returns:
        Wrapped handler.
    """

    @wraps(func)
    def handle_call(*args: P.args, **kwargs: P.kwargs) -> T | LambdaResponse:
        try:
            return func(*args, **kwargs)
        except ImageRelayError as error:
            logger.warning(
                "Request failed: %s",
                error.message,
                extra={"error": error.to_log_dict(), "api_request_id": _request_id(args)},
            )
            return create_error_response(error)

    return handle_call


def _request_id(args: tuple[object, ...]) -> str | None:
    """API request ID of the event passed as the first handler argument."""
    event = args[0] if args else None
    if not isinstance(event, dict):
        return None
    request_context = event.get("requestContext")
    if not isinstance(request_context, dict):
        return None
    request_id = request_context.get("requestId")
    return request_id if isinstance(request_id, str) else None

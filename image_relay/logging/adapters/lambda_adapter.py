"""Lambda adapter for setting logging context from proxy events."""

from typing import Any

from image_relay.logging.context import set_correlation_id, set_extra_context
from image_relay.types import LambdaContext


def set_lambda_context(
    event: dict[str, Any],
    context: LambdaContext | None,
) -> None:
    """Set logging context from a proxy event and Lambda context.

    Args:
        event: Proxy event dictionary.
        context: Lambda context object, absent when invoked outside Lambda.
    """
    if context is not None:
        set_correlation_id(context.aws_request_id)
        set_extra_context(function_name=context.function_name)

    request_context = event.get("requestContext")
    if not isinstance(request_context, dict):
        return

    if "requestId" in request_context:
        set_extra_context(api_request_id=str(request_context["requestId"]))

    identity = request_context.get("identity")
    if isinstance(identity, dict) and identity.get("sourceIp"):
        set_extra_context(source_ip=str(identity["sourceIp"]))

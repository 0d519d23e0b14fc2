"""Shapes of the Lambda proxy integration seen by the relay."""

from typing import NotRequired, Protocol, TypedDict


class LambdaContext(Protocol):
    """The parts of the Lambda context object the relay reads."""

    function_name: str
    aws_request_id: str

    def get_remaining_time_in_millis(self) -> int: ...


class LambdaResponse(TypedDict):
    """Proxy response; binary bodies travel base64-encoded."""

    statusCode: int
    body: str
    headers: NotRequired[dict[str, str]]
    isBase64Encoded: NotRequired[bool]

"""JSON-RPC 2.0 envelope adapter.

Maps already-decoded JSON-RPC 2.0 request envelopes onto a BaseHandler and
builds the response envelopes. Decoding and encoding JSON, and moving bytes
over a transport, are left to the caller.

Envelope rules:
- A single request (dict) yields a response dict
- A batch (non-empty list) yields a list of responses, in request order
- Notifications (no ``id`` member) are dispatched but yield no response;
  an all-notification batch yields None
- Malformed envelopes yield an Invalid Request (-32600) error

Example:
    >>> server = JsonRpcServer(builder.build_handler())
    >>> server.handle({"jsonrpc": "2.0", "method": "add", "params": [2, 3], "id": 1})
    {'jsonrpc': '2.0', 'id': 1, 'result': 5}
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationError

from .logging import log_debug
from .types import DispatchRequest, Error, ErrorCode

if TYPE_CHECKING:
    from .handler import BaseHandler

JSONRPC_VERSION = "2.0"


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request envelope."""

    jsonrpc: Literal["2.0"] = Field(description="Protocol version, exactly '2.0'.")
    method: StrictStr = Field(min_length=1, description="Action name.")
    params: list[Any] | dict[str, Any] | None = Field(default=None)
    id: StrictStr | StrictInt | None = Field(default=None)

    model_config = {"extra": "forbid"}


class JsonRpcServer:
    """Dispatches JSON-RPC 2.0 envelopes through a handler."""

    def __init__(self, handler: BaseHandler) -> None:
        self._handler = handler

    @property
    def handler(self) -> BaseHandler:
        return self._handler

    def handle(self, payload: Any) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Handle a decoded request or batch.

        Args:
            payload: A request dict or a list of them.

        Returns:
            The response envelope(s), or None when nothing must be sent back.
        """
        if isinstance(payload, list):
            return self._handle_batch(payload)
        return self._handle_single(payload)

    def _handle_batch(self, payload: list[Any]) -> list[dict[str, Any]] | None:
        if not payload:
            return [_invalid_request(None, {"reason": "empty batch"})]

        log_debug(f"JsonRpcServer: Handling batch of {len(payload)} requests")
        responses = [self._handle_single(entry) for entry in payload]
        answered = [r for r in responses if r is not None]
        return answered or None

    def _handle_single(self, payload: Any) -> dict[str, Any] | None:
        if not isinstance(payload, dict):
            return _invalid_request(None, {"reason": "request must be an object"})

        try:
            request = JsonRpcRequest.model_validate(payload)
        except ValidationError as e:
            fields = [".".join(str(part) for part in err["loc"]) or "request" for err in e.errors()]
            return _invalid_request(_safe_id(payload.get("id")), {"fields": fields})

        is_notification = "id" not in payload
        response = self._handler.dispatch(
            DispatchRequest(action=request.method, params=request.params, request_id=request.id)
        )
        if is_notification:
            return None

        if response.error is not None:
            return _error_envelope(request.id, response.error)
        return {"jsonrpc": JSONRPC_VERSION, "id": request.id, "result": response.result}


def _error_envelope(request_id: str | int | None, error: Error) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_payload()}


def _invalid_request(request_id: str | int | None, data: dict[str, Any]) -> dict[str, Any]:
    error = Error(
        code=ErrorCode.INVALID_REQUEST,
        message="Invalid request",
        data=data,
        kind="InvalidRequest",
    )
    return _error_envelope(request_id, error)


def _safe_id(value: Any) -> str | int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return value
    return None


__all__ = ["JSONRPC_VERSION", "JsonRpcRequest", "JsonRpcServer"]

"""Pydantic models for rpc-dispatch.

This module provides the type-safe data models that cross the dispatcher
boundary: requests, responses, error objects, configuration and the
documentation records produced by the doc extractor.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes used by the built-in error factories."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    APPLICATION_ERROR = -32000
    UNRESOLVABLE_ACTION = -32001


class ParameterPolicy(str, Enum):
    """How request parameters the action does not declare are handled."""

    STRICT = "strict"
    """Reject undeclared parameters with UnexpectedParameterError."""

    LOOSE = "loose"
    """Silently ignore undeclared parameters."""


class CollisionPolicy(str, Enum):
    """How the chain loader handles two loaders defining the same action."""

    REJECT = "reject"
    """Raise LoadError when definitions conflict."""

    LAST_WINS = "last_wins"
    """The loader registered later overrides the earlier definition."""


class DispatchState(str, Enum):
    """States of a single dispatch pass.

    A dispatch moves strictly forward through these states; no state is
    revisited. A failed dispatch stays in the state where it failed and
    the response carries the error.
    """

    IDLE = "idle"
    RESOLVING_ACTION = "resolving_action"
    RESOLVING_CALLABLE = "resolving_callable"
    BINDING_PARAMETERS = "binding_parameters"
    INVOKING = "invoking"
    SUCCESS = "success"


class Error(BaseModel):
    """Client-safe error object.

    Built fresh per failure by the error factory chain. Never carries the
    original exception, its message or its stack.

    Example:
        >>> Error(code=-32601, message="Action not found", data={"action": "x"})
    """

    code: int = Field(description="Integer error code (JSON-RPC compatible).")
    message: str = Field(description="Message safe for client exposure.")
    data: dict[str, Any] | None = Field(
        default=None,
        description="Optional structured detail safe for client exposure.",
    )
    kind: str = Field(
        default="InternalError",
        description="Symbolic error kind (taxonomy name).",
    )

    model_config = {"frozen": True}

    def to_payload(self) -> dict[str, Any]:
        """Return the protocol payload ({code, message, data?})."""
        payload: dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class DispatchRequest(BaseModel):
    """Inbound request handed to the dispatcher by a transport.

    Example:
        >>> DispatchRequest(action="add", params={"a": 2, "b": 3})
    """

    action: str = Field(description="Name of the action to invoke.")
    params: list[Any] | dict[str, Any] | None = Field(
        default=None,
        description="Positional list or name-keyed mapping of raw values.",
    )
    request_id: str | int | None = Field(
        default=None,
        description="Transport correlation id, used for logging only.",
    )


class DispatchResponse(BaseModel):
    """Outcome of one dispatch pass.

    Exactly one of ``result``/``error`` is meaningful: check ``ok`` first.
    """

    action: str = Field(description="The requested action name.")
    result: Any = Field(default=None, description="Extracted return value on success.")
    error: Error | None = Field(default=None, description="Error object on failure.")
    state: DispatchState = Field(
        default=DispatchState.SUCCESS,
        description="State in which the dispatch finished or failed.",
    )

    @property
    def ok(self) -> bool:
        """True when the dispatch finished successfully."""
        return self.error is None


class DispatchEvent(BaseModel):
    """Payload published to observation listeners."""

    action: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    outcome: Any = None
    error: Error | None = None
    request_id: str | int | None = None


class LogContext(BaseModel):
    """Structured logging context.

    Example:
        >>> log_info("Dispatching", LogContext(action="add", request_id="1"))
    """

    action: str | None = Field(default=None, description="Action name.")
    request_id: str | None = Field(default=None, description="Request correlation id.")
    resolver: str | None = Field(default=None, description="Resolver name.")
    error_code: int | None = Field(default=None, description="Error code, if any.")
    operation: str | None = Field(default=None, description="Operation being performed.")


class DispatcherConfig(BaseModel):
    """Runtime policies for the dispatcher.

    Example:
        >>> config = DispatcherConfig(parameter_policy="loose")
        >>> builder.set_config(config)
    """

    parameter_policy: ParameterPolicy = Field(
        default=ParameterPolicy.STRICT,
        description="Handling of undeclared request parameters.",
    )
    collision_policy: CollisionPolicy = Field(
        default=CollisionPolicy.REJECT,
        description="Handling of duplicate action names across loaders.",
    )
    expose_application_errors: bool = Field(
        default=False,
        description="Include the exception type name in application error data.",
    )
    log_level: str = Field(
        default="info",
        pattern="^(trace|debug|info|warn|error)$",
        description="Log level (trace, debug, info, warn, error).",
    )
    actions_path: str | None = Field(
        default=None,
        description="Path to a YAML action definition file.",
    )

    model_config = {"extra": "forbid"}


class ParameterDescription(BaseModel):
    """Documentation record for one action parameter."""

    name: str
    type: str = Field(description="Rendered type annotation, 'any' if undeclared.")
    required: bool
    default: Any = None
    description: str | None = None


class ActionDescription(BaseModel):
    """Documentation record for one action."""

    name: str
    summary: str | None = None
    description: str | None = None
    parameters: list[ParameterDescription] = Field(default_factory=list)
    returns: str = "any"
    resolver: str | None = None


class ServiceDescription(BaseModel):
    """Catalog of every registered action, as produced by the doc extractor."""

    actions: list[ActionDescription] = Field(default_factory=list)
    errors: dict[str, str] = Field(
        default_factory=dict,
        description="Actions that could not be described, keyed by name.",
    )

    def action_names(self) -> list[str]:
        """Names of all described actions in registry order."""
        return [a.name for a in self.actions]

    def get(self, name: str) -> ActionDescription | None:
        """Look up a described action by name."""
        for description in self.actions:
            if description.name == name:
                return description
        return None


__all__ = [
    "ErrorCode",
    "ParameterPolicy",
    "CollisionPolicy",
    "DispatchState",
    "Error",
    "DispatchRequest",
    "DispatchResponse",
    "DispatchEvent",
    "LogContext",
    "DispatcherConfig",
    "ParameterDescription",
    "ActionDescription",
    "ServiceDescription",
]

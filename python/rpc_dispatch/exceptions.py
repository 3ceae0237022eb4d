"""Exception hierarchy for rpc-dispatch.

Every failure the dispatch pipeline knows how to name derives from
DispatchError. Request-time failures (not found, resolution, parameter
binding, application) are caught at the dispatcher boundary and translated
into Error objects by the error factory chain. Setup failures (SetupError
and its subclasses) are raised directly to the code wiring the dispatcher.

Example:
    >>> from rpc_dispatch.exceptions import ActionNotFoundError
    >>>
    >>> try:
    ...     registry.get("missing")
    ... except ActionNotFoundError as e:
    ...     print(e.action)
    missing
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class DispatchError(Exception):
    """Base class for all rpc-dispatch errors.

    Attributes:
        message: Human-readable error message (server side only).
        metadata: Additional error context.
    """

    def __init__(self, message: str, *, metadata: dict[str, Any] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error message.
            metadata: Additional context.
        """
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging.

        Returns:
            Dictionary with error details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "metadata": self.metadata,
        }


# Request-time errors


class ActionNotFoundError(DispatchError):
    """The requested action name is not in the registry.

    Example:
        >>> raise ActionNotFoundError("missing")
    """

    def __init__(self, action: str) -> None:
        super().__init__(f"Action '{action}' not found", metadata={"action": action})
        self.action = action


class UnresolvableActionError(DispatchError):
    """No resolver in the chain could produce a binding for the action.

    This usually means the action was loaded with a target kind that no
    registered resolver understands.
    """

    def __init__(self, action: str, reason: str | None = None) -> None:
        message = f"Action '{action}' could not be resolved"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, metadata={"action": action})
        self.action = action
        self.reason = reason


class ParameterError(DispatchError):
    """Base class for failures while binding request parameters."""

    pass


class MissingParameterError(ParameterError):
    """A required parameter is absent from the request.

    Example:
        >>> raise MissingParameterError("b")
    """

    def __init__(self, parameter: str) -> None:
        super().__init__(
            f"Missing required parameter '{parameter}'",
            metadata={"parameter": parameter},
        )
        self.parameter = parameter


class ParameterTypeError(ParameterError):
    """A supplied value could not be coerced to the declared type."""

    def __init__(self, parameter: str, expected: str, detail: str | None = None) -> None:
        message = f"Parameter '{parameter}' must be of type {expected}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, metadata={"parameter": parameter, "expected": expected})
        self.parameter = parameter
        self.expected = expected


class UnexpectedParameterError(ParameterError):
    """The request carries parameters the action does not declare.

    Only raised under the strict parameter policy.
    """

    def __init__(self, parameters: list[str]) -> None:
        joined = ", ".join(parameters)
        super().__init__(
            f"Unexpected parameters: {joined}",
            metadata={"parameters": list(parameters)},
        )
        self.parameters = list(parameters)


class ApplicationError(DispatchError):
    """Wraps any exception raised by an invoked action target.

    The original exception is kept as ``__cause__`` and ``original`` for
    logging; it never crosses the protocol boundary.
    """

    def __init__(self, action: str, original: BaseException) -> None:
        super().__init__(
            f"Action '{action}' raised {type(original).__name__}",
            metadata={"action": action, "original_type": type(original).__name__},
        )
        self.action = action
        self.original = original


class ResponseExtractError(DispatchError):
    """The action's return value could not be converted into response data."""

    pass


class InternalError(DispatchError):
    """Fallback for failures no error factory could classify."""

    pass


class ExposedError(Exception):
    """Application exception whose message is safe to show to clients.

    Raise (or subclass) this from an action to deliberately surface a code,
    message and detail through the protocol boundary. Mapping data is sent
    with string keys; any other value is sent as ``{"value": data}``.

    Example:
        >>> class InsufficientFunds(ExposedError):
        ...     code = 4001
        >>>
        >>> raise InsufficientFunds("Balance too low", data={"balance": 3})
    """

    code: int = -32000

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.data = _exposed_data(data)


def _exposed_data(data: Any) -> dict[str, Any] | None:
    if data is None:
        return None
    if isinstance(data, Mapping):
        return {str(key): value for key, value in data.items()}
    return {"value": data}


# Setup-time errors


class SetupError(DispatchError):
    """Base class for configuration-time errors.

    These indicate a programming or wiring mistake and are raised directly
    to the caller instead of being routed through the error factory chain.
    """

    pass


class AlreadyBuiltError(SetupError):
    """A mutating setup call was made after the target was built."""

    pass


class LoadError(SetupError):
    """The loader chain could not produce a consistent set of actions."""

    pass


class ConfigurationError(SetupError):
    """Configuration values are invalid."""

    pass


__all__ = [
    "DispatchError",
    "ActionNotFoundError",
    "UnresolvableActionError",
    "ParameterError",
    "MissingParameterError",
    "ParameterTypeError",
    "UnexpectedParameterError",
    "ApplicationError",
    "ResponseExtractError",
    "InternalError",
    "ExposedError",
    "SetupError",
    "AlreadyBuiltError",
    "LoadError",
    "ConfigurationError",
]

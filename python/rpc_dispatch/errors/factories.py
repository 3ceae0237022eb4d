"""Built-in error factories.

- ExposedErrorFactory: application exceptions that opt in to exposure by
  subclassing ExposedError
- DispatchErrorFactory: the dispatcher's own error taxonomy
- ExceptionMappingFactory: user-supplied exception class to code/message map
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from ..exceptions import (
    ActionNotFoundError,
    ApplicationError,
    ExposedError,
    InternalError,
    MissingParameterError,
    ParameterTypeError,
    ResponseExtractError,
    UnexpectedParameterError,
    UnresolvableActionError,
)
from ..types import Error, ErrorCode
from .base_factory import BaseErrorFactory, unwrap


class ExposedErrorFactory(BaseErrorFactory):
    """Surfaces the code, message and data of ExposedError subclasses.

    Example:
        >>> class InsufficientFunds(ExposedError):
        ...     code = 4001
        >>> factory = ExposedErrorFactory()
        >>> factory.create(InsufficientFunds("Balance too low")).code
        4001
    """

    def supports(self, exc: BaseException) -> bool:
        return isinstance(unwrap(exc), ExposedError)

    def create(self, exc: BaseException) -> Error:
        exposed = cast(ExposedError, unwrap(exc))
        return Error(
            code=exposed.code,
            message=exposed.message,
            data=exposed.data,
            kind=type(exposed).__name__,
        )


class DispatchErrorFactory(BaseErrorFactory):
    """Translates the dispatcher's own failures into JSON-RPC errors.

    Each taxonomy error gets a fixed code, a fixed message and, for
    request-shape errors, structured data naming what was wrong. Nothing
    derived from an application exception's message is ever included.

    Args:
        expose_application_errors: Include the exception type name of
            wrapped application failures in ``data``.
    """

    def __init__(self, *, expose_application_errors: bool = False) -> None:
        self._expose_application_errors = expose_application_errors

    def supports(self, exc: BaseException) -> bool:
        return isinstance(
            exc,
            (
                ActionNotFoundError,
                UnresolvableActionError,
                MissingParameterError,
                ParameterTypeError,
                UnexpectedParameterError,
                ApplicationError,
                ResponseExtractError,
                InternalError,
            ),
        )

    def create(self, exc: BaseException) -> Error:
        if isinstance(exc, ActionNotFoundError):
            return Error(
                code=ErrorCode.METHOD_NOT_FOUND,
                message="Action not found",
                data={"action": exc.action},
                kind="ActionNotFound",
            )
        if isinstance(exc, UnresolvableActionError):
            return Error(
                code=ErrorCode.UNRESOLVABLE_ACTION,
                message="Action could not be resolved",
                data={"action": exc.action},
                kind="UnresolvableAction",
            )
        if isinstance(exc, MissingParameterError):
            return Error(
                code=ErrorCode.INVALID_PARAMS,
                message="Missing required parameter",
                data={"parameter": exc.parameter},
                kind="MissingParameter",
            )
        if isinstance(exc, ParameterTypeError):
            return Error(
                code=ErrorCode.INVALID_PARAMS,
                message="Invalid parameter type",
                data={"parameter": exc.parameter, "expected": exc.expected},
                kind="ParameterType",
            )
        if isinstance(exc, UnexpectedParameterError):
            return Error(
                code=ErrorCode.INVALID_PARAMS,
                message="Unexpected parameters",
                data={"parameters": exc.parameters},
                kind="UnexpectedParameter",
            )
        if isinstance(exc, ApplicationError):
            data: dict[str, Any] | None = None
            if self._expose_application_errors:
                data = {"type": type(exc.original).__name__}
            return Error(
                code=ErrorCode.APPLICATION_ERROR,
                message="Application error",
                data=data,
                kind="ApplicationError",
            )
        return internal_error()


class ExceptionMappingFactory(BaseErrorFactory):
    """Maps exception classes to fixed codes and messages.

    Lookups walk the exception's MRO, so the most specific mapped class
    wins regardless of map order. Application exceptions wrapped in
    ApplicationError are matched by their own type.

    Example:
        >>> factory = ExceptionMappingFactory({
        ...     PermissionError: (403, "Forbidden"),
        ...     LookupError: 404,
        ... })
    """

    def __init__(
        self,
        mapping: Mapping[type[BaseException], int | tuple[int, str]] | None = None,
    ) -> None:
        self._mapping: dict[type[BaseException], tuple[int, str]] = {}
        for exc_type, entry in (mapping or {}).items():
            if isinstance(entry, tuple):
                self.add(exc_type, *entry)
            else:
                self.add(exc_type, entry)

    def add(
        self,
        exc_type: type[BaseException],
        code: int,
        message: str = "Application error",
    ) -> ExceptionMappingFactory:
        """Map an exception class to an error code and message.

        Returns:
            Self for method chaining.
        """
        self._mapping[exc_type] = (code, message)
        return self

    def supports(self, exc: BaseException) -> bool:
        return self._lookup(unwrap(exc)) is not None

    def create(self, exc: BaseException) -> Error:
        subject = unwrap(exc)
        entry = self._lookup(subject)
        if entry is None:
            return internal_error()
        code, message = entry
        return Error(code=code, message=message, kind=type(subject).__name__)

    def _lookup(self, exc: BaseException) -> tuple[int, str] | None:
        for klass in type(exc).__mro__:
            entry = self._mapping.get(klass)
            if entry is not None:
                return entry
        return None


def internal_error() -> Error:
    """The fallback Error: code -32603, fixed message, no data."""
    return Error(code=ErrorCode.INTERNAL_ERROR, message="Internal error", kind="InternalError")


__all__ = [
    "DispatchErrorFactory",
    "ExceptionMappingFactory",
    "ExposedErrorFactory",
    "internal_error",
]

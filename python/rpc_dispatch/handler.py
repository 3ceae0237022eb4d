"""Dispatcher: one request in, one response out.

The BaseHandler runs a single linear pass for every request:

    idle -> resolving_action -> resolving_callable -> binding_parameters
         -> invoking -> success

A failed pass stops in the state where it failed; the response then
carries that state together with the translated error.

Every failure along the way is caught at this boundary and translated by
the error factory chain, so ``dispatch`` always returns a DispatchResponse.
Exceptions raised by the action target are wrapped in ApplicationError
first; the original stays available to logs and listeners in-process but
never reaches the response.

Example:
    >>> handler = HandlerBuilder().build_handler()
    >>> response = handler.dispatch(DispatchRequest(action="add", params={"a": 2, "b": 3}))
    >>> response.result
    5
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .events import DispatchEvents, EventNames
from .exceptions import ApplicationError, DispatchError, InternalError, ParameterTypeError
from .logging import describe_exception, log_debug, log_error
from .response import ResponseExtractor
from .types import (
    DispatchEvent,
    DispatchRequest,
    DispatchResponse,
    DispatchState,
    ErrorCode,
    LogContext,
)

if TYPE_CHECKING:
    from .errors import Errors
    from .parameters import ParameterResolver
    from .registry import ActionRegistry
    from .resolver import ChainResolver


class BaseHandler:
    """Dispatches requests to actions.

    A handler holds only immutable collaborators once built, so a single
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        registry: ActionRegistry,
        resolver: ChainResolver,
        parameter_resolver: ParameterResolver,
        errors: Errors,
        *,
        events: DispatchEvents | None = None,
        response_extractor: ResponseExtractor | None = None,
    ) -> None:
        """Initialize the handler.

        Prefer HandlerBuilder.build_handler(), which wires and freezes the
        collaborators.

        Args:
            registry: Action catalog.
            resolver: Chain turning actions into bindings.
            parameter_resolver: Binds request parameters.
            errors: Error factory chain.
            events: Observation hub. A private one is created if omitted.
            response_extractor: Converts return values into plain data.
        """
        self._registry = registry
        self._resolver = resolver
        self._parameter_resolver = parameter_resolver
        self._errors = errors
        self._events = events or DispatchEvents()
        self._response_extractor = response_extractor or ResponseExtractor()

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    @property
    def resolver(self) -> ChainResolver:
        return self._resolver

    @property
    def errors(self) -> Errors:
        return self._errors

    @property
    def events(self) -> DispatchEvents:
        return self._events

    def dispatch(
        self,
        request: DispatchRequest | str,
        params: Sequence[Any] | Mapping[str, Any] | None = None,
        *,
        request_id: str | int | None = None,
    ) -> DispatchResponse:
        """Dispatch one request.

        Args:
            request: A DispatchRequest, or an action name.
            params: Raw parameters when ``request`` is an action name.
            request_id: Correlation id when ``request`` is an action name.

        Returns:
            The response. Never raises for request-time failures.

        Example:
            >>> handler.dispatch("add", [2, 3]).result
            5
            >>> handler.dispatch("add", {"a": 2}).error.data
            {'parameter': 'b'}
        """
        if isinstance(request, str):
            action_name = request
            try:
                request = DispatchRequest(
                    action=action_name,
                    params=list(params) if isinstance(params, tuple) else params,
                    request_id=request_id,
                )
            except ValidationError as e:
                return self._fail(
                    action_name,
                    _safe_request_id(request_id),
                    DispatchState.IDLE,
                    _request_error(e),
                    {},
                )

        state = DispatchState.IDLE
        arguments: dict[str, Any] = {}

        try:
            state = DispatchState.RESOLVING_ACTION
            action = self._registry.get(request.action)

            state = DispatchState.RESOLVING_CALLABLE
            binding = self._resolver.resolve(action)

            state = DispatchState.BINDING_PARAMETERS
            bound = self._parameter_resolver.bind(binding.parameters, request.params)
            arguments = bound.as_dict(binding.parameters)

            state = DispatchState.INVOKING
            self._events.publish(
                EventNames.PRE_DISPATCH,
                DispatchEvent(
                    action=action.name,
                    arguments=arguments,
                    request_id=request.request_id,
                ),
            )
            try:
                outcome = bound.invoke(binding.invocable)
            except Exception as e:
                raise ApplicationError(action.name, e) from e

            result = self._response_extractor.extract(outcome)
        except Exception as exc:
            return self._fail(request.action, request.request_id, state, exc, arguments)

        self._events.publish(
            EventNames.POST_DISPATCH,
            DispatchEvent(
                action=request.action,
                arguments=arguments,
                outcome=result,
                request_id=request.request_id,
            ),
        )
        log_debug(
            f"Dispatched '{request.action}'",
            LogContext(action=request.action, request_id=_str_or_none(request.request_id)),
        )
        return DispatchResponse(action=request.action, result=result, state=DispatchState.SUCCESS)

    def _fail(
        self,
        action: str,
        request_id: str | int | None,
        state: DispatchState,
        exc: Exception,
        arguments: dict[str, Any],
    ) -> DispatchResponse:
        error = self._errors.translate(exc)

        context = LogContext(
            action=action,
            request_id=_str_or_none(request_id),
            error_code=error.code,
            operation=state.value,
        )
        if isinstance(exc, ApplicationError):
            log_error(f"Action '{action}' raised {describe_exception(exc.original)}", context)
        elif error.code == ErrorCode.INTERNAL_ERROR or not isinstance(exc, DispatchError):
            log_error(f"Dispatch of '{action}' failed: {describe_exception(exc)}", context)
        else:
            log_debug(f"Dispatch of '{action}' rejected: {describe_exception(exc)}", context)

        self._events.publish(
            EventNames.DISPATCH_ERROR,
            DispatchEvent(
                action=action,
                arguments=arguments,
                error=error,
                request_id=request_id,
            ),
        )
        return DispatchResponse(action=action, error=error, state=state)


def _str_or_none(value: str | int | None) -> str | None:
    return None if value is None else str(value)


def _safe_request_id(value: Any) -> str | int | None:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return value


def _request_error(exc: ValidationError) -> DispatchError:
    errors = [err for err in exc.errors() if err["loc"]]
    fields = [str(err["loc"][0]) for err in errors]
    if "params" in fields:
        detail = next(err["msg"] for err in errors if err["loc"][0] == "params")
        return ParameterTypeError("params", "list or object", detail)
    return InternalError(
        f"Invalid dispatch request: {', '.join(sorted(set(fields)))}",
        metadata={"fields": fields},
    )


__all__ = ["BaseHandler"]

"""Tests for the dispatcher.

These tests verify:
- Successful dispatch with named and positional parameters
- Each failure stage yields the right error and final state
- Application failures never leak their message
- Observation events fire and listener failures never mask the outcome
"""

from __future__ import annotations

import threading
from typing import Any

import pytest

from rpc_dispatch import (
    BaseHandler,
    CallableLoader,
    DispatchEvents,
    DispatchRequest,
    DispatchState,
    ErrorCode,
    EventNames,
    ExposedError,
    HandlerBuilder,
)
from tests.handlers import example_actions


class TestDispatchSuccess:
    """Tests for successful dispatches."""

    def test_named_params(self, handler: BaseHandler):
        """Named parameters bind by name."""
        response = handler.dispatch(DispatchRequest(action="add", params={"a": 2, "b": 3}))

        assert response.ok
        assert response.result == 5
        assert response.error is None
        assert response.state is DispatchState.SUCCESS

    def test_positional_params(self, handler: BaseHandler):
        """Positional parameters bind in order."""
        assert handler.dispatch("add", [2, 3]).result == 5

    def test_tuple_params_shorthand(self, handler: BaseHandler):
        """The shorthand form accepts tuples."""
        assert handler.dispatch("add", (4, 5)).result == 9

    def test_default_used(self, handler: BaseHandler):
        """Defaults fill absent parameters."""
        assert handler.dispatch("greet", {"name": "Ada"}).result == "Hello, Ada"

    def test_result_extracted(self, handler: BaseHandler):
        """Return values are converted to plain data."""
        assert handler.dispatch("point", {"x": 1, "y": 2}).result == {"x": 1, "y": 2}

    def test_action_name_echoed(self, handler: BaseHandler):
        """The response carries the requested action name."""
        assert handler.dispatch("add", [1, 1]).action == "add"


class TestDispatchFailures:
    """Tests for failures at each dispatch stage."""

    def test_missing_parameter(self, handler: BaseHandler):
        """A missing parameter fails during binding and names the parameter."""
        response = handler.dispatch(DispatchRequest(action="add", params={"a": 2}))

        assert not response.ok
        assert response.error.code == ErrorCode.INVALID_PARAMS
        assert response.error.data == {"parameter": "b"}
        assert response.state is DispatchState.BINDING_PARAMETERS

    def test_unknown_action(self, handler: BaseHandler):
        """An unknown action fails during action resolution."""
        response = handler.dispatch("nope", {})

        assert response.error.code == ErrorCode.METHOD_NOT_FOUND
        assert response.error.data == {"action": "nope"}
        assert response.state is DispatchState.RESOLVING_ACTION

    def test_unresolvable_action(self, builder: HandlerBuilder, callable_loader: CallableLoader):
        """A target no resolver can handle fails during callable resolution."""
        callable_loader.add("ghost", "tests.handlers.example_actions.ghost")
        handler = builder.build_handler()

        response = handler.dispatch("ghost")

        assert response.error.code == ErrorCode.UNRESOLVABLE_ACTION
        assert response.state is DispatchState.RESOLVING_CALLABLE

    def test_type_error(self, handler: BaseHandler):
        """An uncoercible value is an invalid-params error."""
        response = handler.dispatch("add", {"a": "two", "b": 3})

        assert response.error.code == ErrorCode.INVALID_PARAMS
        assert response.error.data == {"parameter": "a", "expected": "int"}

    def test_unexpected_parameter(self, handler: BaseHandler):
        """Extra parameters are rejected under the default policy."""
        response = handler.dispatch("add", {"a": 1, "b": 2, "c": 3})

        assert response.error.data == {"parameters": ["c"]}

    def test_application_error_does_not_leak(self, handler: BaseHandler, rpc_logs: pytest.LogCaptureFixture):
        """Target failures are generic to clients but logged in full."""
        response = handler.dispatch("explode")

        assert response.error.code == ErrorCode.APPLICATION_ERROR
        assert response.error.message == "Application error"
        assert "db-primary" not in str(response.model_dump())
        assert response.state is DispatchState.INVOKING
        assert any("db-primary" in r.getMessage() for r in rpc_logs.records)

    def test_exposed_error_surfaces(self, builder: HandlerBuilder, callable_loader: CallableLoader):
        """ExposedError subclasses choose their client-facing error."""

        class Conflict(ExposedError):
            code = 409

        def reserve(seat: str) -> None:
            raise Conflict(f"Seat {seat} taken", data={"seat": seat})

        callable_loader.add("reserve", reserve)
        response = builder.build_handler().dispatch("reserve", ["12A"])

        assert response.error.code == 409
        assert response.error.message == "Seat 12A taken"
        assert response.error.data == {"seat": "12A"}

    def test_unextractable_result(self, builder: HandlerBuilder, callable_loader: CallableLoader):
        """A return value that cannot be converted is an internal error."""
        callable_loader.add("opaque", lambda: object())

        response = builder.build_handler().dispatch("opaque")

        assert response.error.code == ErrorCode.INTERNAL_ERROR
        assert response.error.message == "Internal error"

    def test_lazy_load_error_is_internal(self, builder: HandlerBuilder):
        """Conflicting loaders surface at first dispatch as an internal error."""
        builder.add_callable_handle().add("x", example_actions.add)
        builder.add_callable_handle().add("x", example_actions.greet)

        response = builder.build_handler().dispatch("x", [1, 2])

        assert response.error.code == ErrorCode.INTERNAL_ERROR
        assert response.error.data is None

    def test_absent_params_with_required_parameters(self, handler: BaseHandler):
        """Omitted params still have to satisfy required parameters."""
        response = handler.dispatch(DispatchRequest(action="add", params=None))

        assert response.error.code == ErrorCode.INVALID_PARAMS

    def test_failure_keeps_failing_state(self, handler: BaseHandler):
        """Failed responses report where they stopped; there is no catch-all error state."""
        requests = [("nope", {}), ("add", {"a": 1})]
        states = {handler.dispatch(name, params).state for name, params in requests}

        assert states == {DispatchState.RESOLVING_ACTION, DispatchState.BINDING_PARAMETERS}
        assert "error" not in {state.value for state in DispatchState}

    @pytest.mark.parametrize("params", ["2,3", {1: 2}, 42])
    def test_invalid_params_container(
        self,
        handler: BaseHandler,
        recorded_events: dict[str, list[Any]],
        params: Any,
    ):
        """Params that are neither a list nor an object are rejected, not raised."""
        response = handler.dispatch("add", params, request_id="r7")

        assert response.error.code == ErrorCode.INVALID_PARAMS
        assert response.error.data == {"parameter": "params", "expected": "list or object"}
        assert response.state is DispatchState.IDLE
        (event,) = recorded_events[EventNames.DISPATCH_ERROR]
        assert event.request_id == "r7"

    def test_invalid_request_id_is_dropped(self, handler: BaseHandler):
        """An unusable request id does not escape the dispatcher."""
        response = handler.dispatch("add", [1, 2], request_id=1.5)

        assert response.error.code == ErrorCode.INTERNAL_ERROR
        assert response.error.data is None

    def test_unprintable_application_exception(
        self,
        builder: HandlerBuilder,
        callable_loader: CallableLoader,
        events: DispatchEvents,
        recorded_events: dict[str, list[Any]],
        rpc_logs: pytest.LogCaptureFixture,
    ):
        """An exception whose str() raises is still translated and logged."""

        class Unprintable(Exception):
            def __str__(self) -> str:
                raise RuntimeError("cannot render")

        def fragile() -> None:
            raise Unprintable()

        callable_loader.add("fragile", fragile)
        builder.set_event_dispatcher(events)

        response = builder.build_handler().dispatch("fragile")

        assert response.error.code == ErrorCode.APPLICATION_ERROR
        assert len(recorded_events[EventNames.DISPATCH_ERROR]) == 1
        assert any("raised Unprintable" in r.getMessage() for r in rpc_logs.records)


class TestDispatchEvents:
    """Tests for observation events during dispatch."""

    def test_success_events(self, handler: BaseHandler, recorded_events: dict[str, list[Any]]):
        """pre and post fire with arguments and outcome."""
        handler.dispatch(DispatchRequest(action="add", params=[2, 3], request_id="r1"))

        (pre,) = recorded_events[EventNames.PRE_DISPATCH]
        (post,) = recorded_events[EventNames.POST_DISPATCH]
        assert pre.action == "add"
        assert pre.arguments == {"a": 2, "b": 3}
        assert pre.request_id == "r1"
        assert post.outcome == 5
        assert recorded_events[EventNames.DISPATCH_ERROR] == []

    def test_error_event(self, handler: BaseHandler, recorded_events: dict[str, list[Any]]):
        """error fires with the translated Error."""
        handler.dispatch("add", {"a": 1})

        (event,) = recorded_events[EventNames.DISPATCH_ERROR]
        assert event.error.data == {"parameter": "b"}
        assert recorded_events[EventNames.PRE_DISPATCH] == []

    def test_failing_listener_does_not_mask_success(
        self,
        handler: BaseHandler,
        events: DispatchEvents,
        rpc_logs: pytest.LogCaptureFixture,
    ):
        """A raising listener is logged and the response is unchanged."""

        def broken_listener(event):
            raise RuntimeError("listener bug")

        events.subscribe(EventNames.PRE_DISPATCH, broken_listener)
        events.subscribe(EventNames.POST_DISPATCH, broken_listener)

        response = handler.dispatch("add", [2, 3])

        assert response.ok
        assert response.result == 5
        assert any("broken_listener failed" in r.getMessage() for r in rpc_logs.records)

    def test_failing_listener_does_not_mask_error(self, handler: BaseHandler, events: DispatchEvents):
        """A raising error listener does not replace the original error."""

        def broken_listener(event):
            raise RuntimeError("listener bug")

        events.subscribe(EventNames.DISPATCH_ERROR, broken_listener)

        response = handler.dispatch("nope")

        assert response.error.code == ErrorCode.METHOD_NOT_FOUND


@pytest.mark.concurrency
class TestConcurrentDispatch:
    """Tests for concurrent use of one handler."""

    def test_parallel_dispatches_are_independent(self, handler: BaseHandler):
        """Concurrent requests each get their own result."""
        thread_count = 16
        barrier = threading.Barrier(thread_count)
        results: dict[int, Any] = {}
        lock = threading.Lock()

        def worker(n: int) -> None:
            barrier.wait()
            response = handler.dispatch("add", {"a": n, "b": n})
            with lock:
                results[n] = response.result

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == {n: 2 * n for n in range(thread_count)}
        assert handler.registry.build_count == 1

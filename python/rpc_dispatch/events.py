"""Observation events for dispatch passes.

This module provides the DispatchEvents class that wraps pyee's
EventEmitter so that logging, metrics or tracing code can observe every
dispatch without being part of it.

Listener failures are contained: a listener that raises is logged at WARN
level and the remaining listeners still run. Publishing never raises into
the dispatcher.

Example:
    >>> from rpc_dispatch.events import DispatchEvents, EventNames
    >>>
    >>> events = DispatchEvents()
    >>>
    >>> def on_error(event):
    ...     print(f"{event.action} failed with {event.error.code}")
    ...
    >>> events.subscribe(EventNames.DISPATCH_ERROR, on_error)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pyee.base import EventEmitter

from .logging import describe_exception, log_debug, log_warn


class EventNames:
    """Constants for event names published by the dispatcher.

    Attributes:
        PRE_DISPATCH: Emitted after parameters are bound, before invocation.
        POST_DISPATCH: Emitted after a successful invocation.
        DISPATCH_ERROR: Emitted when any stage of the dispatch fails.
    """

    PRE_DISPATCH = "dispatch.pre"
    POST_DISPATCH = "dispatch.post"
    DISPATCH_ERROR = "dispatch.error"


class _ContainedEmitter(EventEmitter):
    """EventEmitter that logs and swallows listener exceptions."""

    def _emit_run(
        self,
        f: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        try:
            f(*args, **kwargs)
        except Exception as e:
            listener_name = getattr(f, "__name__", repr(f))
            log_warn(
                f"DispatchEvents: Listener {listener_name} failed: {describe_exception(e)}",
                {"listener": listener_name, "error_type": type(e).__name__},
            )


class DispatchEvents:
    """Publish/subscribe hub for dispatch observation.

    Events:
        dispatch.pre: Parameters bound, about to invoke (DispatchEvent)
        dispatch.post: Invocation succeeded (DispatchEvent with outcome)
        dispatch.error: Dispatch failed (DispatchEvent with error)
    """

    def __init__(self) -> None:
        self._emitter = _ContainedEmitter()

    def subscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe to an event.

        Args:
            event: Event name to subscribe to.
            handler: Callback invoked with the event payload.
        """
        self._emitter.on(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed to {event}: {handler_name}")

    def subscribe_once(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe to an event for a single invocation."""
        self._emitter.once(event, handler)

    def unsubscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Unsubscribe from an event.

        Args:
            event: Event name to unsubscribe from.
            handler: The handler callback to remove.
        """
        self._emitter.remove_listener(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Unsubscribed from {event}: {handler_name}")

    def publish(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Publish an event to all subscribers.

        Never raises: listener exceptions are logged and skipped.

        Args:
            event: Event name to publish.
            *args: Positional arguments passed to handlers.
            **kwargs: Keyword arguments passed to handlers.
        """
        self._emitter.emit(event, *args, **kwargs)

    def listener_count(self, event: str) -> int:
        """Get the number of listeners for an event."""
        return len(self._emitter.listeners(event))

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        """Get all listeners for an event."""
        return list(self._emitter.listeners(event))

    def clear(self) -> None:
        """Remove all listeners."""
        self._emitter.remove_all_listeners()


__all__ = ["DispatchEvents", "EventNames"]

"""pytest configuration and fixtures for rpc_dispatch tests.

This module provides shared fixtures for testing the dispatcher, including
a fresh HandlerBuilder, a handler with example actions registered, and an
event hub with recording listeners.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from tests.handlers import example_actions

if TYPE_CHECKING:
    from rpc_dispatch import BaseHandler, CallableLoader, DispatchEvents, HandlerBuilder

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def rpc_dispatch_module():
    """Provide the rpc_dispatch module as a fixture."""
    import rpc_dispatch

    return rpc_dispatch


@pytest.fixture
def actions_dir() -> Path:
    """Directory holding the YAML action fixtures."""
    return FIXTURES_DIR / "actions"


@pytest.fixture
def builder() -> HandlerBuilder:
    """Provide a fresh HandlerBuilder with default configuration."""
    from rpc_dispatch import HandlerBuilder

    return HandlerBuilder()


@pytest.fixture
def callable_loader(builder: HandlerBuilder) -> CallableLoader:
    """Provide a CallableLoader registered on the builder with example actions."""
    loader = builder.add_callable_handle()
    loader.add("add", example_actions.add)
    loader.add("greet", example_actions.greet)
    loader.add("explode", example_actions.explode)
    loader.add("point", example_actions.make_point)
    return loader


@pytest.fixture
def events() -> DispatchEvents:
    """Provide a fresh event hub."""
    from rpc_dispatch import DispatchEvents

    return DispatchEvents()


@pytest.fixture
def handler(
    builder: HandlerBuilder,
    callable_loader: CallableLoader,
    events: DispatchEvents,
) -> BaseHandler:
    """Provide a built handler serving the example actions."""
    builder.set_event_dispatcher(events)
    return builder.build_handler()


@pytest.fixture
def recorded_events(events: DispatchEvents) -> dict[str, list[Any]]:
    """Subscribe recording listeners to every dispatch event."""
    from rpc_dispatch import EventNames

    recorded: dict[str, list[Any]] = {
        EventNames.PRE_DISPATCH: [],
        EventNames.POST_DISPATCH: [],
        EventNames.DISPATCH_ERROR: [],
    }
    for name, bucket in recorded.items():
        events.subscribe(name, bucket.append)
    return recorded


@pytest.fixture
def rpc_logs(caplog: pytest.LogCaptureFixture) -> Generator[pytest.LogCaptureFixture, None, None]:
    """Capture every record of the rpc_dispatch logger, including TRACE."""
    from rpc_dispatch.logging import LOGGER_NAME, TRACE

    logger = logging.getLogger(LOGGER_NAME)
    previous = logger.level
    caplog.set_level(TRACE, logger=LOGGER_NAME)
    yield caplog
    logger.setLevel(previous)


@pytest.fixture(autouse=True)
def _reset_calculator_instances() -> Generator[None, None, None]:
    example_actions.Calculator.instances = 0
    yield
    example_actions.Calculator.instances = 0


# Markers for test categorization
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "concurrency: marks tests that exercise concurrent access",
    )

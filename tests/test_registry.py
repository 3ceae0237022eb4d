"""Tests for the lazily built action registry.

These tests verify:
- The loader runs only on first access
- Lookups of unknown names raise ActionNotFoundError
- The snapshot is immutable and shared
- Concurrent first access runs the loader chain exactly once
"""

from __future__ import annotations

import threading
import time

import pytest

from rpc_dispatch import (
    Action,
    ActionNotFoundError,
    ActionRegistry,
    BaseLoader,
    CallableLoader,
    ChainLoader,
    LoadError,
)
from tests.handlers.example_actions import add, greet


class CountingLoader(BaseLoader):
    """Loader that counts how often it runs and is deliberately slow."""

    def __init__(self, delay: float = 0.0) -> None:
        self.calls = 0
        self._delay = delay
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "counting"

    def load(self) -> list[Action]:
        with self._lock:
            self.calls += 1
        time.sleep(self._delay)
        return [Action(name="add", target=add), Action(name="greet", target=greet)]


class FailingOnceLoader(BaseLoader):
    """Loader that fails on its first run only."""

    def __init__(self) -> None:
        self.calls = 0

    @property
    def name(self) -> str:
        return "failing_once"

    def load(self) -> list[Action]:
        self.calls += 1
        if self.calls == 1:
            raise LoadError("transient")
        return [Action(name="add", target=add)]


class TestActionRegistryBuild:
    """Tests for registry building."""

    def test_loader_not_run_until_first_access(self):
        """Creating a registry does not load actions."""
        loader = CountingLoader()
        registry = ActionRegistry(loader)

        assert not registry.is_built
        assert registry.build_count == 0
        assert loader.calls == 0

    def test_first_lookup_builds(self):
        """The first get() builds the registry."""
        loader = CountingLoader()
        registry = ActionRegistry(loader)

        action = registry.get("add")

        assert action.target is add
        assert registry.is_built
        assert loader.calls == 1

    def test_build_is_idempotent(self):
        """Repeated builds return the same snapshot without reloading."""
        loader = CountingLoader()
        registry = ActionRegistry(loader)

        first = registry.build()
        second = registry.build()
        registry.get("greet")
        registry.all()

        assert first is second
        assert loader.calls == 1
        assert registry.build_count == 1

    def test_snapshot_is_read_only(self):
        """The built mapping cannot be mutated."""
        registry = ActionRegistry(CountingLoader())
        snapshot = registry.build()

        with pytest.raises(TypeError):
            snapshot["new"] = Action(name="new", target=add)  # type: ignore[index]

    def test_failed_build_is_not_cached(self):
        """A loader failure propagates and the next access retries."""
        loader = FailingOnceLoader()
        registry = ActionRegistry(loader)

        with pytest.raises(LoadError):
            registry.build()
        assert not registry.is_built

        assert registry.get("add").target is add
        assert registry.build_count == 1

    def test_build_with_chain_loader(self):
        """The registry works with a chain of loaders."""
        first = CallableLoader("first")
        first.add("add", add)
        second = CallableLoader("second")
        second.add("greet", greet)

        registry = ActionRegistry(ChainLoader([first, second]))

        assert registry.names() == ["add", "greet"]
        assert registry.get("greet").loader == "second"


class TestActionRegistryLookup:
    """Tests for registry lookups."""

    @pytest.fixture
    def registry(self) -> ActionRegistry:
        return ActionRegistry(CountingLoader())

    def test_get_unknown_raises(self, registry: ActionRegistry):
        """Unknown names raise ActionNotFoundError naming the action."""
        with pytest.raises(ActionNotFoundError) as exc_info:
            registry.get("missing")

        assert exc_info.value.action == "missing"

    def test_has_and_contains(self, registry: ActionRegistry):
        """has() and ``in`` report registered names."""
        assert registry.has("add")
        assert "greet" in registry
        assert not registry.has("missing")
        assert "missing" not in registry

    def test_names_preserve_load_order(self, registry: ActionRegistry):
        """names() lists actions in load order."""
        assert registry.names() == ["add", "greet"]

    def test_iteration_and_len(self, registry: ActionRegistry):
        """The registry iterates over actions and reports its size."""
        assert len(registry) == 2
        assert [a.name for a in registry] == ["add", "greet"]


@pytest.mark.concurrency
class TestActionRegistryConcurrency:
    """Tests for concurrent first access."""

    @pytest.mark.parametrize("thread_count", [2, 8, 32])
    def test_concurrent_first_access_loads_once(self, thread_count: int):
        """N simultaneous first callers trigger exactly one loader run."""
        loader = CountingLoader(delay=0.05)
        registry = ActionRegistry(loader)
        barrier = threading.Barrier(thread_count)
        snapshots: list[object] = []
        snapshots_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            snapshot = registry.build()
            with snapshots_lock:
                snapshots.append(snapshot)

        threads = [threading.Thread(target=worker) for _ in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert loader.calls == 1
        assert registry.build_count == 1
        assert len(snapshots) == thread_count
        assert all(snapshot is snapshots[0] for snapshot in snapshots)

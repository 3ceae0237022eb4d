"""Action registry: the lazily built catalog of actions.

The registry runs its loader exactly once, on the first lookup or an
explicit ``build()``, and keeps the result as a read-only snapshot for the
lifetime of the dispatcher. Concurrent first-time callers are serialized
on a lock: one of them runs the loader chain, the others block until the
snapshot is published and then share it.

Example:
    >>> loader = CallableLoader()
    >>> loader.add("add", add)
    >>> registry = ActionRegistry(ChainLoader([loader]))
    >>> registry.get("add").name
    'add'
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import ActionNotFoundError
from .logging import log_info

if TYPE_CHECKING:
    from .action import Action
    from .loader.base_loader import BaseLoader


class ActionRegistry:
    """Lazily populated, immutable catalog of actions keyed by name."""

    def __init__(self, loader: BaseLoader) -> None:
        """Initialize the registry.

        Args:
            loader: Loader (usually a ChainLoader) producing the actions.
        """
        self._loader = loader
        self._actions: Mapping[str, Action] | None = None
        self._lock = threading.Lock()
        self._build_count = 0

    @property
    def loader(self) -> BaseLoader:
        return self._loader

    @property
    def is_built(self) -> bool:
        return self._actions is not None

    @property
    def build_count(self) -> int:
        """Number of times the loader chain actually ran (0 or 1)."""
        return self._build_count

    def build(self) -> Mapping[str, Action]:
        """Build the catalog if needed and return the snapshot.

        Idempotent: every call returns the same mapping object and the
        loader runs at most once. If the loader raises, nothing is cached
        and the error propagates.

        Returns:
            Read-only mapping of action name to Action.

        Raises:
            LoadError: If the loader chain reports conflicting actions.
        """
        actions = self._actions
        if actions is not None:
            return actions

        with self._lock:
            if self._actions is None:
                loaded = self._loader.load()
                self._build_count += 1
                self._actions = MappingProxyType({a.name: a for a in loaded})
                log_info(
                    f"ActionRegistry: Built with {len(loaded)} actions",
                    {"loader": self._loader.name},
                )
            return self._actions

    def get(self, name: str) -> Action:
        """Look up an action by name.

        Raises:
            ActionNotFoundError: If no action has that name.
        """
        action = self.build().get(name)
        if action is None:
            raise ActionNotFoundError(name)
        return action

    def has(self, name: str) -> bool:
        return name in self.build()

    def names(self) -> list[str]:
        """Action names in load order."""
        return list(self.build())

    def all(self) -> list[Action]:
        """All actions in load order."""
        return list(self.build().values())

    def __contains__(self, name: object) -> bool:
        return name in self.build()

    def __iter__(self) -> Iterator[Action]:
        return iter(self.build().values())

    def __len__(self) -> int:
        return len(self.build())


__all__ = ["ActionRegistry"]

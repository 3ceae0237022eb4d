"""Abstract base class for action loaders.

A loader produces a list of Actions from some source: explicit
registration, reflection over objects, or a YAML definition file. Loaders
are combined by the ChainLoader, which runs them in registration order.

Loading Contract:
1. name - Human-readable identifier for logging and collision reports
2. load() - Return the loader's actions in a stable order

Example Implementation:
    class StaticLoader(BaseLoader):
        @property
        def name(self) -> str:
            return "static"

        def load(self) -> list[Action]:
            return [Action(name="ping", target=lambda: "pong")]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..exceptions import AlreadyBuiltError

if TYPE_CHECKING:
    from ..action import Action


class BaseLoader(ABC):
    """Abstract base class for action loaders."""

    _loaded: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this loader (for logging/debugging).

        Returns:
            The loader name.
        """
        ...

    @abstractmethod
    def load(self) -> list[Action]:
        """Produce this loader's actions.

        Returns:
            Actions in a stable, deterministic order.
        """
        ...

    @property
    def is_loaded(self) -> bool:
        """True once the loader has been consumed by a chain."""
        return self._loaded

    def mark_loaded(self) -> None:
        """Freeze the loader; later registration calls are rejected."""
        self._loaded = True

    def _ensure_not_loaded(self) -> None:
        if self._loaded:
            raise AlreadyBuiltError(
                f"Loader '{self.name}' has already been loaded; register actions before the first dispatch"
            )

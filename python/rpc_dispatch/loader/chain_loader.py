"""Chain Loader - Ordered Action Loading.

The ChainLoader runs its loaders in registration order and concatenates
their actions. Registration order is the only ordering: there are no
priorities, so name-collision handling is reproducible across runs.

Collision Contract:
1. The same Action declared twice (equal definitions) is collapsed
2. CollisionPolicy.REJECT: conflicting definitions raise LoadError
3. CollisionPolicy.LAST_WINS: the later loader's definition replaces the
   earlier one (keeping the earlier position) and a warning is logged

Usage:
    chain = ChainLoader([callable_loader, yaml_loader])
    actions = chain.load()
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..exceptions import LoadError
from ..logging import log_debug, log_warn
from ..types import CollisionPolicy
from .base_loader import BaseLoader

if TYPE_CHECKING:
    from ..action import Action


class ChainLoader(BaseLoader):
    """Registration-ordered chain of action loaders.

    Attributes:
        loaders: Loaders in registration order.
        collision_policy: How duplicate action names are handled.
    """

    def __init__(
        self,
        loaders: Iterable[BaseLoader] = (),
        *,
        collision_policy: CollisionPolicy = CollisionPolicy.REJECT,
    ) -> None:
        """Initialize the chain.

        Args:
            loaders: Initial loaders, in order.
            collision_policy: Duplicate-name policy.
        """
        self._loaders: list[BaseLoader] = []
        self._collision_policy = CollisionPolicy(collision_policy)
        for loader in loaders:
            self.add_loader(loader)

    @property
    def name(self) -> str:
        return "chain"

    @property
    def collision_policy(self) -> CollisionPolicy:
        return self._collision_policy

    @property
    def loaders(self) -> list[BaseLoader]:
        return list(self._loaders)

    @property
    def loader_names(self) -> list[str]:
        """Names of loaders in registration order."""
        return [loader.name for loader in self._loaders]

    def add_loader(self, loader: BaseLoader) -> ChainLoader:
        """Append a loader to the chain.

        Adding the same loader object twice is a no-op.

        Args:
            loader: Loader to append.

        Returns:
            Self for method chaining.
        """
        self._ensure_not_loaded()
        if any(existing is loader for existing in self._loaders):
            return self
        self._loaders.append(loader)
        return self

    def load(self) -> list[Action]:
        """Run every loader in order and merge their actions.

        Returns:
            Merged actions in first-seen order.

        Raises:
            LoadError: On conflicting definitions under the reject policy.
        """
        self.mark_loaded()
        merged: dict[str, Action] = {}

        for loader in self._loaders:
            actions = loader.load()
            loader.mark_loaded()
            log_debug(
                f"ChainLoader: Loader '{loader.name}' produced {len(actions)} actions",
                {"loader": loader.name},
            )
            for action in actions:
                self._merge(merged, action, loader)

        return list(merged.values())

    def chain_info(self) -> list[dict[str, Any]]:
        """Get chain info for debugging."""
        return [
            {"name": loader.name, "loaded": loader.is_loaded}
            for loader in self._loaders
        ]

    def __len__(self) -> int:
        return len(self._loaders)

    def _merge(self, merged: dict[str, Action], action: Action, loader: BaseLoader) -> None:
        existing = merged.get(action.name)
        if existing is None:
            merged[action.name] = action
            return

        if existing == action:
            log_debug(f"ChainLoader: Identical redeclaration of '{action.name}' ignored")
            return

        if self._collision_policy is CollisionPolicy.LAST_WINS:
            log_warn(
                f"ChainLoader: Action '{action.name}' from '{existing.loader}' "
                f"overridden by '{loader.name}'",
                {"action": action.name, "loader": loader.name},
            )
            merged[action.name] = action
            return

        raise LoadError(
            f"Action '{action.name}' is defined by both '{existing.loader}' and '{loader.name}'",
            metadata={
                "action": action.name,
                "loaders": [existing.loader, loader.name],
            },
        )


__all__ = ["ChainLoader"]

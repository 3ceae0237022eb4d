"""Service-level documentation extraction.

The Extractor walks every action of the built registry, in registry order,
and collects their descriptions into a ServiceDescription. Actions that
cannot be resolved are listed under ``errors`` instead of aborting the
whole extraction.

Example:
    >>> extractor = builder.build_doc_extractor()
    >>> description = extractor.extract()
    >>> description.action_names()
    ['add', 'math.multiply']
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import DispatchError
from ..logging import log_info, log_warn
from ..types import ServiceDescription

if TYPE_CHECKING:
    from ..registry import ActionRegistry
    from .action_extractor import ActionExtractor


class Extractor:
    """Produces the catalog of every registered action."""

    def __init__(self, registry: ActionRegistry, action_extractor: ActionExtractor) -> None:
        self._registry = registry
        self._action_extractor = action_extractor

    def extract(self) -> ServiceDescription:
        """Describe every registered action.

        Returns:
            The service description.

        Raises:
            LoadError: If the registry cannot be built.
        """
        description = ServiceDescription()
        for action in self._registry.all():
            try:
                description.actions.append(self._action_extractor.extract(action))
            except DispatchError as e:
                log_warn(f"Extractor: Cannot describe '{action.name}': {e.message}", {"action": action.name})
                description.errors[action.name] = e.message

        log_info(
            f"Extractor: Described {len(description.actions)} actions",
            {"errors": len(description.errors)},
        )
        return description


__all__ = ["Extractor"]

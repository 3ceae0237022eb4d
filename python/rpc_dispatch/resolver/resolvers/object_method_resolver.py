"""Object method resolver for ``(object_or_class, "method")`` targets.

When the object is a class it is instantiated once, on first resolution,
and the instance is reused for every action targeting that class. A
custom factory can be supplied for classes whose constructor needs
arguments.

Example:
    >>> resolver = ObjectMethodResolver()
    >>> action = Action(name="math.add", target=(Calculator, "add"))
    >>> resolver.resolve(action).invocable()
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ...exceptions import UnresolvableActionError
from ...logging import log_debug, log_warn
from ..base_resolver import BaseResolver

if TYPE_CHECKING:
    from ...action import Action, CallableBinding


class ObjectMethodResolver(BaseResolver):
    """Resolver for methods on objects or lazily instantiated classes.

    Thread-safe: concurrent first resolutions of the same class create a
    single instance.
    """

    def __init__(
        self,
        factory: Callable[[type], Any] | None = None,
        name: str = "object_method",
    ) -> None:
        """Initialize the resolver.

        Args:
            factory: Creates instances of target classes. Defaults to
                calling the class with no arguments.
            name: Resolver name for identification.
        """
        self._factory = factory
        self._name = name
        self._instances: dict[type, Any] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def supports(self, action: Action) -> bool:
        return action.target_kind() == "object_method"

    def resolve(self, action: Action) -> CallableBinding:
        owner, method_name = action.target
        instance = self._instance_for(action, owner) if isinstance(owner, type) else owner

        method = getattr(instance, method_name, None)
        if method is None or not callable(method):
            raise UnresolvableActionError(
                action.name,
                f"{type(instance).__name__} has no callable '{method_name}'",
            )

        return self.bind(action, method)

    def _instance_for(self, action: Action, owner: type) -> Any:
        instance = self._instances.get(owner)
        if instance is not None:
            return instance

        with self._lock:
            instance = self._instances.get(owner)
            if instance is None:
                instance = self._instantiate(action, owner)
                self._instances[owner] = instance
        return instance

    def _instantiate(self, action: Action, owner: type) -> Any:
        try:
            instance = self._factory(owner) if self._factory else owner()
        except Exception as e:
            log_warn(
                f"ObjectMethodResolver: Failed to instantiate {owner.__name__}: {e}",
                {"action": action.name},
            )
            raise UnresolvableActionError(
                action.name, f"cannot instantiate {owner.__name__}"
            ) from e

        log_debug(f"ObjectMethodResolver: Instantiated {owner.__name__}")
        return instance

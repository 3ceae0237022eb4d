"""Callable loader for explicitly registered actions.

This loader holds actions registered one by one in code: plain functions,
lambdas, bound methods or any other target a resolver understands.

Example:
    >>> loader = CallableLoader()
    >>> loader.add("add", lambda a, b: a + b)
    >>>
    >>> @loader.register("greet", summary="Say hello")
    ... def greet(name: str) -> str:
    ...     return f"Hello, {name}"
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from ...action import Action, ParameterDescriptor, get_action_meta
from ...exceptions import LoadError
from ..base_loader import BaseLoader

F = TypeVar("F", bound=Callable[..., Any])


class CallableLoader(BaseLoader):
    """Loader for explicitly registered action targets.

    Actions are returned in registration order. Registering the same name
    twice in one loader is an error; cross-loader duplicates are handled by
    the ChainLoader's collision policy.
    """

    def __init__(self, name: str = "callable") -> None:
        """Initialize the loader.

        Args:
            name: Loader name for identification.
        """
        self._name = name
        self._actions: dict[str, Action] = {}

    @property
    def name(self) -> str:
        return self._name

    def add(
        self,
        name: str,
        target: Any,
        *,
        parameters: Sequence[ParameterDescriptor] | None = None,
        summary: str | None = None,
        description: str | None = None,
        resolver: str | None = None,
    ) -> CallableLoader:
        """Register an action target under a name.

        Args:
            name: Action name.
            target: Function, bound method, ``(object, "method")`` pair or
                dotted import path.
            parameters: Explicit parameter shape.
            summary: One-line documentation.
            description: Longer documentation.
            resolver: Resolver hint.

        Returns:
            Self for method chaining.

        Raises:
            AlreadyBuiltError: If the loader was already loaded.
            LoadError: If the name is already registered in this loader.
        """
        self._ensure_not_loaded()
        if not name:
            raise LoadError("Action name must not be empty")
        if name in self._actions:
            raise LoadError(
                f"Action '{name}' is already registered in loader '{self._name}'",
                metadata={"action": name, "loaders": [self._name]},
            )

        self._actions[name] = Action(
            name=name,
            target=target,
            parameters=tuple(parameters) if parameters is not None else None,
            summary=summary,
            description=description,
            resolver=resolver,
            loader=self._name,
        )
        return self

    def add_function(self, func: Callable[..., Any]) -> CallableLoader:
        """Register a function using its ``action`` decorator metadata.

        Falls back to the function's ``__name__`` when it is undecorated.
        """
        meta = get_action_meta(func)
        if meta is None:
            return self.add(func.__name__, func)
        return self.add(
            meta.name or func.__name__,
            func,
            parameters=meta.parameters,
            summary=meta.summary,
            description=meta.description,
        )

    def register(
        self,
        name: str | None = None,
        *,
        parameters: Sequence[ParameterDescriptor] | None = None,
        summary: str | None = None,
        description: str | None = None,
    ) -> Callable[[F], F]:
        """Decorator form of ``add``.

        Example:
            >>> @loader.register("math.mul")
            ... def mul(a: int, b: int) -> int:
            ...     return a * b
        """

        def decorator(func: F) -> F:
            self.add(
                name or func.__name__,
                func,
                parameters=parameters,
                summary=summary,
                description=description,
            )
            return func

        return decorator

    def remove(self, name: str) -> bool:
        """Unregister an action.

        Returns:
            True if the action was removed, False if not found.
        """
        self._ensure_not_loaded()
        return self._actions.pop(name, None) is not None

    def names(self) -> list[str]:
        return list(self._actions)

    def load(self) -> list[Action]:
        return list(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)

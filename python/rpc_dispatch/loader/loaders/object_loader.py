"""Object loader: actions discovered by reflection over objects and classes.

Scans registered instances or classes for methods marked with the
``action`` decorator and produces one Action per marked method, targeting
the ``(object_or_class, "method_name")`` pair. Classes are instantiated
later, by the ObjectMethodResolver, not at load time.

Example:
    >>> class Calculator:
    ...     @action("math.add")
    ...     def add(self, a: int, b: int) -> int:
    ...         return a + b
    >>>
    >>> loader = ObjectLoader()
    >>> loader.add(Calculator)
    >>> [a.name for a in loader.load()]
    ['math.add']
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from typing import Any

from ...action import Action, get_action_meta
from ...exceptions import LoadError
from ...logging import log_debug
from ..base_loader import BaseLoader


class ObjectLoader(BaseLoader):
    """Loader that reflects over objects for ``action``-marked methods.

    Objects are scanned in registration order; methods within one object in
    definition order, so the produced action order is deterministic.
    """

    def __init__(self, name: str = "object") -> None:
        """Initialize the loader.

        Args:
            name: Loader name for identification.
        """
        self._name = name
        self._entries: list[tuple[Any, str, tuple[str, ...] | None]] = []

    @property
    def name(self) -> str:
        return self._name

    def add(
        self,
        obj: Any,
        *,
        prefix: str = "",
        methods: Iterable[str] | None = None,
    ) -> ObjectLoader:
        """Register an instance or class for scanning.

        Args:
            obj: Instance or class to scan.
            prefix: Prepended to every produced action name.
            methods: Explicit public method names to expose, instead of
                scanning for ``action`` markers. Names become
                ``prefix + method_name``.

        Returns:
            Self for method chaining.
        """
        self._ensure_not_loaded()
        selected = tuple(methods) if methods is not None else None
        if selected is not None:
            owner = obj if isinstance(obj, type) else type(obj)
            missing = [m for m in selected if not callable(getattr(owner, m, None))]
            if missing:
                raise LoadError(
                    f"{owner.__name__} has no callable methods: {', '.join(missing)}",
                    metadata={"methods": missing},
                )
        self._entries.append((obj, prefix, selected))
        return self

    def load(self) -> list[Action]:
        actions: list[Action] = []
        seen: set[str] = set()

        for obj, prefix, selected in self._entries:
            for action in self._scan(obj, prefix, selected):
                if action.name in seen:
                    raise LoadError(
                        f"Action '{action.name}' is declared twice in loader '{self._name}'",
                        metadata={"action": action.name, "loaders": [self._name]},
                    )
                seen.add(action.name)
                actions.append(action)

        log_debug(f"ObjectLoader: Discovered {len(actions)} actions", {"loader": self._name})
        return actions

    def _scan(self, obj: Any, prefix: str, selected: tuple[str, ...] | None) -> list[Action]:
        owner = obj if isinstance(obj, type) else type(obj)

        if selected is not None:
            return [
                Action(
                    name=f"{prefix}{method_name}",
                    target=(obj, method_name),
                    summary=_first_line(getattr(owner, method_name)),
                    loader=self._name,
                )
                for method_name in selected
            ]

        actions: list[Action] = []
        for attr_name, member in _members_in_definition_order(owner):
            meta = get_action_meta(member)
            if meta is None:
                continue
            actions.append(
                Action(
                    name=f"{prefix}{meta.name or attr_name}",
                    target=(obj, attr_name),
                    parameters=meta.parameters,
                    summary=meta.summary or _first_line(member),
                    description=meta.description,
                    loader=self._name,
                )
            )
        return actions


def _members_in_definition_order(owner: type) -> list[tuple[str, Any]]:
    """Collect functions across the MRO, base classes first, without duplicates."""
    members: dict[str, Any] = {}
    for klass in reversed(owner.__mro__):
        if klass is object:
            continue
        for attr_name, value in vars(klass).items():
            if isinstance(value, (staticmethod, classmethod)):
                value = value.__func__
            if inspect.isfunction(value):
                members[attr_name] = value
    return list(members.items())


def _first_line(member: Any) -> str | None:
    doc = inspect.getdoc(member)
    if not doc:
        return None
    return doc.strip().splitlines()[0]

"""Import path resolver for dotted-string targets.

Resolves targets like ``"myapp.math.add"`` (module function) or
``"myapp.services.Calculator.add"`` (method on a class) using
``importlib``. The longest importable module prefix is imported and the
remaining components are looked up as attributes. When the final attribute
is an instance method of a class, the class is instantiated once with no
arguments and the bound method is used.

Example:
    >>> resolver = ImportPathResolver()
    >>> binding = resolver.resolve(Action(name="join", target="os.path.join"))
    >>> binding.invocable("a", "b")
    'a/b'
"""

from __future__ import annotations

import importlib
import inspect
import re
import threading
from types import ModuleType
from typing import TYPE_CHECKING, Any

from ...exceptions import UnresolvableActionError
from ..base_resolver import BaseResolver

if TYPE_CHECKING:
    from ...action import Action, CallableBinding


class ImportPathResolver(BaseResolver):
    """Resolver that imports dotted-path targets."""

    # module.path.attribute with at least one dot
    PATH_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)+$")

    def __init__(self, name: str = "import_path") -> None:
        self._name = name
        self._instances: dict[type, Any] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def supports(self, action: Action) -> bool:
        return isinstance(action.target, str) and bool(self.PATH_PATTERN.match(action.target))

    def resolve(self, action: Action) -> CallableBinding:
        module, remainder = self._import_longest_prefix(action)

        owner: Any = None
        obj: Any = module
        for part in remainder:
            owner = obj
            try:
                obj = getattr(obj, part)
            except AttributeError:
                raise UnresolvableActionError(
                    action.name, f"'{action.target}' has no attribute '{part}'"
                ) from None

        if isinstance(owner, type) and _is_instance_method(owner, remainder[-1]):
            obj = getattr(self._instance_for(action, owner), remainder[-1])

        if not callable(obj) or isinstance(obj, type):
            raise UnresolvableActionError(action.name, f"'{action.target}' is not a function")

        return self.bind(action, obj)

    def _import_longest_prefix(self, action: Action) -> tuple[ModuleType, list[str]]:
        parts = action.target.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_path = ".".join(parts[:split])
            try:
                return importlib.import_module(module_path), parts[split:]
            except ModuleNotFoundError as e:
                # Only keep searching when the missing module is the prefix itself
                if e.name and not module_path.startswith(e.name):
                    raise UnresolvableActionError(action.name, str(e)) from e
                continue
            except Exception as e:
                raise UnresolvableActionError(
                    action.name, f"importing '{module_path}' failed"
                ) from e

        raise UnresolvableActionError(action.name, f"no importable module in '{action.target}'")

    def _instance_for(self, action: Action, owner: type) -> Any:
        with self._lock:
            instance = self._instances.get(owner)
            if instance is None:
                try:
                    instance = owner()
                except Exception as e:
                    raise UnresolvableActionError(
                        action.name, f"cannot instantiate {owner.__name__}"
                    ) from e
                self._instances[owner] = instance
            return instance


def _is_instance_method(owner: type, attr: str) -> bool:
    raw = inspect.getattr_static(owner, attr, None)
    return inspect.isfunction(raw)

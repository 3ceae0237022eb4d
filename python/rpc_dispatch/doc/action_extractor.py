"""Describes single actions for documentation.

The ActionExtractor resolves an action through the same ChainResolver the
dispatcher uses and asks the same ParameterExtractor for its parameter
shape, so a described action always matches what a request must supply.
Nothing is ever invoked.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from ..action import MISSING
from ..parameters.signature import type_name
from ..types import ActionDescription, ParameterDescription

if TYPE_CHECKING:
    from ..action import Action, ParameterDescriptor
    from ..parameters import ParameterExtractor
    from ..resolver import ChainResolver


class ActionExtractor:
    """Builds an ActionDescription for one action."""

    def __init__(self, resolver: ChainResolver, parameter_extractor: ParameterExtractor) -> None:
        self._resolver = resolver
        self._parameter_extractor = parameter_extractor

    def extract(self, action: Action) -> ActionDescription:
        """Describe an action.

        Raises:
            UnresolvableActionError: If the action cannot be resolved.
        """
        binding = self._resolver.resolve(action)
        shape = self._parameter_extractor.describe(binding)

        return ActionDescription(
            name=action.name,
            summary=action.summary or _docstring_summary(binding.invocable),
            description=action.description,
            parameters=[_describe_parameter(p) for p in shape if not p.is_variadic],
            returns=type_name(binding.returns),
            resolver=binding.resolver,
        )


def _describe_parameter(descriptor: ParameterDescriptor) -> ParameterDescription:
    return ParameterDescription(
        name=descriptor.name,
        type=type_name(descriptor.annotation),
        required=descriptor.required,
        default=None if descriptor.default is MISSING else descriptor.default,
        description=descriptor.description,
    )


def _docstring_summary(invocable: Any) -> str | None:
    if not (inspect.isfunction(invocable) or inspect.ismethod(invocable)):
        return None
    doc = inspect.getdoc(invocable)
    if not doc:
        return None
    for line in doc.strip().splitlines():
        if line.strip():
            return line.strip()
    return None


__all__ = ["ActionExtractor"]

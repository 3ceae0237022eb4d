"""Parameter resolver and extractor contracts.

Resolving Contract:
    bind(shape, raw_params) -> BoundArguments
    Turns raw request parameters (positional list or name-keyed mapping)
    into arguments for one invocation, raising ParameterError subclasses.

Extracting Contract:
    describe(binding) -> parameter shape
    Describes what an invocable expects without invoking it. Used for
    documentation; must be safe to call on every action ahead of requests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..action import BoundArguments, CallableBinding, ParameterDescriptor


class ParameterResolver(ABC):
    """Binds raw request parameters to a parameter shape."""

    @abstractmethod
    def bind(
        self,
        shape: Sequence[ParameterDescriptor],
        raw_params: Sequence[Any] | Mapping[str, Any] | None,
    ) -> BoundArguments:
        """Produce the argument list for one invocation.

        Args:
            shape: Ordered parameter descriptors of the invocable.
            raw_params: Positional list, name-keyed mapping, or None.

        Returns:
            Bound arguments ready for invocation.

        Raises:
            MissingParameterError: A required parameter is absent.
            ParameterTypeError: A value cannot be coerced to its type.
            UnexpectedParameterError: Undeclared parameters under the
                strict policy.
        """
        ...


class ParameterExtractor(ABC):
    """Describes the parameters an invocable expects."""

    @abstractmethod
    def describe(self, binding: CallableBinding) -> tuple[ParameterDescriptor, ...]:
        """Return the parameter shape for a binding.

        Must not invoke the target.
        """
        ...

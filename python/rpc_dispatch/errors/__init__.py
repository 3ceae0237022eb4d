"""Error translation for rpc-dispatch.

Exceptions caught at the dispatcher boundary are turned into client-safe
Error objects by a chain of factories. User factories come first, the
built-in factories last, and anything unmatched becomes a generic
InternalError.

Example:
    >>> from rpc_dispatch.errors import Errors, DispatchErrorFactory
    >>>
    >>> errors = Errors([DispatchErrorFactory()])
    >>> errors.translate(ActionNotFoundError("missing")).code
    -32601
"""

from __future__ import annotations

from .base_factory import BaseErrorFactory, unwrap
from .chain import Errors
from .factories import (
    DispatchErrorFactory,
    ExceptionMappingFactory,
    ExposedErrorFactory,
    internal_error,
)

__all__ = [
    "BaseErrorFactory",
    "DispatchErrorFactory",
    "Errors",
    "ExceptionMappingFactory",
    "ExposedErrorFactory",
    "internal_error",
    "unwrap",
]

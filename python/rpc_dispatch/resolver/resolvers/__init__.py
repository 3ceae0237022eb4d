"""Built-in resolver implementations.

- CallableResolver: targets that are already callable
- ObjectMethodResolver: ``(object_or_class, "method")`` pairs
- ImportPathResolver: dotted import path strings
"""

from __future__ import annotations

from .callable_resolver import CallableResolver
from .import_path_resolver import ImportPathResolver
from .object_method_resolver import ObjectMethodResolver

__all__ = [
    "CallableResolver",
    "ImportPathResolver",
    "ObjectMethodResolver",
]

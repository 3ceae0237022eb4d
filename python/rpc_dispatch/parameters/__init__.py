"""Parameter binding and description.

ParameterResolver binds raw request parameters to an invocable's parameter
shape; ParameterExtractor describes that shape for documentation. The
built-in SignatureParameterResolver implements both from the same source,
so documented parameters always match what a request must supply.
"""

from __future__ import annotations

from .base import ParameterExtractor, ParameterResolver
from .signature import (
    OPAQUE_SHAPE,
    SignatureParameterResolver,
    extract_shape,
    return_annotation,
    shape_for,
    type_name,
)

__all__ = [
    "ParameterExtractor",
    "ParameterResolver",
    "SignatureParameterResolver",
    "OPAQUE_SHAPE",
    "extract_shape",
    "return_annotation",
    "shape_for",
    "type_name",
]

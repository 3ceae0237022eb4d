"""Built-in loader implementations.

- CallableLoader: explicit registration in code
- ObjectLoader: reflection over ``action``-marked methods
- YamlLoader: declarative YAML definition files
"""

from __future__ import annotations

from .callable_loader import CallableLoader
from .object_loader import ObjectLoader
from .yaml_loader import YamlLoader

__all__ = [
    "CallableLoader",
    "ObjectLoader",
    "YamlLoader",
]

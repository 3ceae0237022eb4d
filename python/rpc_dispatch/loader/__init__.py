r"""Action loader infrastructure.

Loaders produce Actions; the ChainLoader runs them in registration order
and merges the results under a collision policy.

Built-in Loaders:
- CallableLoader: functions and other targets registered in code
- ObjectLoader: methods marked with ``@action`` on objects or classes
- YamlLoader: YAML definition files naming import paths

Custom Loaders:
Extend BaseLoader:

    from rpc_dispatch.loader import BaseLoader

    class PluginLoader(BaseLoader):
        @property
        def name(self) -> str:
            return "plugins"

        def load(self) -> list[Action]:
            return [Action(name=p.name, target=p.run) for p in discover_plugins()]
"""

from __future__ import annotations

from .base_loader import BaseLoader
from .chain_loader import ChainLoader
from .loaders import CallableLoader, ObjectLoader, YamlLoader

__all__ = [
    "BaseLoader",
    "ChainLoader",
    "CallableLoader",
    "ObjectLoader",
    "YamlLoader",
]

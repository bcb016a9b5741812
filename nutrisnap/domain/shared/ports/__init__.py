"""Domain ports (interfaces for infrastructure adapters)."""

from nutrisnap.domain.shared.ports.keyed_store import IKeyedStore

__all__ = [
    "IKeyedStore",
]

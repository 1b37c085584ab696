"""Storage adapters for the ranged ammunition system."""

from ranged_ammo.storage.memory import InMemoryPersistence, InMemoryTemplateStore

__all__ = [
    "InMemoryPersistence",
    "InMemoryTemplateStore",
]

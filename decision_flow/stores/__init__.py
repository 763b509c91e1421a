"""Remote flow store implementations"""

from .base_store import BaseFlowStore
from .http_store import HttpFlowStore
from .memory_store import InMemoryFlowStore

def get_store(store_name: str, **kwargs) -> BaseFlowStore:
    """Factory function to get a flow store instance.

    Args:
        store_name: Name of the store backend ('http', 'memory')
        **kwargs: Additional arguments for the store

    Returns:
        Store instance

    Raises:
        ValueError: If the backend is not supported
    """
    store_name = store_name.lower()

    if store_name == "http":
        return HttpFlowStore(**kwargs)
    elif store_name == "memory":
        return InMemoryFlowStore()
    else:
        raise ValueError(f"Unknown store backend: {store_name}")

__all__ = [
    "BaseFlowStore",
    "HttpFlowStore",
    "InMemoryFlowStore",
    "get_store",
]

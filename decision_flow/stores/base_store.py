# decision_flow/stores/base_store.py
"""Base interface for remote flow stores."""

from abc import ABC, abstractmethod

from ..core.data_models import Flow, SavedFlow, StoredFlow


class BaseFlowStore(ABC):
    """Abstract base class for flow stores."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @abstractmethod
    async def get_flow(self, flow_id: str) -> StoredFlow:
        """
        Fetch a previously saved flow.

        Args:
            flow_id: Identifier assigned by the store on first save

        Returns:
            The stored flow, with ``flow_id`` set to the store's identifier

        Raises:
            FlowNotFoundError: If the store has no such flow
            NetworkFailureError: If the request cannot complete
            ServerError: If the store answers with an error or a malformed body
        """
        pass

    @abstractmethod
    async def save_flow(self, flow: Flow) -> SavedFlow:
        """
        Create or update a flow.

        A flow without ``id`` creates a new record; the returned ``SavedFlow.id``
        is the identifier to use for subsequent saves.
        """
        pass

    async def close(self):
        """Close any open connections."""
        pass

# decision_flow/core/synchronizer.py
"""Keeps the in-memory graph in step with the remote flow store."""

import asyncio
from enum import Enum
from typing import Optional
from loguru import logger

from .data_models import Flow, SavedFlow
from .dispatcher import MutationDispatcher
from .exceptions import FlowStoreError
from ..stores.base_store import BaseFlowStore


class LoadState(str, Enum):
    """States of the load cycle driven by the governing identifier."""
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class PersistenceSynchronizer:
    """Loads flows by identifier and saves the current model.

    ``flow_id`` is the governing identifier: changing it triggers a load, and
    saves target it. Loads are tagged with a sequence number at issue time;
    a response that arrives after a newer load was issued is discarded.
    Saves are serialized so a second save always carries the identifier the
    store assigned to the first.
    """

    def __init__(
        self,
        store: BaseFlowStore,
        dispatcher: MutationDispatcher,
        flow_id: Optional[str] = None
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.flow_id = flow_id or None

        self.state = LoadState.IDLE
        self.last_error: Optional[FlowStoreError] = None
        self.last_message: Optional[str] = None
        self.is_saving = False

        self._load_seq = 0
        self._save_lock = asyncio.Lock()

    @property
    def model(self):
        return self.dispatcher.model

    async def mount(self) -> Optional[Flow]:
        """Initial load for a caller-supplied identifier."""
        return await self.load(self.flow_id)

    async def set_flow_id(self, flow_id: Optional[str]) -> Optional[Flow]:
        """Change the governing identifier, loading the new flow.

        Clearing the identifier loads nothing, but the next save creates a
        new record and any load still in flight becomes stale.
        """
        flow_id = flow_id or None
        if flow_id == self.flow_id:
            return None
        if flow_id is None:
            logger.info(f"Detached from flow {self.flow_id}")
            self.flow_id = None
            self._load_seq += 1
            return None
        return await self.load(flow_id)

    async def load(self, flow_id: Optional[str]) -> Optional[Flow]:
        """
        Fetch a flow and replace the model with it.

        Args:
            flow_id: Identifier to load; becomes the governing identifier

        Returns:
            Snapshot of the loaded flow, or None if there was nothing to load,
            the load failed, or a newer load superseded it
        """
        if not flow_id:
            return None

        self.flow_id = flow_id
        self._load_seq += 1
        seq = self._load_seq
        self._set_state(LoadState.LOADING)
        logger.info(f"Loading flow {flow_id}")

        try:
            stored = await self.store.get_flow(flow_id)
        except FlowStoreError as e:
            if self._is_stale(seq, flow_id):
                logger.warning(f"Ignoring failed load of superseded flow {flow_id}: {e}")
                return None
            self._fail(flow_id, e)
            return None

        if self._is_stale(seq, flow_id):
            logger.warning(f"Discarding stale response for flow {flow_id}")
            return None

        self.dispatcher.replace_flow(stored.nodes, stored.edges)
        self.flow_id = stored.flow_id
        self.last_error = None
        self._set_state(LoadState.LOADED)
        logger.info(
            f"Loaded flow {self.flow_id}: {len(self.model.nodes)} nodes, "
            f"{len(self.model.edges)} edges"
        )
        return self.model.to_flow(self.flow_id)

    async def save(self) -> SavedFlow:
        """
        Save the current model under the governing identifier.

        Returns:
            The store's acknowledgement, including its message

        Raises:
            FlowStoreError: If the save fails; model and identifier are left as they were
        """
        async with self._save_lock:
            self.is_saving = True
            try:
                flow = self.model.to_flow(self.flow_id)
                saved = await self.store.save_flow(flow)
            except FlowStoreError as e:
                self.last_error = e
                logger.error(f"Error saving flow {self.flow_id or '(new)'}: {e}")
                raise
            finally:
                self.is_saving = False

            if saved.id and saved.id != self.flow_id:
                logger.info(f"Store assigned id {saved.id}")
                self.flow_id = saved.id

            self.last_message = saved.message
            logger.info(f"Saved flow {self.flow_id}: {saved.message}")
            return saved

    def _is_stale(self, seq: int, flow_id: str) -> bool:
        return seq != self._load_seq or flow_id != self.flow_id

    def _fail(self, flow_id: str, error: FlowStoreError):
        self.last_error = error
        self._set_state(LoadState.FAILED)
        logger.error(f"Error fetching flow {flow_id}: {error}")
        self._set_state(LoadState.IDLE)

    def _set_state(self, state: LoadState):
        logger.debug(f"Load state {self.state.value} -> {state.value}")
        self.state = state

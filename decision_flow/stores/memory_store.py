# decision_flow/stores/memory_store.py
"""In-process flow store with the same contract as the HTTP store."""

import asyncio
import copy
import uuid
from typing import Any, Dict
from loguru import logger

from .base_store import BaseFlowStore
from ..core.data_models import Flow, SavedFlow, StoredFlow
from ..core.exceptions import FlowNotFoundError


class InMemoryFlowStore(BaseFlowStore):
    """Keeps saved flows in a dictionary, keyed like the remote store.

    Records hold the serialized payload, so later edits to the editor's
    model never reach a saved copy.
    """

    def __init__(self, latency: float = 0.0):
        self.records: Dict[str, Dict[str, Any]] = {}
        self.latency = latency
        self.save_count = 0
        self._lock = asyncio.Lock()

    async def get_flow(self, flow_id: str) -> StoredFlow:
        await self._simulate_latency()
        async with self._lock:
            record = self.records.get(flow_id)
            if record is None:
                raise FlowNotFoundError(f"Store has no flow '{flow_id}'", 404)
            body = copy.deepcopy(record)

        body["_id"] = flow_id
        return StoredFlow.model_validate(body)

    async def save_flow(self, flow: Flow) -> SavedFlow:
        await self._simulate_latency()
        payload = flow.to_payload()
        async with self._lock:
            self.save_count += 1
            flow_id = payload.pop("id") or uuid.uuid4().hex[:24]
            created = flow_id not in self.records
            self.records[flow_id] = copy.deepcopy(payload)

        message = "Flow saved successfully" if created else "Flow updated successfully"
        logger.debug(f"{message}: {flow_id}")
        return SavedFlow(id=flow_id, message=message)

    async def _simulate_latency(self):
        if self.latency:
            await asyncio.sleep(self.latency)

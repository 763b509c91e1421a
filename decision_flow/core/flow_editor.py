# decision_flow/core/flow_editor.py
"""Editor session: wires the graph model, dispatcher, synchronizer and store."""

import random
from typing import Any, Dict, List, Optional, Tuple, Union
from loguru import logger

from .connection_resolver import ConnectionResolver
from .data_models import ConnectionAttempt, Edge, EdgeChange, Flow, Node, NodeChange, SavedFlow
from .dispatcher import MutationDispatcher
from .exceptions import GraphError
from .graph_model import GraphModel
from .synchronizer import PersistenceSynchronizer
from ..config.schemas import EditorConfig
from ..stores import get_store
from ..stores.base_store import BaseFlowStore


class FlowEditor:
    """One editing session over one flow.

    The layout surface feeds ``on_nodes_change``, ``on_edges_change`` and
    ``on_connect``; the toolbar calls ``add_question`` and ``save``;
    ``render`` returns what the surface should draw.
    """

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        store: Optional[BaseFlowStore] = None,
        flow_id: Optional[str] = None,
        rng: Optional[random.Random] = None
    ):
        self.config = config or EditorConfig.default()
        self.store = store or self._create_store()

        self.model = GraphModel(
            defaults=self.config.editor,
            placeholder=self.config.placeholder,
            rng=rng
        )
        self.dispatcher = MutationDispatcher(self.model, ConnectionResolver())
        self.synchronizer = PersistenceSynchronizer(self.store, self.dispatcher, flow_id)

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _create_store(self) -> BaseFlowStore:
        store_config = self.config.store
        if store_config.backend == "memory":
            return get_store("memory")
        return get_store(
            "http",
            base_url=store_config.base_url,
            timeout=store_config.timeout,
            max_retries=store_config.max_retries
        )

    @property
    def flow_id(self) -> Optional[str]:
        return self.synchronizer.flow_id

    @property
    def is_saving(self) -> bool:
        return self.synchronizer.is_saving

    # Toolbar

    def add_question(self, label: Optional[str] = None, responses: Optional[List[str]] = None) -> Node:
        return self.dispatcher.add_node(label=label, responses=responses)

    async def save(self) -> SavedFlow:
        return await self.synchronizer.save()

    # Identity

    async def mount(self) -> Optional[Flow]:
        return await self.synchronizer.mount()

    async def open_flow(self, flow_id: Optional[str]) -> Optional[Flow]:
        return await self.synchronizer.set_flow_id(flow_id)

    # Layout surface

    def render(self) -> Tuple[List[Node], List[Edge]]:
        return self.model.render_nodes(), list(self.model.edges)

    def on_nodes_change(self, changes: List[Union[NodeChange, Dict[str, Any]]]):
        self.dispatcher.apply_node_changes(changes)

    def on_edges_change(self, changes: List[Union[EdgeChange, Dict[str, Any]]]):
        self.dispatcher.apply_edge_changes(changes)

    def on_connect(self, attempt: Union[ConnectionAttempt, Dict[str, Any]]) -> Optional[Edge]:
        """Resolve a connection gesture; rejected gestures are logged, not raised."""
        try:
            return self.dispatcher.connect(attempt)
        except GraphError as e:
            logger.warning(f"Connection rejected: {e}")
            return None

    def snapshot(self) -> Flow:
        return self.model.to_flow(self.flow_id)

    async def close(self):
        await self.store.close()

# decision_flow/core/dispatcher.py
"""User-facing mutation surface of the editor."""

from typing import Any, Dict, List, Optional, Union
from loguru import logger

from .connection_resolver import ConnectionResolver
from .data_models import (
    ConnectionAttempt, Edge, EdgeChange, Node, NodeChange, NodeEvent, NodeEventKind, Position
)
from .graph_model import GraphModel


class MutationDispatcher:
    """Translates user intent into graph model updates.

    Every node in the model carries three hooks (label changed, response
    changed, delete requested). The hooks are thin closures over the node's
    id that emit a ``NodeEvent``; ``handle_event`` interprets the events
    centrally. Hooks are rebound whenever nodes enter the model from outside
    (adds, layout resets, loads), since they do not survive serialization.
    """

    def __init__(self, model: GraphModel, resolver: Optional[ConnectionResolver] = None):
        self.model = model
        self.resolver = resolver or ConnectionResolver()

    # ------------------------------------------------------------------
    # Operations

    def add_node(
        self,
        label: Optional[str] = None,
        responses: Optional[List[str]] = None,
        position: Optional[Position] = None
    ) -> Node:
        node = self.model.add_node(label=label, responses=responses, position=position)
        self.bind_hooks(node)
        return node

    def update_node_label(self, node_id: str, text: str):
        self.model.update_node_label(node_id, text)

    def update_response(self, node_id: str, index: int, text: str):
        self.model.update_response(node_id, index, text)

    def add_response(self, node_id: str, text: str) -> int:
        return self.model.add_response(node_id, text)

    def remove_response(self, node_id: str, index: int):
        self.model.remove_response(node_id, index)

    def delete_node(self, node_id: str) -> bool:
        return self.model.delete_node(node_id)

    def connect(self, attempt: Union[ConnectionAttempt, Dict[str, Any]]) -> Edge:
        if isinstance(attempt, dict):
            attempt = ConnectionAttempt.model_validate(attempt)
        edge = self.resolver.resolve(attempt, self.model)
        return self.model.add_edge(edge)

    def apply_node_changes(self, changes: List[Union[NodeChange, Dict[str, Any]]]):
        changes = [NodeChange.model_validate(c) if isinstance(c, dict) else c for c in changes]
        for node in self.model.apply_node_changes(changes):
            self.bind_hooks(node)

    def apply_edge_changes(self, changes: List[Union[EdgeChange, Dict[str, Any]]]):
        changes = [EdgeChange.model_validate(c) if isinstance(c, dict) else c for c in changes]
        self.model.apply_edge_changes(changes)

    def replace_flow(self, nodes: List[Node], edges: List[Edge]):
        """Swap in a new node and edge collection and rebind every hook."""
        self.model.replace(nodes, edges)
        self.rebind_all()
        logger.debug(f"Replaced flow with {len(self.model.nodes)} nodes, {len(self.model.edges)} edges")

    # ------------------------------------------------------------------
    # Node events

    def handle_event(self, event: NodeEvent):
        """Apply a command coming from a rendered node."""
        if event.kind == NodeEventKind.LABEL_CHANGED:
            self.update_node_label(event.node_id, event.payload["text"])
        elif event.kind == NodeEventKind.RESPONSE_CHANGED:
            self.update_response(event.node_id, event.payload["index"], event.payload["text"])
        elif event.kind == NodeEventKind.DELETE_REQUESTED:
            self.delete_node(event.node_id)

    def bind_hooks(self, node: Node):
        node_id = node.id

        def on_change(text: str):
            self.handle_event(NodeEvent(
                kind=NodeEventKind.LABEL_CHANGED, node_id=node_id, payload={"text": text}
            ))

        def on_response_change(index: int, text: str):
            self.handle_event(NodeEvent(
                kind=NodeEventKind.RESPONSE_CHANGED,
                node_id=node_id,
                payload={"index": index, "text": text},
            ))

        def on_delete():
            self.handle_event(NodeEvent(kind=NodeEventKind.DELETE_REQUESTED, node_id=node_id))

        node.data.id = node_id
        node.data.on_change = on_change
        node.data.on_response_change = on_response_change
        node.data.on_delete = on_delete

    def rebind_all(self):
        for node in self.model.nodes:
            self.bind_hooks(node)

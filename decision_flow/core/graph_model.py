# decision_flow/core/graph_model.py
"""In-memory graph of question nodes and their edges."""

import itertools
import random
import re
from typing import Iterable, List, Optional, Set
from loguru import logger

from .data_models import (
    Edge, EdgeChange, Flow, Node, NodeChange, Position, QuestionData,
    PLACEHOLDER_NODE_TYPE
)
from .exceptions import (
    InvalidConnectionError, NodeNotFoundError, PlaceholderNodeError, ResponseIndexError
)
from ..config.schemas import EditorDefaults, PlaceholderConfig


class NodeIdGenerator:
    """Issues ``<prefix><n>`` identifiers and never hands out the same one twice."""

    def __init__(self, prefix: str = "node_"):
        self.prefix = prefix
        self._counter = 0
        self._pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    def next_id(self, taken: Set[str]) -> str:
        while True:
            self._counter += 1
            candidate = f"{self.prefix}{self._counter}"
            if candidate not in taken:
                return candidate

    def reseed(self, ids: Iterable[str]):
        """Move the counter past every numeric suffix in ``ids``."""
        for node_id in ids:
            match = self._pattern.match(node_id)
            if match:
                self._counter = max(self._counter, int(match.group(1)))


class GraphModel:
    """Owns the node and edge collections of one flow.

    Every operation keeps the cascade invariant: no edge references a node
    that is not in ``nodes``.
    """

    def __init__(
        self,
        defaults: Optional[EditorDefaults] = None,
        placeholder: Optional[PlaceholderConfig] = None,
        rng: Optional[random.Random] = None
    ):
        self.defaults = defaults or EditorDefaults()
        self.placeholder = placeholder or PlaceholderConfig()
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []

        self._node_ids = NodeIdGenerator(self.defaults.node_id_prefix)
        self._edge_counter = itertools.count(1)
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Lookup

    def find_node(self, node_id: str) -> Optional[Node]:
        return next((node for node in self.nodes if node.id == node_id), None)

    def get_node(self, node_id: str) -> Node:
        node = self.find_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def has_node(self, node_id: str) -> bool:
        return self.find_node(node_id) is not None

    def find_edge(self, edge_id: str) -> Optional[Edge]:
        return next((edge for edge in self.edges if edge.id == edge_id), None)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    # ------------------------------------------------------------------
    # Nodes

    def add_node(
        self,
        label: Optional[str] = None,
        responses: Optional[List[str]] = None,
        position: Optional[Position] = None
    ) -> Node:
        """Append a new question node with a freshly generated identifier."""
        node_id = self._node_ids.next_id(self._taken_ids())
        if position is None:
            position = Position(
                x=self._rng.random() * self.defaults.canvas_width,
                y=self._rng.random() * self.defaults.canvas_height,
            )

        node = Node(
            id=node_id,
            position=position,
            data=QuestionData(
                id=node_id,
                label=self.defaults.default_label if label is None else label,
                responses=list(self.defaults.default_responses if responses is None else responses),
            ),
        )
        self.nodes.append(node)
        logger.debug(f"Added node {node_id}")
        return node

    def insert_node(self, node: Node) -> bool:
        """Insert a node that already carries an identifier.

        Returns False when the identifier is already in use.
        """
        if node.id == self.placeholder.id:
            raise PlaceholderNodeError(f"'{node.id}' is reserved for the empty-state placeholder")
        if self.has_node(node.id):
            logger.warning(f"Ignoring node {node.id}: identifier already in use")
            return False
        self.nodes.append(node)
        self._node_ids.reseed([node.id])
        return True

    def update_node_label(self, node_id: str, text: str):
        node = self.get_node(node_id)
        node.data.label = text
        logger.debug(f"Updated label of {node_id}")

    def update_response(self, node_id: str, index: int, text: str):
        node = self.get_node(node_id)
        self._check_response_index(node, index)
        node.data.responses[index] = text
        logger.debug(f"Updated response {index} of {node_id}")

    def add_response(self, node_id: str, text: str) -> int:
        """Append a response option and return its index."""
        node = self.get_node(node_id)
        node.data.responses.append(text)
        return len(node.data.responses) - 1

    def remove_response(self, node_id: str, index: int):
        """Remove a response option together with the edges drawn from it.

        Edges whose handle carries no numeric index are matched on the
        removed response's text instead.
        """
        node = self.get_node(node_id)
        self._check_response_index(node, index)
        removed = node.data.responses.pop(index)

        kept = []
        for edge in self.edges:
            if edge.source != node_id or edge.source_handle is None:
                kept.append(edge)
                continue
            if edge.source_response is None:
                if edge.label != removed:
                    kept.append(edge)
                continue
            if edge.source_response == index:
                continue
            if edge.source_response > index:
                old_prefix = f"{edge.source_response}-"
                edge.source_response -= 1
                if edge.source_handle and edge.source_handle.startswith(old_prefix):
                    edge.source_handle = f"{edge.source_response}-{edge.source_handle[len(old_prefix):]}"
            kept.append(edge)
        self.edges = kept

    def delete_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it.

        Deleting an unknown identifier is a no-op and returns False.
        """
        node = self.find_node(node_id)
        if node is None:
            logger.debug(f"Delete of unknown node {node_id} ignored")
            return False

        self.nodes = [n for n in self.nodes if n.id != node_id]
        before = len(self.edges)
        self.edges = [edge for edge in self.edges if not edge.touches(node_id)]
        logger.debug(f"Deleted node {node_id} and {before - len(self.edges)} edge(s)")
        return True

    # ------------------------------------------------------------------
    # Edges

    def next_edge_id(self, source: str, target: str, taken: Optional[Set[str]] = None) -> str:
        taken = {edge.id for edge in self.edges} | (taken or set())
        while True:
            candidate = f"edge_{next(self._edge_counter)}_{source}-{target}"
            if candidate not in taken:
                return candidate

    def add_edge(self, edge: Edge) -> Edge:
        for endpoint in (edge.source, edge.target):
            if not self.has_node(endpoint):
                raise InvalidConnectionError(
                    f"Edge {edge.source} -> {edge.target} references missing node '{endpoint}'"
                )
        if edge.id is None:
            edge.id = self.next_edge_id(edge.source, edge.target)
        self.edges.append(edge)
        logger.debug(f"Added edge {edge.id}")
        return edge

    # ------------------------------------------------------------------
    # Layout-surface changes

    def apply_node_changes(self, changes: List[NodeChange]) -> List[Node]:
        """Apply a batch of layout-surface node changes.

        Returns the nodes that entered the collection so the caller can bind
        their hooks.
        """
        resets = [change.item for change in changes if change.type == "reset" and change.item]
        if resets:
            self.replace(resets, self.edges)
            return list(self.nodes)

        added = []
        for change in changes:
            if change.type == "remove":
                node = self.find_node(change.id)
                if node is not None and not node.data.deletable:
                    logger.debug(f"Node {change.id} is not deletable")
                    continue
                self.delete_node(change.id)
            elif change.type == "add":
                if change.item is not None and self.insert_node(change.item):
                    added.append(change.item)
            else:
                node = self.find_node(change.id)
                if node is None:
                    logger.debug(f"{change.type} change for unknown node {change.id} ignored")
                    continue
                if change.type == "position":
                    if change.position is not None:
                        node.position = change.position
                    if change.dragging is not None:
                        node.dragging = change.dragging
                elif change.type == "dimensions" and change.dimensions:
                    node.width = change.dimensions.get("width", node.width)
                    node.height = change.dimensions.get("height", node.height)
                elif change.type == "select":
                    node.selected = change.selected
        return added

    def apply_edge_changes(self, changes: List[EdgeChange]):
        """Apply a batch of layout-surface edge changes."""
        resets = [change.item for change in changes if change.type == "reset" and change.item]
        if resets:
            self.edges = self._valid_edges(resets)
            return

        for change in changes:
            if change.type == "remove":
                self.edges = [edge for edge in self.edges if edge.id != change.id]
            elif change.type == "add":
                if change.item is not None:
                    self.add_edge(change.item)
            elif change.type == "select":
                edge = self.find_edge(change.id)
                if edge is not None:
                    edge.selected = change.selected

    # ------------------------------------------------------------------
    # Whole-flow operations

    def replace(self, nodes: List[Node], edges: List[Edge]):
        """Replace both collections wholesale."""
        unique = {}
        for node in nodes:
            if node.id == self.placeholder.id:
                continue
            if node.id in unique:
                logger.warning(f"Dropping duplicate node {node.id}")
                continue
            unique[node.id] = node
        self.nodes = list(unique.values())
        self.edges = self._valid_edges(edges)
        self._node_ids.reseed(unique)

    def render_nodes(self) -> List[Node]:
        """Nodes to draw: the collection, or the placeholder when it is empty."""
        if self.nodes:
            return list(self.nodes)
        return [self.placeholder_node()]

    def placeholder_node(self) -> Node:
        return Node(
            id=self.placeholder.id,
            type=PLACEHOLDER_NODE_TYPE,
            position=Position(x=self.placeholder.x, y=self.placeholder.y),
            data=QuestionData(
                id=self.placeholder.id,
                label=self.placeholder.label,
                responses=[],
                deletable=False,
            ),
            draggable=False,
        )

    def to_flow(self, flow_id: Optional[str] = None) -> Flow:
        """Snapshot of the persisted state. The placeholder is never included."""
        return Flow(
            id=flow_id,
            nodes=[node.model_copy(deep=True) for node in self.nodes],
            edges=[edge.model_copy(deep=True) for edge in self.edges],
        )

    # ------------------------------------------------------------------

    def _taken_ids(self) -> Set[str]:
        return {node.id for node in self.nodes} | {self.placeholder.id}

    def _valid_edges(self, edges: List[Edge]) -> List[Edge]:
        """Drop dangling edges and give identifiers to edges stored without one."""
        present = {node.id for node in self.nodes}
        taken = {edge.id for edge in edges if edge.id is not None}
        valid = []
        for edge in edges:
            if edge.source not in present or edge.target not in present:
                logger.warning(f"Dropping edge {edge.source} -> {edge.target}: endpoint missing")
                continue
            if edge.id is None:
                edge.id = self.next_edge_id(edge.source, edge.target, taken)
                taken.add(edge.id)
            valid.append(edge)
        return valid

    @staticmethod
    def _check_response_index(node: Node, index: int):
        size = len(node.data.responses)
        if index < 0 or index >= size:
            raise ResponseIndexError(node.id, index, size)

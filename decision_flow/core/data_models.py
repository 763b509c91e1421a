# decision_flow/core/data_models.py
"""Core data models for the decision flow editor."""

from typing import Any, Callable, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from enum import Enum

QUESTION_NODE_TYPE = "custom"
PLACEHOLDER_NODE_TYPE = "default"


class Position(BaseModel):
    """Canvas position of a node. Owned by the layout surface."""
    x: float = 0.0
    y: float = 0.0


class QuestionData(BaseModel):
    """Payload of a question node: its label, responses and edit hooks."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    label: str = "New Question?"
    responses: List[str] = Field(default_factory=lambda: ["Yes", "No", "Other"])
    deletable: bool = True

    # Hooks never survive serialization and are rebound after every load
    on_change: Optional[Callable[[str], None]] = Field(default=None, exclude=True)
    on_response_change: Optional[Callable[[int, str], None]] = Field(default=None, exclude=True)
    on_delete: Optional[Callable[[], None]] = Field(default=None, exclude=True)

    @property
    def has_hooks(self) -> bool:
        return all(
            hook is not None
            for hook in (self.on_change, self.on_response_change, self.on_delete)
        )


class Node(BaseModel):
    """A question in the flow."""
    model_config = ConfigDict(extra="allow")

    id: str = Field(frozen=True)
    type: str = QUESTION_NODE_TYPE
    position: Position = Field(default_factory=Position)
    data: QuestionData = Field(default_factory=QuestionData)

    draggable: Optional[bool] = None
    selected: Optional[bool] = None
    dragging: Optional[bool] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @model_validator(mode="after")
    def sync_data_id(self):
        if self.data.id is None:
            self.data.id = self.id
        return self

    @property
    def label(self) -> str:
        return self.data.label

    @property
    def responses(self) -> List[str]:
        return self.data.responses

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Edge(BaseModel):
    """A directed connection from a node (or one of its responses) to a node."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Stored flows may omit it; the graph model assigns one on entry
    id: Optional[str] = None
    source: str
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")
    source_response: Optional[int] = Field(default=None, alias="sourceResponse")
    target: str
    target_handle: Optional[str] = Field(default=None, alias="targetHandle")
    label: Optional[str] = None
    selected: Optional[bool] = None

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Flow(BaseModel):
    """A complete decision tree: the aggregate root of nodes and edges."""
    id: Optional[str] = None
    nodes: List[Node] = []
    edges: List[Edge] = []

    def to_payload(self) -> Dict[str, Any]:
        """Body of a save request. ``id`` is sent as null on first save."""
        return {
            "id": self.id,
            "nodes": [node.to_wire() for node in self.nodes],
            "edges": [edge.to_wire() for edge in self.edges],
        }


class ConnectionAttempt(BaseModel):
    """A connection gesture emitted by the layout surface."""
    model_config = ConfigDict(populate_by_name=True)

    source: str
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")
    target: str
    target_handle: Optional[str] = Field(default=None, alias="targetHandle")


class NodeChange(BaseModel):
    """A single layout-surface change to the node collection."""
    id: Optional[str] = None
    type: Literal["position", "dimensions", "select", "remove", "add", "reset"]
    position: Optional[Position] = None
    dragging: Optional[bool] = None
    selected: Optional[bool] = None
    dimensions: Optional[Dict[str, float]] = None
    item: Optional[Node] = None


class EdgeChange(BaseModel):
    """A single layout-surface change to the edge collection."""
    id: Optional[str] = None
    type: Literal["select", "remove", "add", "reset"]
    selected: Optional[bool] = None
    item: Optional[Edge] = None


class NodeEventKind(str, Enum):
    """Commands a rendered node can send back to the editor."""
    LABEL_CHANGED = "label_changed"
    RESPONSE_CHANGED = "response_changed"
    DELETE_REQUESTED = "delete_requested"


class NodeEvent(BaseModel):
    """A node-scoped command, interpreted centrally by the dispatcher."""
    kind: NodeEventKind
    node_id: str
    payload: Dict[str, Any] = {}


class StoredFlow(BaseModel):
    """Body of ``GET /api/flows/get/{id}``."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    flow_id: str = Field(alias="_id")
    nodes: List[Node]
    edges: List[Edge] = []

    def to_flow(self) -> Flow:
        return Flow(id=self.flow_id, nodes=self.nodes, edges=self.edges)


class SavedFlow(BaseModel):
    """Body of ``POST /api/flows/save``."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    message: str = ""

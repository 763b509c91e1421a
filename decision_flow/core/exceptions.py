# decision_flow/core/exceptions.py
"""Custom exceptions for the decision flow editor."""

class DecisionFlowError(Exception):
    """Base exception for all decision flow errors."""
    pass

class ConfigurationError(DecisionFlowError):
    """Raised when there's a configuration error."""
    pass

class GraphError(DecisionFlowError):
    """Base exception for graph mutation errors."""
    pass

class NodeNotFoundError(GraphError):
    """Raised when a mutation targets a node that is not in the flow."""

    def __init__(self, node_id: str):
        super().__init__(f"Node '{node_id}' not found")
        self.node_id = node_id

class ResponseIndexError(GraphError, IndexError):
    """Raised when a response index is outside the node's response list."""

    def __init__(self, node_id: str, index: int, size: int):
        super().__init__(
            f"Response index {index} out of range for node '{node_id}' "
            f"({size} responses)"
        )
        self.node_id = node_id
        self.index = index
        self.size = size

class InvalidConnectionError(GraphError):
    """Raised when an edge would reference a node that does not exist."""
    pass

class PlaceholderNodeError(GraphError):
    """Raised when the empty-state placeholder is used as a real node."""
    pass

class FlowStoreError(DecisionFlowError):
    """Base exception for remote store errors."""
    pass

class NetworkFailureError(FlowStoreError):
    """Raised when a request to the store cannot complete."""
    pass

class ServerError(FlowStoreError):
    """Raised when the store answers with a non-success status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code

class FlowNotFoundError(ServerError):
    """Raised when the store has no flow with the requested id."""
    pass

class FlowConflictError(ServerError):
    """Raised when the store rejects a save against a newer copy."""
    pass

class MalformedResponseError(ServerError):
    """Raised when the store's body is not the expected JSON shape."""
    pass

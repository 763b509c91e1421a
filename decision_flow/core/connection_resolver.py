# decision_flow/core/connection_resolver.py
"""Turns connection gestures into edges."""

from typing import Optional, Tuple
from loguru import logger

from .data_models import ConnectionAttempt, Edge
from .exceptions import InvalidConnectionError
from .graph_model import GraphModel

HANDLE_SEPARATOR = "-"


def parse_source_handle(handle: str) -> Tuple[Optional[int], str]:
    """Split a response handle such as ``"2-Not sure"`` into ``(2, "Not sure")``.

    Everything after the first separator is the response text. The prefix is
    returned as an index only when it is numeric.
    """
    prefix, separator, text = handle.partition(HANDLE_SEPARATOR)
    if not separator:
        return None, handle
    index = int(prefix) if prefix.isdigit() else None
    return index, text


class ConnectionResolver:
    """Decides whether a connection attempt is valid and builds its edge.

    Whole-node connections (no source handle) always produce an unlabelled
    edge. Response-scoped connections copy the response text out of the
    handle as the edge label; later edits to the response do not reach
    the edge. Duplicates, self-loops and cycles are allowed.
    """

    def resolve(self, attempt: ConnectionAttempt, model: GraphModel) -> Edge:
        for endpoint in (attempt.source, attempt.target):
            if not model.has_node(endpoint):
                raise InvalidConnectionError(
                    f"Cannot connect {attempt.source} -> {attempt.target}: "
                    f"node '{endpoint}' does not exist"
                )

        edge = Edge(
            id=model.next_edge_id(attempt.source, attempt.target),
            source=attempt.source,
            target=attempt.target,
            source_handle=attempt.source_handle or None,
            target_handle=attempt.target_handle or None,
        )

        if attempt.source_handle:
            edge.source_response, edge.label = parse_source_handle(attempt.source_handle)
            logger.debug(f"Response-scoped connection {edge.id} labelled '{edge.label}'")
        else:
            logger.debug(f"Whole-node connection {edge.id}")

        return edge

# decision_flow/core/__init__.py
"""Core components of the decision flow editor"""

from .graph_model import GraphModel, NodeIdGenerator
from .connection_resolver import ConnectionResolver, parse_source_handle
from .dispatcher import MutationDispatcher
from .synchronizer import PersistenceSynchronizer, LoadState
from .flow_editor import FlowEditor
from .data_models import *
from .exceptions import *

__all__ = [
    "GraphModel",
    "NodeIdGenerator",
    "ConnectionResolver",
    "parse_source_handle",
    "MutationDispatcher",
    "PersistenceSynchronizer",
    "LoadState",
    "FlowEditor",
]

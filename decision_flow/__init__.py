# decision_flow/__init__.py
"""Decision flow editor: graph state and persistence engine"""

__version__ = "0.1.0"

from .core.flow_editor import FlowEditor
from .core.data_models import Flow, Node, Edge, QuestionData
from .config.schemas import EditorConfig

__all__ = [
    "FlowEditor",
    "Flow",
    "Node",
    "Edge",
    "QuestionData",
    "EditorConfig",
]

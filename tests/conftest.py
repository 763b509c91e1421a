import random

import pytest

from decision_flow.config.schemas import EditorConfig
from decision_flow.core.dispatcher import MutationDispatcher
from decision_flow.core.flow_editor import FlowEditor
from decision_flow.core.graph_model import GraphModel
from decision_flow.core.synchronizer import PersistenceSynchronizer
from decision_flow.stores.memory_store import InMemoryFlowStore


@pytest.fixture
def model() -> GraphModel:
    return GraphModel(rng=random.Random(7))


@pytest.fixture
def dispatcher(model: GraphModel) -> MutationDispatcher:
    return MutationDispatcher(model)


@pytest.fixture
def store() -> InMemoryFlowStore:
    return InMemoryFlowStore()


@pytest.fixture
def synchronizer(store: InMemoryFlowStore, dispatcher: MutationDispatcher) -> PersistenceSynchronizer:
    return PersistenceSynchronizer(store, dispatcher)


@pytest.fixture
def editor(store: InMemoryFlowStore) -> FlowEditor:
    return FlowEditor(config=EditorConfig.default(), store=store, rng=random.Random(7))


@pytest.fixture
def three_node_graph(dispatcher: MutationDispatcher):
    """node_1 --Yes--> node_2, node_1 --No--> node_3, node_2 --> node_3."""
    first = dispatcher.add_node(label="Q1")
    second = dispatcher.add_node(label="Q2")
    third = dispatcher.add_node(label="Q3")
    dispatcher.connect({"source": first.id, "sourceHandle": "0-Yes", "target": second.id})
    dispatcher.connect({"source": first.id, "sourceHandle": "1-No", "target": third.id})
    dispatcher.connect({"source": second.id, "target": third.id})
    return first, second, third

import random

import pytest

from decision_flow.cli import main
from decision_flow.config.schemas import EditorConfig
from decision_flow.core.flow_editor import FlowEditor
from decision_flow.stores.memory_store import InMemoryFlowStore
from decision_flow.utils.formatters import format_flow


class TestRoundTrip:

    @pytest.mark.asyncio
    async def test_save_then_load_by_returned_id(self, editor: FlowEditor, store: InMemoryFlowStore) -> None:
        node = editor.add_question()
        assert node.id == "node_1"
        node.data.on_change("Q1")
        editor.dispatcher.remove_response(node.id, 2)

        saved = await editor.save()

        reopened = FlowEditor(store=store, flow_id=saved.id, rng=random.Random(1))
        flow = await reopened.mount()

        assert flow.id == saved.id
        assert [(n.id, n.label, n.responses) for n in flow.nodes] == [("node_1", "Q1", ["Yes", "No"])]
        assert flow.edges == []

        loaded = reopened.model.get_node("node_1")
        loaded.data.on_delete()
        assert reopened.model.nodes == []

    @pytest.mark.asyncio
    async def test_edges_survive_round_trip(self, editor: FlowEditor, store: InMemoryFlowStore) -> None:
        first = editor.add_question("Is it on?")
        second = editor.add_question("Is it plugged in?")
        editor.on_connect({"source": first.id, "sourceHandle": "1-No", "target": second.id})
        saved = await editor.save()

        reopened = FlowEditor(store=store)
        await reopened.open_flow(saved.id)

        nodes, edges = reopened.render()
        assert [n.label for n in nodes] == ["Is it on?", "Is it plugged in?"]
        assert [(e.source, e.target, e.label, e.source_response) for e in edges] == [
            (first.id, second.id, "No", 1)
        ]

    @pytest.mark.asyncio
    async def test_new_ids_after_load_do_not_collide(self, editor: FlowEditor, store: InMemoryFlowStore) -> None:
        editor.add_question()
        editor.add_question()
        editor.dispatcher.delete_node("node_1")
        saved = await editor.save()

        reopened = FlowEditor(store=store, flow_id=saved.id)
        await reopened.mount()

        assert reopened.add_question().id == "node_3"


class TestSession:

    def test_empty_session_renders_placeholder(self, editor: FlowEditor) -> None:
        nodes, edges = editor.render()
        assert [node.id for node in nodes] == ["start-node"]
        assert edges == []
        assert editor.snapshot().nodes == []

    def test_rejected_connection_is_not_raised(self, editor: FlowEditor) -> None:
        node = editor.add_question()
        assert editor.on_connect({"source": "start-node", "target": node.id}) is None
        assert editor.model.edges == []

    def test_layout_changes_are_routed(self, editor: FlowEditor) -> None:
        node = editor.add_question()
        editor.on_nodes_change([{"id": node.id, "type": "position", "position": {"x": 5, "y": 6}}])
        assert (node.position.x, node.position.y) == (5, 6)

        other = editor.add_question()
        edge = editor.on_connect({"source": node.id, "target": other.id})
        editor.on_edges_change([{"id": edge.id, "type": "select", "selected": True}])
        assert edge.selected is True

    def test_memory_backend_from_config(self) -> None:
        config = EditorConfig.default()
        config.store.backend = "memory"
        assert isinstance(FlowEditor(config=config).store, InMemoryFlowStore)

    @pytest.mark.asyncio
    async def test_failed_open_keeps_current_questions(self, editor: FlowEditor) -> None:
        editor.add_question("Keep me")
        assert await editor.open_flow("does-not-exist") is None
        assert [node.label for node in editor.render()[0]] == ["Keep me"]


def test_format_flow(editor: FlowEditor) -> None:
    first = editor.add_question("Q1", ["Yes", "No"])
    second = editor.add_question("Q2", ["Ok"])
    editor.on_connect({"source": first.id, "sourceHandle": "0-Yes", "target": second.id})
    editor.on_connect({"source": second.id, "target": first.id})

    text = format_flow(editor.snapshot())

    assert "Flow: (unsaved)" in text
    assert "[node_1] Q1" in text
    assert "0. Yes -> node_2" in text
    assert "1. No\n" in text
    assert "* -> node_1" in text


@pytest.fixture
def quiet_cli(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("decision_flow.cli.configure_from_config", lambda logging_config: None)


def test_cli_create_with_memory_store(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture, quiet_cli) -> None:
    monkeypatch.setenv("DECISION_FLOW_STORE", "memory")

    exit_code = main(["create", "--question", "Is it on?", "--question", "Is it plugged in?",
                      "--responses", "Yes", "No", "--chain"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Flow saved successfully" in out
    assert "0. Yes -> node_2" in out


def test_cli_show_missing_flow(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture, quiet_cli) -> None:
    monkeypatch.setenv("DECISION_FLOW_STORE", "memory")
    assert main(["show", "abc"]) == 1
    assert "Could not load flow abc" in capsys.readouterr().out


def test_cli_rejects_bad_base_url(capsys: pytest.CaptureFixture, quiet_cli) -> None:
    assert main(["--base-url", "not-a-url", "show", "abc"]) == 2
    assert "Configuration error" in capsys.readouterr().out

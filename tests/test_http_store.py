import json

import httpx
import pytest

from decision_flow.core.data_models import Edge, Flow, Node, QuestionData
from decision_flow.core.exceptions import (
    FlowConflictError, FlowNotFoundError, MalformedResponseError, NetworkFailureError, ServerError
)
from decision_flow.stores import HttpFlowStore, InMemoryFlowStore, get_store

BASE_URL = "http://flows.test"


def make_store(handler, max_retries: int = 1) -> HttpFlowStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpFlowStore(base_url=BASE_URL + "/", max_retries=max_retries, client=client)


def sample_flow(flow_id=None) -> Flow:
    return Flow(
        id=flow_id,
        nodes=[
            Node(id="node_1", data=QuestionData(label="Q1", responses=["Yes", "No"])),
            Node(id="node_2", data=QuestionData(label="Q2")),
        ],
        edges=[Edge(id="e1", source="node_1", source_handle="0-Yes", source_response=0,
                    target="node_2", label="Yes")],
    )


class TestSaveFlow:

    @pytest.mark.asyncio
    async def test_posts_payload(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "65f0c0ffee", "message": "Flow saved successfully"})

        async with make_store(handler) as store:
            saved = await store.save_flow(sample_flow())

        assert seen["method"] == "POST"
        assert seen["url"] == f"{BASE_URL}/api/flows/save"
        assert seen["body"]["id"] is None
        assert [node["id"] for node in seen["body"]["nodes"]] == ["node_1", "node_2"]
        assert seen["body"]["nodes"][0]["data"] == {
            "id": "node_1", "label": "Q1", "responses": ["Yes", "No"], "deletable": True
        }
        assert seen["body"]["edges"][0]["sourceHandle"] == "0-Yes"
        assert seen["body"]["edges"][0]["label"] == "Yes"
        assert saved.id == "65f0c0ffee"
        assert saved.message == "Flow saved successfully"

    @pytest.mark.asyncio
    async def test_conflict(self) -> None:
        def handler(request):
            return httpx.Response(409, json={"message": "stale"})

        async with make_store(handler) as store:
            with pytest.raises(FlowConflictError) as excinfo:
                await store.save_flow(sample_flow("abc"))
        assert excinfo.value.status_code == 409

    @pytest.mark.asyncio
    async def test_server_error_carries_message(self) -> None:
        def handler(request):
            return httpx.Response(500, json={"error": "database unavailable"})

        async with make_store(handler) as store:
            with pytest.raises(ServerError, match="database unavailable"):
                await store.save_flow(sample_flow())


class TestGetFlow:

    @pytest.mark.asyncio
    async def test_reads_underscore_id(self) -> None:
        body = sample_flow().to_payload()
        body.pop("id")
        body["_id"] = "abc"

        def handler(request):
            assert request.url.path == "/api/flows/get/abc"
            return httpx.Response(200, json=body)

        async with make_store(handler) as store:
            stored = await store.get_flow("abc")

        assert stored.flow_id == "abc"
        assert [node.label for node in stored.nodes] == ["Q1", "Q2"]
        assert stored.edges[0].source_handle == "0-Yes"
        assert stored.to_flow().id == "abc"

    @pytest.mark.asyncio
    async def test_edges_without_id_are_accepted(self) -> None:
        body = {
            "_id": "abc",
            "nodes": [{"id": "a", "data": {"label": "Q1", "responses": ["Yes"]}}, {"id": "b"}],
            "edges": [{"source": "a", "sourceHandle": "0-Yes", "target": "b", "label": "Yes"}],
        }

        async with make_store(lambda request: httpx.Response(200, json=body)) as store:
            stored = await store.get_flow("abc")

        assert stored.edges[0].id is None
        assert stored.edges[0].source_handle == "0-Yes"

    @pytest.mark.asyncio
    async def test_flow_id_is_escaped_in_path(self) -> None:
        seen = []

        def handler(request):
            seen.append(request.url.raw_path)
            return httpx.Response(200, json={"_id": "a/b?c", "nodes": []})

        async with make_store(handler) as store:
            await store.get_flow("a/b?c")

        assert seen == [b"/api/flows/get/a%2Fb%3Fc"]

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        async with make_store(lambda request: httpx.Response(404, json={"message": "Flow not found"})) as store:
            with pytest.raises(FlowNotFoundError):
                await store.get_flow("nope")

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        async with make_store(lambda request: httpx.Response(200, text="<html>")) as store:
            with pytest.raises(MalformedResponseError):
                await store.get_flow("abc")

    @pytest.mark.asyncio
    async def test_body_without_nodes(self) -> None:
        async with make_store(lambda request: httpx.Response(200, json={"_id": "abc"})) as store:
            with pytest.raises(MalformedResponseError):
                await store.get_flow("abc")

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_store(handler) as store:
            with pytest.raises(NetworkFailureError):
                await store.get_flow("abc")

    @pytest.mark.asyncio
    async def test_transport_error_is_retried(self) -> None:
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"_id": "abc", "nodes": [], "edges": []})

        async with make_store(handler, max_retries=2) as store:
            stored = await store.get_flow("abc")

        assert len(calls) == 2
        assert stored.nodes == []


def test_get_store_factory() -> None:
    assert isinstance(get_store("memory"), InMemoryFlowStore)
    assert isinstance(get_store("HTTP", base_url=BASE_URL), HttpFlowStore)
    with pytest.raises(ValueError):
        get_store("ftp")


def test_http_store_requires_base_url() -> None:
    with pytest.raises(ValueError):
        HttpFlowStore(base_url="")

# decision_flow/stores/http_store.py
"""JSON-over-HTTP client for the remote flow store."""

from typing import Any, Dict, Optional
from urllib.parse import quote
import httpx
import backoff
from loguru import logger
from pydantic import ValidationError

from .base_store import BaseFlowStore
from ..core.data_models import Flow, SavedFlow, StoredFlow
from ..core.exceptions import (
    FlowConflictError, FlowNotFoundError, MalformedResponseError, NetworkFailureError, ServerError
)

SAVE_PATH = "/api/flows/save"
GET_PATH = "/api/flows/get/{flow_id}"


class HttpFlowStore(BaseFlowStore):
    """Client for the flow store's HTTP API."""

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        timeout: float = 30.0,
        max_retries: int = 3,
        client: Optional[httpx.AsyncClient] = None
    ):
        if not base_url:
            raise ValueError("Flow store base URL required")

        self.base_url = base_url.rstrip('/')
        self.max_retries = max(1, max_retries)
        self.headers = {"Content-Type": "application/json"}
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    async def get_flow(self, flow_id: str) -> StoredFlow:
        response = await self._request("GET", GET_PATH.format(flow_id=quote(flow_id, safe="")))
        self._check_status(response, f"flow '{flow_id}'")
        data = self._json(response)

        try:
            return StoredFlow.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected body for flow '{flow_id}': {e.error_count()} validation error(s)",
                response.status_code
            ) from e

    async def save_flow(self, flow: Flow) -> SavedFlow:
        response = await self._request("POST", SAVE_PATH, json=flow.to_payload())
        self._check_status(response, "save")
        data = self._json(response)

        try:
            return SavedFlow.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected save response: {e.error_count()} validation error(s)",
                response.status_code
            ) from e

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request, retrying transport failures with exponential backoff."""
        send = backoff.on_exception(
            backoff.expo,
            (httpx.TimeoutException, httpx.NetworkError),
            max_tries=self.max_retries,
            on_backoff=self._log_retry
        )(self._send)

        try:
            return await send(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise NetworkFailureError(f"{method} {path} failed: {e}") from e

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        return await self.client.request(
            method,
            f"{self.base_url}{path}",
            headers=self.headers,
            **kwargs
        )

    @staticmethod
    def _log_retry(details: Dict[str, Any]):
        logger.warning(
            f"Retrying flow store request in {details['wait']:.1f}s "
            f"(attempt {details['tries']})"
        )

    @staticmethod
    def _check_status(response: httpx.Response, what: str):
        if response.is_success:
            return

        detail = response.text[:200]
        try:
            body = response.json()
            if isinstance(body, dict):
                detail = body.get("message") or body.get("error") or detail
        except ValueError:
            pass

        status = response.status_code
        if status == 404:
            raise FlowNotFoundError(f"Store has no {what}: {detail}", status)
        if status == 409:
            raise FlowConflictError(f"Store rejected {what} as stale: {detail}", status)
        raise ServerError(f"Store returned {status} for {what}: {detail}", status)

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("Store response is not JSON", response.status_code) from e

        if not isinstance(data, dict):
            raise MalformedResponseError("Store response is not a JSON object", response.status_code)
        return data

"""
HTTP client for an external simulation service.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx

from ....common.exceptions import BackendError, BackendUnavailableError, SimulationNotFoundError
from ....common.logging import setup_logger

logger = setup_logger(__name__)


class RemoteBackend:
    """
    Talks to the simulation REST API. Every response is wrapped in an
    envelope {success, message, data, errors}; `data` is returned.
    """

    name = "remote"

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, *, json_body: Any = None,
                       simulation_id: Optional[str] = None) -> Any:
        try:
            response = await self._get_client().request(method, path, json=json_body)
        except httpx.TransportError as e:
            # connect errors and timeouts included
            raise BackendUnavailableError(f"{method} {path} failed: {e}") from e

        body: Optional[Dict[str, Any]] = None
        try:
            body = response.json() if response.content else None
        except json.JSONDecodeError:
            body = None

        message = (body or {}).get("message") or f"HTTP {response.status_code}"
        if response.status_code == 404:
            raise SimulationNotFoundError(simulation_id or path)
        if response.status_code >= 400 or (body is not None and body.get("success") is False):
            raise BackendError(message, status_code=response.status_code)

        logger.debug(f"{method} {path} -> {response.status_code}")
        return (body or {}).get("data")

    async def create(self, config: Dict[str, Any]) -> str:
        return await self._request("POST", "/simulations", json_body=config)

    async def start(self, simulation_id: str, request: Dict[str, Any]) -> None:
        await self._request("POST", f"/simulations/{simulation_id}/start", json_body=request, simulation_id=simulation_id)

    async def stop(self, simulation_id: str) -> None:
        await self._request("POST", f"/simulations/{simulation_id}/stop", simulation_id=simulation_id)

    async def get_status(self, simulation_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/simulations/{simulation_id}/status", simulation_id=simulation_id)

    async def get_metrics(self, simulation_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/simulations/{simulation_id}/metrics", simulation_id=simulation_id)

    async def get_config(self, simulation_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/simulations/{simulation_id}/config", simulation_id=simulation_id)

    async def get_traffic_light(self, simulation_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/dashboard/trafficlight/{simulation_id}", simulation_id=simulation_id)

    async def apply_scenario(self, name: str, simulation_id: str) -> None:
        await self._request("POST", f"/scenarios/{name}/apply/{simulation_id}", simulation_id=simulation_id)

    async def list(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/simulations") or []

    async def delete(self, simulation_id: str) -> None:
        await self._request("DELETE", f"/simulations/{simulation_id}", simulation_id=simulation_id)

    async def get_summary(self) -> Dict[str, Any]:
        return await self._request("GET", "/dashboard/summary")

    async def get_top_performers(self, limit: int = 5) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/dashboard/topperformers?limit={limit}") or []

    async def compare(self, simulation_ids: List[str]) -> Dict[str, Any]:
        return await self._request("POST", "/dashboard/compare", json_body=simulation_ids)

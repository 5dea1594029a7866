"""
Backend that prefers a remote service and swaps to a local one when the
remote cannot be reached.
"""
from typing import Any, Dict, List

from ....common.exceptions import BackendUnavailableError
from ....common.logging import setup_logger
from ...domain.protocols import SimulationBackend

logger = setup_logger(__name__)


class FailoverBackend:
    """
    Delegates to `primary` until a call raises BackendUnavailableError, then
    retries that call on `fallback` and keeps using it.
    Simulations created on the primary are not migrated.
    """

    def __init__(self, primary: SimulationBackend, fallback: SimulationBackend):
        self.primary = primary
        self.fallback = fallback
        self.active: SimulationBackend = primary

    @property
    def failed_over(self) -> bool:
        return self.active is self.fallback

    @property
    def name(self) -> str:
        return getattr(self.active, "name", type(self.active).__name__)

    def swap_to_fallback(self, reason: str = ""):
        if not self.failed_over:
            logger.warning(f"Primary backend unavailable, switching to fallback. {reason}".strip())
            self.active = self.fallback

    async def _call(self, method: str, *args):
        if not self.failed_over:
            try:
                return await getattr(self.primary, method)(*args)
            except BackendUnavailableError as e:
                self.swap_to_fallback(str(e))
        return await getattr(self.fallback, method)(*args)

    async def create(self, config: Dict[str, Any]) -> str:
        return await self._call("create", config)

    async def start(self, simulation_id: str, request: Dict[str, Any]) -> None:
        await self._call("start", simulation_id, request)

    async def stop(self, simulation_id: str) -> None:
        await self._call("stop", simulation_id)

    async def get_status(self, simulation_id: str) -> Dict[str, Any]:
        return await self._call("get_status", simulation_id)

    async def get_metrics(self, simulation_id: str) -> Dict[str, Any]:
        return await self._call("get_metrics", simulation_id)

    async def get_config(self, simulation_id: str) -> Dict[str, Any]:
        return await self._call("get_config", simulation_id)

    async def get_traffic_light(self, simulation_id: str) -> Dict[str, Any]:
        return await self._call("get_traffic_light", simulation_id)

    async def apply_scenario(self, name: str, simulation_id: str) -> None:
        await self._call("apply_scenario", name, simulation_id)

    async def list(self) -> List[Dict[str, Any]]:
        return await self._call("list")

    async def delete(self, simulation_id: str) -> None:
        await self._call("delete", simulation_id)

    async def get_summary(self) -> Dict[str, Any]:
        return await self._call("get_summary")

    async def get_top_performers(self, limit: int = 5) -> List[Dict[str, Any]]:
        return await self._call("get_top_performers", limit)

    async def compare(self, simulation_ids: List[str]) -> Dict[str, Any]:
        return await self._call("compare", simulation_ids)

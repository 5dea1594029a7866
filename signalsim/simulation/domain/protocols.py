"""
Domain protocols for the Simulation module.
"""
from typing import Any, Dict, List, Protocol

from .entities import TrafficSnapshot


class SnapshotSubscriber(Protocol):
    """
    Receives one snapshot per tick. Must not block.
    """
    def on_snapshot(self, snapshot: TrafficSnapshot) -> None:
        ...


class BernoulliSource(Protocol):
    """
    Source of independent Bernoulli trials.
    """
    def trial(self, probability: float) -> int:
        ...


class SimulationBackend(Protocol):
    """
    Capability used by controllers of a simulation, local or remote.
    """
    async def create(self, config: Dict[str, Any]) -> str:
        ...

    async def start(self, simulation_id: str, request: Dict[str, Any]) -> None:
        ...

    async def stop(self, simulation_id: str) -> None:
        ...

    async def get_status(self, simulation_id: str) -> Dict[str, Any]:
        ...

    async def get_metrics(self, simulation_id: str) -> Dict[str, Any]:
        ...

    async def get_config(self, simulation_id: str) -> Dict[str, Any]:
        ...

    async def get_traffic_light(self, simulation_id: str) -> Dict[str, Any]:
        ...

    async def apply_scenario(self, name: str, simulation_id: str) -> None:
        ...

    async def list(self) -> List[Dict[str, Any]]:
        ...

    async def delete(self, simulation_id: str) -> None:
        ...

    async def get_summary(self) -> Dict[str, Any]:
        ...

    async def get_top_performers(self, limit: int = 5) -> List[Dict[str, Any]]:
        ...

    async def compare(self, simulation_ids: List[str]) -> Dict[str, Any]:
        ...

"""
In-process simulation backend.
"""
from typing import Any, Dict, List, Optional

from ....common.exceptions import ConfigurationError
from ....common.schemas.simulation import (
    ComparisonReportResponse,
    DashboardSummaryResponse,
    QuickStatsResponse,
    PerformanceMetricsResponse,
    SimulationConfigRequest,
    SimulationConfigResponse,
    SimulationRequest,
    SimulationStatusResponse,
    TrafficLightStatusResponse,
)
from ...application.scenarios import ScenarioCatalog
from ...application.services.simulation_manager import SimulationInstance, SimulationManager


class LocalSimulationBackend:
    """
    Runs simulations inside this process through a SimulationManager.
    Speaks the same camelCase payloads as the remote service.
    """

    name = "local"

    def __init__(self, manager: SimulationManager, scenarios: Optional[ScenarioCatalog] = None):
        self.manager = manager
        self.scenarios = scenarios

    @staticmethod
    def _config_response(instance: SimulationInstance) -> SimulationConfigResponse:
        return SimulationConfigResponse.from_config(
            instance.config,
            simulation_id=instance.simulation_id,
            created_at=instance.created_at,
            status=instance.status,
        )

    def _describe(self, instance: SimulationInstance) -> Dict[str, Any]:
        return self._config_response(instance).model_dump(mode="json", by_alias=True)

    async def create(self, config: Dict[str, Any]) -> str:
        request = SimulationConfigRequest.model_validate(config)
        return self.manager.create(request.to_config())

    async def start(self, simulation_id: str, request: Dict[str, Any]) -> None:
        run = SimulationRequest.model_validate(request or {})
        await self.manager.start(
            simulation_id,
            duration_seconds=run.duration_seconds,
            time_step_millis=run.time_step_millis,
            real_time_mode=run.real_time_mode,
        )

    async def stop(self, simulation_id: str) -> None:
        await self.manager.stop(simulation_id)

    async def get_status(self, simulation_id: str) -> Dict[str, Any]:
        status = SimulationStatusResponse.from_status(self.manager.get_status(simulation_id))
        return status.model_dump(mode="json", by_alias=True)

    async def get_metrics(self, simulation_id: str) -> Dict[str, Any]:
        metrics = PerformanceMetricsResponse.from_metrics(
            simulation_id, self.manager.get_metrics(simulation_id)
        )
        return metrics.model_dump(mode="json", by_alias=True)

    async def get_config(self, simulation_id: str) -> Dict[str, Any]:
        return self._describe(self.manager.get(simulation_id))

    async def get_traffic_light(self, simulation_id: str) -> Dict[str, Any]:
        status = TrafficLightStatusResponse.from_status(
            simulation_id, self.manager.get_traffic_light(simulation_id)
        )
        return status.model_dump(mode="json", by_alias=True)

    async def apply_scenario(self, name: str, simulation_id: str) -> None:
        if self.scenarios is None:
            raise ConfigurationError("No scenario catalog configured")
        config = self.scenarios.apply(name, self.manager.get_config(simulation_id))
        self.manager.replace_config(simulation_id, config)

    async def list(self) -> List[Dict[str, Any]]:
        return [self._describe(instance) for instance in self.manager.list()]

    async def delete(self, simulation_id: str) -> None:
        await self.manager.delete(simulation_id)

    async def get_summary(self) -> Dict[str, Any]:
        summary = self.manager.summary()
        most_recent = summary.most_recent_simulation
        response = DashboardSummaryResponse(
            total_simulations=summary.total_simulations,
            active_simulations=summary.active_simulations,
            completed_simulations=summary.completed_simulations,
            average_performance_index=summary.average_performance_index,
            best_performing_scenario=summary.best_performing_scenario,
            most_recent_simulation=self._config_response(most_recent) if most_recent else None,
            recent_performance=[
                QuickStatsResponse(
                    simulation_id=stats.simulation_id,
                    performance_index=stats.performance_index,
                    completed_at=stats.completed_at,
                )
                for stats in summary.recent_performance
            ],
            last_update=summary.last_update,
        )
        return response.model_dump(mode="json", by_alias=True)

    async def get_top_performers(self, limit: int = 5) -> List[Dict[str, Any]]:
        return [
            PerformanceMetricsResponse.from_metrics(sim_id, metrics).model_dump(mode="json", by_alias=True)
            for sim_id, metrics in self.manager.top_performers(limit)
        ]

    async def compare(self, simulation_ids: List[str]) -> Dict[str, Any]:
        report = self.manager.compare(simulation_ids)
        response = ComparisonReportResponse(
            simulations=[self._config_response(instance) for instance in report.simulations],
            metrics=[
                PerformanceMetricsResponse.from_metrics(instance.simulation_id, metrics)
                for instance, metrics in zip(report.simulations, report.metrics)
            ],
            insights=report.insights,
        )
        return response.model_dump(mode="json", by_alias=True)

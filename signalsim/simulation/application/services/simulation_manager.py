"""
Manager for multiple independent simulations.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ....common.exceptions import (
    ConfigurationError,
    SimulationExistsError,
    SimulationNotFoundError,
    SimulationStateError,
)
from ....common.logging import setup_logger
from ....common.metrics import MetricsCollector, PerformanceMetrics, QuickStats
from ...domain.config import SimulationConfig
from ...domain.entities import SimulationStatus, TrafficLightStatus, TrafficSnapshot
from ...infrastructure.broadcast.realtime_broadcaster import BroadcastSubscriber, RealtimeBroadcaster
from ..coordinator import TickCoordinator
from ..projections import traffic_light_status
from ..scheduler import SimulationRunner

logger = setup_logger(__name__)


@dataclass
class SimulationInstance:
    """Encapsulates one simulation with its own coordinator, runner and metrics."""
    simulation_id: str
    config: SimulationConfig
    coordinator: TickCoordinator
    runner: SimulationRunner
    metrics: MetricsCollector
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status(self) -> SimulationStatus:
        return self.runner.status

    @property
    def latest(self) -> TrafficSnapshot:
        return self.coordinator.latest or self.coordinator.snapshot()


@dataclass
class DashboardSummary:
    total_simulations: int
    active_simulations: int
    completed_simulations: int
    average_performance_index: float
    best_performing_scenario: Optional[str]
    most_recent_simulation: Optional[SimulationInstance]
    recent_performance: List[QuickStats]
    last_update: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ComparisonReport:
    simulations: List[SimulationInstance]
    metrics: List[PerformanceMetrics]
    insights: List[str]


class SimulationManager:
    """
    Manages multiple simulations simultaneously.
    No mutable state is shared between instances; each has its own
    queues, signal timing, random source and timer task.
    """

    def __init__(self, broadcaster: Optional[RealtimeBroadcaster] = None):
        self.simulations: Dict[str, SimulationInstance] = {}
        self.broadcaster = broadcaster

    def _build(self, simulation_id: str, config: SimulationConfig, created_at: Optional[datetime] = None) -> SimulationInstance:
        coordinator = TickCoordinator(config)
        metrics = MetricsCollector(
            vehicle_weight=config.vehicle_performance_weight,
            pedestrian_weight=config.pedestrian_performance_weight,
        )
        coordinator.subscribe(metrics)
        if self.broadcaster is not None:
            coordinator.subscribe(BroadcastSubscriber(self.broadcaster, simulation_id))

        instance = SimulationInstance(
            simulation_id=simulation_id,
            config=config,
            coordinator=coordinator,
            runner=SimulationRunner(coordinator),
            metrics=metrics,
        )
        if created_at is not None:
            instance.created_at = created_at
        return instance

    def create(self, config: SimulationConfig, simulation_id: Optional[str] = None) -> str:
        """
        Registers a new simulation and returns its id.
        """
        simulation_id = simulation_id or uuid.uuid4().hex
        if simulation_id in self.simulations:
            raise SimulationExistsError(simulation_id)

        self.simulations[simulation_id] = self._build(simulation_id, config)
        logger.info(f"Created simulation {simulation_id} ({config.name}, {config.scenario.value})")
        return simulation_id

    def get(self, simulation_id: str) -> SimulationInstance:
        if simulation_id not in self.simulations:
            raise SimulationNotFoundError(simulation_id)
        return self.simulations[simulation_id]

    async def start(self, simulation_id: str, duration_seconds: int = 300,
                    time_step_millis: int = 1000, real_time_mode: bool = True):
        instance = self.get(simulation_id)
        await instance.runner.start(duration_seconds, time_step_millis, real_time_mode)

    async def stop(self, simulation_id: str):
        instance = self.get(simulation_id)
        await instance.runner.stop()

    async def stop_all(self):
        await asyncio.gather(*(self.stop(sim_id) for sim_id in list(self.simulations.keys())))

    async def delete(self, simulation_id: str):
        instance = self.get(simulation_id)
        await instance.runner.stop()
        del self.simulations[simulation_id]
        if self.broadcaster is not None:
            self.broadcaster.forget(simulation_id)
        logger.info(f"Deleted simulation {simulation_id}")

    def replace_config(self, simulation_id: str, config: SimulationConfig):
        """
        Rebuilds an idle simulation around a new configuration.
        Configs are immutable, so the instance pair is recreated.
        """
        instance = self.get(simulation_id)
        if instance.runner.is_running:
            raise SimulationStateError(f"Simulation {simulation_id} is running")
        self.simulations[simulation_id] = self._build(simulation_id, config, created_at=instance.created_at)

    def get_config(self, simulation_id: str) -> SimulationConfig:
        return self.get(simulation_id).config

    def get_metrics(self, simulation_id: str) -> PerformanceMetrics:
        return self.get(simulation_id).metrics.get_metrics()

    def get_traffic_light(self, simulation_id: str) -> TrafficLightStatus:
        instance = self.get(simulation_id)
        return traffic_light_status(instance.latest, yellow_time=instance.config.yellow_time)

    def get_status(self, simulation_id: str) -> Dict:
        instance = self.get(simulation_id)
        runner = instance.runner
        return {
            "simulation_id": simulation_id,
            "status": runner.status,
            "current_time_step": instance.coordinator.simulator.time_step,
            "total_time_steps": runner.total_steps,
            "progress": runner.progress,
            "current_state": instance.latest,
            "message": runner.message,
            "last_update": runner.last_update,
        }

    def list(self) -> List[SimulationInstance]:
        return list(self.simulations.values())

    def _scored(self) -> List[Tuple[SimulationInstance, PerformanceMetrics]]:
        """Simulations that have moved traffic, so their index can be ranked."""
        scored = []
        for instance in self.simulations.values():
            metrics = instance.metrics.get_metrics()
            if metrics.total_vehicles_processed + metrics.total_pedestrians_processed > 0:
                scored.append((instance, metrics))
        return scored

    def summary(self, recent: int = 5) -> DashboardSummary:
        """
        Aggregates every registered simulation. Lower performance index is
        better, so the best scenario is the one with the lowest mean index.
        """
        instances = self.list()
        scored = self._scored()

        by_scenario: Dict[str, List[float]] = {}
        for instance, metrics in scored:
            by_scenario.setdefault(instance.config.scenario.value, []).append(metrics.combined_performance_index)
        best_scenario = min(
            by_scenario, key=lambda name: sum(by_scenario[name]) / len(by_scenario[name]), default=None
        )

        completed = sorted(
            (pair for pair in scored if pair[0].status is SimulationStatus.COMPLETED),
            key=lambda pair: pair[0].runner.last_update,
            reverse=True,
        )
        indexes = [metrics.combined_performance_index for _, metrics in scored]

        return DashboardSummary(
            total_simulations=len(instances),
            active_simulations=sum(1 for i in instances if i.status is SimulationStatus.RUNNING),
            completed_simulations=sum(1 for i in instances if i.status is SimulationStatus.COMPLETED),
            average_performance_index=sum(indexes) / len(indexes) if indexes else 0.0,
            best_performing_scenario=best_scenario,
            most_recent_simulation=max(instances, key=lambda i: i.created_at, default=None),
            recent_performance=[
                QuickStats(
                    simulation_id=instance.simulation_id,
                    performance_index=metrics.combined_performance_index,
                    completed_at=instance.runner.last_update,
                )
                for instance, metrics in completed[:recent]
            ],
        )

    def top_performers(self, limit: int = 5) -> List[Tuple[str, PerformanceMetrics]]:
        ranked = sorted(self._scored(), key=lambda pair: pair[1].combined_performance_index)
        return [(instance.simulation_id, metrics) for instance, metrics in ranked[:limit]]

    def compare(self, simulation_ids: List[str]) -> ComparisonReport:
        if not simulation_ids:
            raise ConfigurationError("At least one simulation id is required")

        instances = [self.get(sim_id) for sim_id in dict.fromkeys(simulation_ids)]
        metrics = [instance.metrics.get_metrics() for instance in instances]

        insights = []
        ranked = []
        for instance, result in zip(instances, metrics):
            if result.total_vehicles_processed + result.total_pedestrians_processed == 0:
                insights.append(f"{instance.simulation_id} has not processed any traffic yet")
            else:
                ranked.append((instance, result))

        if len(ranked) < 2:
            insights.append("Run at least two simulations to rank them")
        else:
            ranked.sort(key=lambda pair: pair[1].combined_performance_index)
            best, best_metrics = ranked[0]
            worst, worst_metrics = ranked[-1]
            waits = [result.average_vehicle_waiting_time for _, result in ranked]
            insights.append(
                f"{best.config.name} ({best.simulation_id}) has the lowest combined performance index "
                f"({best_metrics.combined_performance_index:.2f})"
            )
            insights.append(
                f"{worst.config.name} ({worst.simulation_id}) has the highest combined performance index "
                f"({worst_metrics.combined_performance_index:.2f})"
            )
            insights.append(f"Average vehicle waiting time ranges from {min(waits):.1f}s to {max(waits):.1f}s")

        return ComparisonReport(simulations=instances, metrics=metrics, insights=insights)

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict

from ..simulation.domain.entities import Phase, TrafficSnapshot

@dataclass
class PerformanceMetrics:
    """Performance figures of one simulation run"""
    total_time_steps: int
    average_vehicle_waiting_time: float
    average_pedestrian_waiting_time: float
    combined_performance_index: float
    total_vehicles_processed: int
    total_pedestrians_processed: int
    phase1_total_time: float
    phase2_total_time: float
    calculated_at: datetime

    def to_dict(self) -> Dict:
        return {
            'total_time_steps': self.total_time_steps,
            'average_vehicle_waiting_time': self.average_vehicle_waiting_time,
            'average_pedestrian_waiting_time': self.average_pedestrian_waiting_time,
            'combined_performance_index': self.combined_performance_index,
            'total_vehicles_processed': self.total_vehicles_processed,
            'total_pedestrians_processed': self.total_pedestrians_processed,
            'phase1_total_time': self.phase1_total_time,
            'phase2_total_time': self.phase2_total_time,
            'calculated_at': self.calculated_at.isoformat(),
        }


@dataclass
class QuickStats:
    """Headline figure of one simulation, used in dashboard listings"""
    simulation_id: str
    performance_index: float
    completed_at: datetime


class MetricsCollector:
    """
    Accumulates performance figures from the snapshot stream.

    Waiting times are Little's law estimates: accumulated queue-seconds
    divided by the number of vehicles (pedestrians) that left the queue.
    The combined index weighs both; lower is better.
    """

    def __init__(self, vehicle_weight: float = 0.7, pedestrian_weight: float = 0.3):
        self.vehicle_weight = vehicle_weight
        self.pedestrian_weight = pedestrian_weight
        self.time_steps = 0
        self.vehicle_queue_seconds = 0.0
        self.pedestrian_queue_seconds = 0.0
        self.vehicles_processed = 0
        self.pedestrians_processed = 0
        self.phase_time: Dict[Phase, float] = {Phase.PHASE_1: 0.0, Phase.PHASE_2: 0.0}
        self._last_time = 0.0

    def on_snapshot(self, snapshot: TrafficSnapshot):
        dt = snapshot.simulation_time - self._last_time
        self._last_time = snapshot.simulation_time

        self.time_steps = snapshot.time_step
        self.vehicle_queue_seconds += snapshot.vehicle_queues.total() * dt
        self.pedestrian_queue_seconds += snapshot.pedestrian_queues.total() * dt
        self.vehicles_processed = snapshot.vehicles_processed
        self.pedestrians_processed = snapshot.pedestrians_processed
        self.phase_time[snapshot.active_phase] += dt

    def get_metrics(self) -> PerformanceMetrics:
        avg_vehicle = (
            self.vehicle_queue_seconds / self.vehicles_processed if self.vehicles_processed else 0.0
        )
        avg_pedestrian = (
            self.pedestrian_queue_seconds / self.pedestrians_processed if self.pedestrians_processed else 0.0
        )
        combined = self.vehicle_weight * avg_vehicle + self.pedestrian_weight * avg_pedestrian

        return PerformanceMetrics(
            total_time_steps=self.time_steps,
            average_vehicle_waiting_time=avg_vehicle,
            average_pedestrian_waiting_time=avg_pedestrian,
            combined_performance_index=combined,
            total_vehicles_processed=self.vehicles_processed,
            total_pedestrians_processed=self.pedestrians_processed,
            phase1_total_time=self.phase_time[Phase.PHASE_1],
            phase2_total_time=self.phase_time[Phase.PHASE_2],
            calculated_at=datetime.now(timezone.utc),
        )

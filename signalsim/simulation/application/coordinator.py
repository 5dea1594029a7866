"""
Glues QueueSimulator and SignalController together once per tick.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional

from ...common.logging import setup_logger, log_execution_time
from ..domain.config import SimulationConfig
from ..domain.entities import TrafficSnapshot
from ..domain.protocols import BernoulliSource, SnapshotSubscriber
from .queue_simulator import QueueSimulator
from .signal_controller import SignalController

logger = setup_logger(__name__)


class TickCoordinator:
    """
    Sole writer of one simulation's state.

    Per tick: advance queues -> densities -> phase-switch check -> snapshot
    -> publish. Queues always advance before the switch check so the new
    green budget is computed from the current tick's densities.
    """

    def __init__(
        self,
        config: SimulationConfig,
        random_source: Optional[BernoulliSource] = None,
        epoch: Optional[datetime] = None,
    ):
        self.config = config
        self.simulator = QueueSimulator(config, random_source)
        self.controller = SignalController(config, start_time=0.0)
        self.epoch = epoch or datetime.now(timezone.utc)
        self.simulation_time = 0.0
        self._subscribers: List[SnapshotSubscriber] = []
        self._latest: Optional[TrafficSnapshot] = None

    @property
    def latest(self) -> Optional[TrafficSnapshot]:
        return self._latest

    def subscribe(self, subscriber: SnapshotSubscriber):
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: SnapshotSubscriber):
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    @log_execution_time(logger)
    def tick(self, dt: float = 1.0) -> TrafficSnapshot:
        """Runs one full tick and returns the published snapshot."""
        self.simulation_time += dt

        self.simulator.advance(self.controller.active_phase)
        densities = self.simulator.densities()
        result = self.controller.tick(self.simulation_time, densities)

        snapshot = self.snapshot(switched=result.switched)
        self._latest = snapshot
        logger.debug(
            f"Tick {snapshot.time_step}: phase={snapshot.active_phase.value} "
            f"vehicles={snapshot.vehicle_queues.as_dict()}"
        )
        self._publish(snapshot)
        return snapshot

    def run(self, steps: int, dt: float = 1.0) -> Iterator[TrafficSnapshot]:
        """Headless loop: yields one snapshot per tick."""
        for _ in range(steps):
            yield self.tick(dt)

    def snapshot(self, switched: bool = False) -> TrafficSnapshot:
        phase1_density, phase2_density = self.simulator.densities()
        elapsed = self.controller.elapsed(self.simulation_time)
        return TrafficSnapshot(
            time_step=self.simulator.time_step,
            timestamp=self.epoch + timedelta(seconds=self.simulation_time),
            simulation_time=self.simulation_time,
            vehicle_queues=self.simulator.vehicle_counts(),
            pedestrian_queues=self.simulator.pedestrian_counts(),
            active_phase=self.controller.active_phase,
            current_green_time=int(math.floor(elapsed)),
            calculated_green_time=self.controller.green_duration,
            phase1_density=phase1_density,
            phase2_density=phase2_density,
            phase_switched=switched,
            vehicles_processed=self.simulator.vehicles_processed,
            pedestrians_processed=self.simulator.pedestrians_processed,
        )

    def _publish(self, snapshot: TrafficSnapshot):
        for subscriber in list(self._subscribers):
            try:
                subscriber.on_snapshot(snapshot)
            except Exception as e:
                logger.error(
                    f"Subscriber {subscriber!r} failed at step {snapshot.time_step}: {e}",
                    exc_info=True,
                )

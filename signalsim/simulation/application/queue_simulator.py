"""
Discrete-time queue model for the four approaches of the intersection.
"""
from typing import Dict, Optional, Tuple

from ..domain.config import SimulationConfig
from ..domain.entities import Direction, DirectionalQueue, Phase, QueueCounts, QueueKind
from ..domain.protocols import BernoulliSource
from .randomness import NumpyBernoulliSource


class QueueSimulator:
    """
    Owns the four vehicle queues and the four pedestrian queues and advances
    them once per tick, conditioned on which phase is green.

    Serviced (green) directions follow a birth-death step:
        count = max(0, count + arrival(λ) - service(σ))
    Blocked (red) directions only accumulate arrivals up to capacity.
    Pedestrians facing the red vehicle phase cross and their queue empties;
    pedestrians facing the green vehicle phase wait and accumulate.
    """

    def __init__(self, config: SimulationConfig, random_source: Optional[BernoulliSource] = None):
        self.config = config
        self.random = random_source or NumpyBernoulliSource(config.seed)
        self.time_step = 0
        self.vehicles_processed = 0
        self.pedestrians_processed = 0

        self.vehicle_queues: Dict[Direction, DirectionalQueue] = {
            d: DirectionalQueue(
                direction=d,
                kind=QueueKind.VEHICLE,
                capacity=config.vehicle_capacity,
                count=config.initial_vehicle_queues.get(d),
            )
            for d in Direction
        }
        self.pedestrian_queues: Dict[Direction, DirectionalQueue] = {
            d: DirectionalQueue(
                direction=d,
                kind=QueueKind.PEDESTRIAN,
                capacity=config.pedestrian_capacity,
                count=config.initial_pedestrian_queues.get(d),
            )
            for d in Direction
        }

    def advance(self, active_phase: Phase) -> None:
        """Advances every queue by one tick."""
        for direction in active_phase.green_directions:
            self._service_vehicles(direction)
        for direction in active_phase.red_directions:
            self._accumulate_vehicles(direction)

        for direction in active_phase.red_directions:
            # Held-vehicle side: everyone waiting crosses in this tick
            self.pedestrians_processed += self.pedestrian_queues[direction].drain()
        for direction in active_phase.green_directions:
            arrivals = self.random.trial(self.config.pedestrian_rates.get(direction))
            self.pedestrian_queues[direction].arrive(arrivals)

        self.time_step += 1

    def _service_vehicles(self, direction: Direction):
        queue = self.vehicle_queues[direction]
        arrivals = self.random.trial(self.config.arrival_rates.get(direction))
        services = self.random.trial(self.config.service_rates.get(direction))

        waiting = queue.count + arrivals
        if waiting > 0:
            self.vehicles_processed += services
        queue.count = min(queue.capacity, max(0, waiting - services))

    def _accumulate_vehicles(self, direction: Direction):
        arrivals = self.random.trial(self.config.arrival_rates.get(direction))
        self.vehicle_queues[direction].arrive(arrivals)

    def density(self, phase: Phase) -> float:
        """Sum of the phase group's vehicle counts normalised by capacity."""
        total = sum(self.vehicle_queues[d].count for d in phase.green_directions)
        return total / self.config.vehicle_capacity

    def densities(self) -> Tuple[float, float]:
        return self.density(Phase.PHASE_1), self.density(Phase.PHASE_2)

    def vehicle_counts(self) -> QueueCounts:
        return QueueCounts.from_queues(self.vehicle_queues)

    def pedestrian_counts(self) -> QueueCounts:
        return QueueCounts.from_queues(self.pedestrian_queues)

"""
Domain entities for the Simulation module.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Tuple


class Phase(Enum):
    """
    Which pair of directions currently has the green vehicle light.
    """
    PHASE_1 = "PHASE_1"  # north-south green
    PHASE_2 = "PHASE_2"  # east-west green

    @property
    def other(self) -> "Phase":
        return Phase.PHASE_2 if self is Phase.PHASE_1 else Phase.PHASE_1

    @property
    def green_directions(self) -> Tuple["Direction", "Direction"]:
        if self is Phase.PHASE_1:
            return (Direction.NORTH, Direction.SOUTH)
        return (Direction.EAST, Direction.WEST)

    @property
    def red_directions(self) -> Tuple["Direction", "Direction"]:
        return self.other.green_directions


class Direction(Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def phase(self) -> Phase:
        """Phase in which this direction has the green vehicle light."""
        if self in (Direction.NORTH, Direction.SOUTH):
            return Phase.PHASE_1
        return Phase.PHASE_2


class QueueKind(Enum):
    VEHICLE = "vehicle"
    PEDESTRIAN = "pedestrian"


class LightColor(Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"


class SimulationStatus(Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    STOPPED = "STOPPED"
    ERROR = "ERROR"


@dataclass
class DirectionalQueue:
    """
    Bounded counter of waiting vehicles or pedestrians for one direction.
    The count never goes negative and never exceeds capacity.
    """
    direction: Direction
    kind: QueueKind
    capacity: int
    count: int = 0

    def arrive(self, n: int = 1) -> int:
        self.count = min(self.capacity, self.count + n)
        return self.count

    def serve(self, n: int = 1) -> int:
        """Removes up to n from the queue, returns how many actually left."""
        served = min(self.count, n)
        self.count -= served
        return served

    def drain(self) -> int:
        """Empties the queue, returns how many were waiting."""
        cleared = self.count
        self.count = 0
        return cleared


@dataclass(frozen=True)
class QueueCounts:
    """
    Immutable per-direction counts, used inside snapshots.
    """
    north: int = 0
    south: int = 0
    east: int = 0
    west: int = 0

    def get(self, direction: Direction) -> int:
        return getattr(self, direction.value)

    def total(self) -> int:
        return self.north + self.south + self.east + self.west

    def as_dict(self) -> Dict[str, int]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }

    @classmethod
    def from_queues(cls, queues: Dict[Direction, DirectionalQueue]) -> "QueueCounts":
        return cls(**{d.value: q.count for d, q in queues.items()})


@dataclass
class SignalTiming:
    """
    State of the two-phase signal. Owned exclusively by the SignalController.
    """
    active_phase: Phase
    phase_start_time: float  # simulated seconds
    green_duration: float  # seconds, bounded [min_green, max_green]
    time_step: int = 0


@dataclass(frozen=True)
class TrafficSnapshot:
    """
    One immutable, fully-populated record of simulation state at a time step.
    """
    time_step: int
    timestamp: datetime
    simulation_time: float
    vehicle_queues: QueueCounts
    pedestrian_queues: QueueCounts
    active_phase: Phase
    current_green_time: int  # whole seconds elapsed in the current phase
    calculated_green_time: float  # green-time budget of the current phase
    phase1_density: float
    phase2_density: float
    phase_switched: bool = False
    vehicles_processed: int = 0
    pedestrians_processed: int = 0

    @property
    def remaining_green_time(self) -> float:
        return max(0.0, self.calculated_green_time - self.current_green_time)


@dataclass(frozen=True)
class ApproachLight:
    """
    Signal head state for one approach (north-south or east-west).
    """
    color: LightColor
    duration: float
    pedestrian_crossing: bool


@dataclass(frozen=True)
class TrafficLightStatus:
    """
    Display view derived from a snapshot.
    """
    time_step: int
    timestamp: datetime
    north_south: ApproachLight
    east_west: ApproachLight
    current_green_time: int
    remaining_green_time: float
    next_phase_countdown: float
    north_south_density: float
    east_west_density: float

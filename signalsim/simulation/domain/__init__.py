"""
Domain module initialization.
"""
from .entities import (
    Phase,
    Direction,
    QueueKind,
    LightColor,
    SimulationStatus,
    DirectionalQueue,
    QueueCounts,
    SignalTiming,
    TrafficSnapshot,
    ApproachLight,
    TrafficLightStatus,
)
from .config import SimulationConfig, DirectionRates, InitialQueues, Scenario
from .protocols import SnapshotSubscriber, BernoulliSource, SimulationBackend

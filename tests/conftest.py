import pytest
from datetime import datetime, timezone
from signalsim.simulation.domain.config import DirectionRates, SimulationConfig
from signalsim.simulation.domain.entities import Phase, QueueCounts, TrafficSnapshot

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FixedSource:
    """Bernoulli source that always returns the same outcome."""

    def __init__(self, outcome: int):
        self.outcome = outcome
        self.calls = 0

    def trial(self, probability: float) -> int:
        self.calls += 1
        return self.outcome


@pytest.fixture
def fixed_source():
    return FixedSource


@pytest.fixture
def epoch():
    return EPOCH


@pytest.fixture
def config():
    return SimulationConfig(name="Test", seed=42)


@pytest.fixture
def frozen_arrivals_config():
    # No arrivals of any kind, every green vehicle is served each tick
    return SimulationConfig(
        name="Drain",
        arrival_rates=DirectionRates.uniform(0.0),
        pedestrian_rates=DirectionRates.uniform(0.0),
        service_rates=DirectionRates.uniform(10.0),
        seed=1,
    )


@pytest.fixture
def make_snapshot():
    def _make(time_step=1, simulation_time=1.0, vehicles=(5, 7, 3, 4), pedestrians=(2, 3, 1, 2),
              phase=Phase.PHASE_1, current_green=10, calculated_green=30.0,
              vehicles_processed=0, pedestrians_processed=0):
        return TrafficSnapshot(
            time_step=time_step,
            timestamp=EPOCH,
            simulation_time=simulation_time,
            vehicle_queues=QueueCounts(*vehicles),
            pedestrian_queues=QueueCounts(*pedestrians),
            active_phase=phase,
            current_green_time=current_green,
            calculated_green_time=calculated_green,
            phase1_density=(vehicles[0] + vehicles[1]) / 15,
            phase2_density=(vehicles[2] + vehicles[3]) / 15,
            vehicles_processed=vehicles_processed,
            pedestrians_processed=pedestrians_processed,
        )
    return _make

"""
Two-phase signal state machine with adaptive green time.
"""
from dataclasses import dataclass
from typing import Tuple

from ...common.logging import setup_logger
from ..domain.config import SimulationConfig
from ..domain.entities import Phase, SignalTiming

logger = setup_logger(__name__)


@dataclass(frozen=True)
class TickResult:
    switched: bool


def adaptive_green_time(
    new_phase: Phase,
    phase1_density: float,
    phase2_density: float,
    min_green: float,
    max_green: float,
) -> float:
    """
    Proportional allocation of the green window between min and max.

    The phase with the larger share of total queue density earns the longer
    window. An empty intersection gets exactly min_green.
    """
    total = phase1_density + phase2_density
    if total <= 0:
        return min_green
    own = phase1_density if new_phase is Phase.PHASE_1 else phase2_density
    ratio = own / total
    return max(min_green, min(max_green, min_green + (max_green - min_green) * ratio))


class SignalController:
    """
    Owns SignalTiming. PHASE_1 <-> PHASE_2 are the only transitions and both
    fire when the elapsed time in the current phase reaches its green budget.
    The budget is only recomputed at a transition.
    """

    def __init__(self, config: SimulationConfig, start_time: float = 0.0):
        self.config = config
        self.timing = SignalTiming(
            active_phase=config.initial_phase,
            phase_start_time=start_time,
            green_duration=config.starting_green_time,
        )

    @property
    def active_phase(self) -> Phase:
        return self.timing.active_phase

    @property
    def green_duration(self) -> float:
        return self.timing.green_duration

    def elapsed(self, now: float) -> float:
        return now - self.timing.phase_start_time

    def remaining(self, now: float) -> float:
        return max(0.0, self.timing.green_duration - self.elapsed(now))

    def tick(self, now: float, densities: Tuple[float, float]) -> TickResult:
        self.timing.time_step += 1
        if self.elapsed(now) < self.timing.green_duration:
            return TickResult(switched=False)

        self._switch(now, densities)
        return TickResult(switched=True)

    def _switch(self, now: float, densities: Tuple[float, float]):
        phase1_density, phase2_density = densities
        previous = self.timing.active_phase

        self.timing.active_phase = previous.other
        self.timing.phase_start_time = now
        self.timing.green_duration = adaptive_green_time(
            self.timing.active_phase,
            phase1_density,
            phase2_density,
            self.config.min_green_time,
            self.config.max_green_time,
        )

        logger.info(
            f"Phase switched {previous.value} -> {self.timing.active_phase.value}, "
            f"green {self.timing.green_duration:.1f}s "
            f"(densities {phase1_density:.2f}/{phase2_density:.2f})"
        )

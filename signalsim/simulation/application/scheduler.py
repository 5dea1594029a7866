"""
Single periodic driver for one simulation instance.
"""
import asyncio
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ...common.exceptions import ConfigurationError, SimulationStateError
from ...common.logging import setup_logger
from ..domain.entities import SimulationStatus
from .coordinator import TickCoordinator

logger = setup_logger(__name__)


@dataclass(frozen=True)
class RunRequest:
    duration_seconds: int = 300
    time_step_millis: int = 1000
    real_time_mode: bool = True

    def __post_init__(self):
        if not 1 <= self.duration_seconds <= 3600:
            raise ConfigurationError(f"duration_seconds={self.duration_seconds} outside [1, 3600]")
        if not 100 <= self.time_step_millis <= 10000:
            raise ConfigurationError(f"time_step_millis={self.time_step_millis} outside [100, 10000]")

    @property
    def time_step_seconds(self) -> float:
        return self.time_step_millis / 1000.0

    @property
    def total_steps(self) -> int:
        return math.ceil(self.duration_seconds * 1000 / self.time_step_millis)


class SimulationRunner:
    """
    Drives a TickCoordinator from one asyncio task.

    Ticks run strictly one after another; in real-time mode they fire on a
    fixed schedule measured from the start, so slow ticks do not accumulate
    drift. Stopping cancels the task between ticks and keeps the last
    snapshot available on the coordinator.
    """

    def __init__(self, coordinator: TickCoordinator):
        self.coordinator = coordinator
        self.status = SimulationStatus.IDLE
        self.request: Optional[RunRequest] = None
        self.steps_completed = 0
        self.message: Optional[str] = None
        self.last_update: datetime = datetime.now(timezone.utc)
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.status is SimulationStatus.RUNNING

    @property
    def total_steps(self) -> int:
        return self.request.total_steps if self.request else 0

    @property
    def progress(self) -> float:
        if not self.total_steps:
            return 0.0
        return 100.0 * self.steps_completed / self.total_steps

    async def start(self, duration_seconds: int = 300, time_step_millis: int = 1000, real_time_mode: bool = True):
        if self.is_running:
            raise SimulationStateError("Simulation already running")

        self.request = RunRequest(duration_seconds, time_step_millis, real_time_mode)
        self.steps_completed = 0
        self.message = None
        self._set_status(SimulationStatus.RUNNING)

        self._task = asyncio.create_task(self._run(self.request))
        logger.info(
            f"Started: {self.request.total_steps} steps of {self.request.time_step_millis}ms "
            f"(real_time={self.request.real_time_mode})"
        )

    async def stop(self):
        if self._task is None:
            return

        task = self._task
        self._task = None
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if self.status is SimulationStatus.RUNNING:
            self._set_status(SimulationStatus.STOPPED)
        logger.info(f"Stopped after {self.steps_completed} steps")

    async def wait(self):
        """Waits for the current run to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _run(self, request: RunRequest):
        loop = asyncio.get_running_loop()
        interval = request.time_step_seconds
        next_fire = loop.time()

        try:
            for _ in range(request.total_steps):
                self.coordinator.tick(interval)
                self.steps_completed += 1
                self.last_update = datetime.now(timezone.utc)

                if request.real_time_mode:
                    next_fire += interval
                    await asyncio.sleep(max(0.0, next_fire - loop.time()))
                else:
                    await asyncio.sleep(0)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.message = str(e)
            self._set_status(SimulationStatus.ERROR)
            logger.error(f"Simulation failed at step {self.steps_completed}: {e}", exc_info=True)
            return

        self._set_status(SimulationStatus.COMPLETED)
        logger.info(f"Completed {self.steps_completed} steps")

    def _set_status(self, status: SimulationStatus):
        self.status = status
        self.last_update = datetime.now(timezone.utc)

"""
Immutable, validated simulation configuration.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ...common.exceptions import ConfigurationError
from .entities import Direction, Phase


class Scenario(Enum):
    BALANCED = "BALANCED"
    HEAVY_NS = "HEAVY_NS"
    RUSH_HOUR = "RUSH_HOUR"
    CUSTOM = "CUSTOM"


class DirectionRates(BaseModel):
    """
    Per-direction rate (events per second). Bounds are checked by the owner.
    """
    north: float = Field(..., ge=0.0)
    south: float = Field(..., ge=0.0)
    east: float = Field(..., ge=0.0)
    west: float = Field(..., ge=0.0)

    model_config = ConfigDict(frozen=True)

    def get(self, direction: Direction) -> float:
        return getattr(self, direction.value)

    @classmethod
    def uniform(cls, rate: float) -> "DirectionRates":
        return cls(north=rate, south=rate, east=rate, west=rate)


class InitialQueues(BaseModel):
    north: int = Field(0, ge=0)
    south: int = Field(0, ge=0)
    east: int = Field(0, ge=0)
    west: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    def get(self, direction: Direction) -> int:
        return getattr(self, direction.value)


def _check_range(name: str, rates: DirectionRates, low: float, high: float):
    for direction in Direction:
        value = rates.get(direction)
        if not low <= value <= high:
            raise ValueError(
                f"{name}.{direction.value}={value} outside [{low}, {high}]"
            )


class SimulationConfig(BaseModel):
    """
    Configuration of one simulation instance. Created once, read-only after.

    Out-of-range values are rejected, never clamped.
    """
    name: str = Field("New Simulation", min_length=1)
    scenario: Scenario = Scenario.CUSTOM

    arrival_rates: DirectionRates = Field(default_factory=lambda: DirectionRates.uniform(0.3))  # λ
    pedestrian_rates: DirectionRates = Field(default_factory=lambda: DirectionRates.uniform(0.1))  # μ
    service_rates: DirectionRates = Field(default_factory=lambda: DirectionRates.uniform(0.5))  # σ

    min_green_time: float = Field(15.0, ge=5, le=30)
    max_green_time: float = Field(45.0, ge=30, le=120)
    yellow_time: float = Field(3.0, ge=1, le=10)
    red_clearance_time: float = Field(2.0, ge=1, le=10)
    pedestrian_weight: float = Field(0.3, ge=0.0, le=1.0)
    switching_threshold: float = Field(2.0, ge=1.0, le=5.0)
    vehicle_performance_weight: float = Field(0.7, ge=0.0, le=1.0)
    pedestrian_performance_weight: float = Field(0.3, ge=0.0, le=1.0)

    vehicle_capacity: int = Field(15, ge=1)
    pedestrian_capacity: int = Field(8, ge=1)
    initial_phase: Phase = Phase.PHASE_1
    initial_green_time: Optional[float] = None
    initial_vehicle_queues: InitialQueues = Field(
        default_factory=lambda: InitialQueues(north=5, south=7, east=3, west=4)
    )
    initial_pedestrian_queues: InitialQueues = Field(
        default_factory=lambda: InitialQueues(north=2, south=3, east=1, west=2)
    )
    seed: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_bounds(self) -> "SimulationConfig":
        _check_range("arrival_rates", self.arrival_rates, 0.0, 10.0)
        _check_range("pedestrian_rates", self.pedestrian_rates, 0.0, 5.0)
        _check_range("service_rates", self.service_rates, 0.1, 10.0)

        if self.min_green_time > self.max_green_time:
            raise ValueError(
                f"min_green_time ({self.min_green_time}) > max_green_time ({self.max_green_time})"
            )
        if self.initial_green_time is not None and not (
            self.min_green_time <= self.initial_green_time <= self.max_green_time
        ):
            raise ValueError("initial_green_time must lie within [min_green_time, max_green_time]")

        for direction in Direction:
            if self.initial_vehicle_queues.get(direction) > self.vehicle_capacity:
                raise ValueError(f"initial vehicle queue {direction.value} exceeds vehicle_capacity")
            if self.initial_pedestrian_queues.get(direction) > self.pedestrian_capacity:
                raise ValueError(f"initial pedestrian queue {direction.value} exceeds pedestrian_capacity")
        return self

    @property
    def starting_green_time(self) -> float:
        if self.initial_green_time is not None:
            return self.initial_green_time
        return (self.min_green_time + self.max_green_time) / 2

    @classmethod
    def build(cls, **values: Any) -> "SimulationConfig":
        """
        Validates and creates a config, raising ConfigurationError on failure.
        """
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    def with_overrides(self, **values: Any) -> "SimulationConfig":
        data: Dict[str, Any] = self.model_dump()
        data.update(values)
        return SimulationConfig.build(**data)

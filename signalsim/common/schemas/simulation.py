from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..metrics import PerformanceMetrics
from ...simulation.domain.config import DirectionRates, Scenario, SimulationConfig
from ...simulation.domain.entities import (
    LightColor,
    Phase,
    SimulationStatus,
    TrafficLightStatus,
    TrafficSnapshot,
)

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for wire schemas: camelCase on the wire, snake_case in Python.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SimulationConfigRequest(CamelModel):
    """
    Flat configuration payload used by the dashboard.
    """
    name: str = Field("New Simulation", min_length=1)
    scenario: Scenario = Field(Scenario.BALANCED, description="Preset the values were derived from")
    lambda_north: float = Field(..., ge=0.0, le=10.0, description="Vehicle arrival rate North")
    lambda_south: float = Field(..., ge=0.0, le=10.0, description="Vehicle arrival rate South")
    lambda_east: float = Field(..., ge=0.0, le=10.0, description="Vehicle arrival rate East")
    lambda_west: float = Field(..., ge=0.0, le=10.0, description="Vehicle arrival rate West")
    mu_north: float = Field(..., ge=0.0, le=5.0, description="Pedestrian arrival rate North")
    mu_south: float = Field(..., ge=0.0, le=5.0, description="Pedestrian arrival rate South")
    mu_east: float = Field(..., ge=0.0, le=5.0, description="Pedestrian arrival rate East")
    mu_west: float = Field(..., ge=0.0, le=5.0, description="Pedestrian arrival rate West")
    sigma_north: float = Field(..., ge=0.1, le=10.0, description="Service rate North")
    sigma_south: float = Field(..., ge=0.1, le=10.0, description="Service rate South")
    sigma_east: float = Field(..., ge=0.1, le=10.0, description="Service rate East")
    sigma_west: float = Field(..., ge=0.1, le=10.0, description="Service rate West")
    min_green_time: float = Field(10, ge=5, le=30)
    max_green_time: float = Field(60, ge=30, le=120)
    yellow_time: float = Field(3, ge=1, le=10)
    red_clearance_time: float = Field(2, ge=1, le=10)
    pedestrian_weight: float = Field(0.3, ge=0.0, le=1.0)
    switching_threshold: float = Field(2.0, ge=1.0, le=5.0)
    vehicle_performance_weight: float = Field(0.7, ge=0.0, le=1.0)
    pedestrian_performance_weight: float = Field(0.3, ge=0.0, le=1.0)
    seed: Optional[int] = Field(None, description="Seed for reproducible runs")

    def to_config(self) -> SimulationConfig:
        return SimulationConfig.build(
            name=self.name,
            scenario=self.scenario,
            arrival_rates=DirectionRates(
                north=self.lambda_north, south=self.lambda_south,
                east=self.lambda_east, west=self.lambda_west,
            ),
            pedestrian_rates=DirectionRates(
                north=self.mu_north, south=self.mu_south,
                east=self.mu_east, west=self.mu_west,
            ),
            service_rates=DirectionRates(
                north=self.sigma_north, south=self.sigma_south,
                east=self.sigma_east, west=self.sigma_west,
            ),
            min_green_time=self.min_green_time,
            max_green_time=self.max_green_time,
            yellow_time=self.yellow_time,
            red_clearance_time=self.red_clearance_time,
            pedestrian_weight=self.pedestrian_weight,
            switching_threshold=self.switching_threshold,
            vehicle_performance_weight=self.vehicle_performance_weight,
            pedestrian_performance_weight=self.pedestrian_performance_weight,
            seed=self.seed,
        )

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "SimulationConfigRequest":
        return cls(
            name=config.name,
            scenario=config.scenario,
            lambda_north=config.arrival_rates.north,
            lambda_south=config.arrival_rates.south,
            lambda_east=config.arrival_rates.east,
            lambda_west=config.arrival_rates.west,
            mu_north=config.pedestrian_rates.north,
            mu_south=config.pedestrian_rates.south,
            mu_east=config.pedestrian_rates.east,
            mu_west=config.pedestrian_rates.west,
            sigma_north=config.service_rates.north,
            sigma_south=config.service_rates.south,
            sigma_east=config.service_rates.east,
            sigma_west=config.service_rates.west,
            min_green_time=config.min_green_time,
            max_green_time=config.max_green_time,
            yellow_time=config.yellow_time,
            red_clearance_time=config.red_clearance_time,
            pedestrian_weight=config.pedestrian_weight,
            switching_threshold=config.switching_threshold,
            vehicle_performance_weight=config.vehicle_performance_weight,
            pedestrian_performance_weight=config.pedestrian_performance_weight,
            seed=config.seed,
        )


class SimulationConfigResponse(SimulationConfigRequest):
    simulation_id: str
    created_at: datetime
    status: SimulationStatus

    @classmethod
    def from_config(cls, config: SimulationConfig, simulation_id: str = "", created_at: Optional[datetime] = None,
                    status: SimulationStatus = SimulationStatus.IDLE) -> "SimulationConfigResponse":
        request = SimulationConfigRequest.from_config(config)
        return cls(
            simulation_id=simulation_id,
            created_at=created_at or datetime.now(timezone.utc),
            status=status,
            **request.model_dump(),
        )


class SimulationRequest(CamelModel):
    duration_seconds: int = Field(300, ge=1, le=3600)
    time_step_millis: int = Field(1000, ge=100, le=10000)
    real_time_mode: bool = True


class TrafficStateResponse(CamelModel):
    time_step: int = Field(..., ge=0)
    timestamp: datetime
    vehicles_north: int = Field(..., ge=0)
    vehicles_south: int = Field(..., ge=0)
    vehicles_east: int = Field(..., ge=0)
    vehicles_west: int = Field(..., ge=0)
    pedestrians_north: int = Field(..., ge=0)
    pedestrians_south: int = Field(..., ge=0)
    pedestrians_east: int = Field(..., ge=0)
    pedestrians_west: int = Field(..., ge=0)
    current_phase: Phase
    current_green_time: int = Field(..., ge=0)
    calculated_green_time: float
    phase1_density: float = Field(..., ge=0.0)
    phase2_density: float = Field(..., ge=0.0)

    @classmethod
    def from_snapshot(cls, snapshot: TrafficSnapshot) -> "TrafficStateResponse":
        v, p = snapshot.vehicle_queues, snapshot.pedestrian_queues
        return cls(
            time_step=snapshot.time_step,
            timestamp=snapshot.timestamp,
            vehicles_north=v.north,
            vehicles_south=v.south,
            vehicles_east=v.east,
            vehicles_west=v.west,
            pedestrians_north=p.north,
            pedestrians_south=p.south,
            pedestrians_east=p.east,
            pedestrians_west=p.west,
            current_phase=snapshot.active_phase,
            current_green_time=snapshot.current_green_time,
            calculated_green_time=snapshot.calculated_green_time,
            phase1_density=snapshot.phase1_density,
            phase2_density=snapshot.phase2_density,
        )


class ApproachLightResponse(CamelModel):
    color: LightColor
    duration: float = Field(..., ge=0.0)
    pedestrian_crossing: bool


class TrafficLightStatusResponse(CamelModel):
    simulation_id: str
    time_step: int
    timestamp: datetime
    north_south: ApproachLightResponse
    east_west: ApproachLightResponse
    current_green_time: int
    remaining_green_time: float
    next_phase_countdown: float
    north_south_density: float
    east_west_density: float

    @classmethod
    def from_status(cls, simulation_id: str, status: TrafficLightStatus) -> "TrafficLightStatusResponse":
        def light(approach):
            return ApproachLightResponse(
                color=approach.color,
                duration=approach.duration,
                pedestrian_crossing=approach.pedestrian_crossing,
            )

        return cls(
            simulation_id=simulation_id,
            time_step=status.time_step,
            timestamp=status.timestamp,
            north_south=light(status.north_south),
            east_west=light(status.east_west),
            current_green_time=status.current_green_time,
            remaining_green_time=status.remaining_green_time,
            next_phase_countdown=status.next_phase_countdown,
            north_south_density=status.north_south_density,
            east_west_density=status.east_west_density,
        )


class SimulationStatusResponse(CamelModel):
    simulation_id: str
    status: SimulationStatus
    current_time_step: int = Field(..., ge=0)
    total_time_steps: int = Field(..., ge=0)
    progress: float = Field(..., ge=0.0, le=100.0)
    current_state: Optional[TrafficStateResponse] = None
    message: Optional[str] = None
    last_update: datetime

    @classmethod
    def from_status(cls, status: Dict[str, Any]) -> "SimulationStatusResponse":
        data = dict(status)
        snapshot = data.pop("current_state", None)
        current = TrafficStateResponse.from_snapshot(snapshot) if snapshot is not None else None
        return cls(current_state=current, **data)


class PerformanceMetricsResponse(CamelModel):
    simulation_id: str
    total_time_steps: int
    average_vehicle_waiting_time: float
    average_pedestrian_waiting_time: float
    combined_performance_index: float
    total_vehicles_processed: int
    total_pedestrians_processed: int
    phase1_total_time: float
    phase2_total_time: float
    calculated_at: datetime

    @classmethod
    def from_metrics(cls, simulation_id: str, metrics: PerformanceMetrics) -> "PerformanceMetricsResponse":
        return cls(simulation_id=simulation_id, **asdict(metrics))


class QuickStatsResponse(CamelModel):
    simulation_id: str
    performance_index: float
    completed_at: datetime


class DashboardSummaryResponse(CamelModel):
    """
    Aggregate view over every simulation known to the backend.
    """
    total_simulations: int = Field(..., ge=0)
    active_simulations: int = Field(..., ge=0)
    completed_simulations: int = Field(..., ge=0)
    average_performance_index: float = Field(..., ge=0.0)
    best_performing_scenario: Optional[str] = None
    most_recent_simulation: Optional[SimulationConfigResponse] = None
    recent_performance: List[QuickStatsResponse] = Field(default_factory=list)
    last_update: datetime


class ComparisonReportResponse(CamelModel):
    simulations: List[SimulationConfigResponse]
    metrics: List[PerformanceMetricsResponse]
    insights: List[str]


class ScenarioTemplate(SimulationConfigRequest):
    description: str = ""


class ApiResponse(CamelModel, Generic[T]):
    """
    Envelope used by every endpoint.
    """
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    errors: Optional[List[str]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

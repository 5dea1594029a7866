from .simulation import (
    ApiResponse,
    ApproachLightResponse,
    ComparisonReportResponse,
    DashboardSummaryResponse,
    PerformanceMetricsResponse,
    QuickStatsResponse,
    ScenarioTemplate,
    SimulationConfigRequest,
    SimulationConfigResponse,
    SimulationRequest,
    SimulationStatusResponse,
    TrafficLightStatusResponse,
    TrafficStateResponse,
)

__all__ = [
    "ApiResponse",
    "ApproachLightResponse",
    "ComparisonReportResponse",
    "DashboardSummaryResponse",
    "PerformanceMetricsResponse",
    "QuickStatsResponse",
    "ScenarioTemplate",
    "SimulationConfigRequest",
    "SimulationConfigResponse",
    "SimulationRequest",
    "SimulationStatusResponse",
    "TrafficLightStatusResponse",
    "TrafficStateResponse",
]

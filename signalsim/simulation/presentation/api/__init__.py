"""
API package.
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ....common.config import ConfigManager
from ....common.exceptions import (
    BackendError,
    BackendUnavailableError,
    ConfigurationError,
    ScenarioNotFoundError,
    SimulationExistsError,
    SimulationNotFoundError,
    SimulationStateError,
)
from ...application.scenarios import ScenarioCatalog
from ...application.services.simulation_manager import SimulationManager
from ...domain.config import SimulationConfig
from ...domain.protocols import SimulationBackend
from ...infrastructure.backends import LocalSimulationBackend
from ...infrastructure.broadcast.realtime_broadcaster import RealtimeBroadcaster
from .responses import error_response
from .routes import dashboard, scenarios, simulations, streaming

# Initialize main app
app = FastAPI(title="Adaptive Signal Simulation API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(simulations.app.router, tags=["simulations"])
app.include_router(streaming.app.router, tags=["streaming"])
app.include_router(dashboard.app.router, tags=["dashboard"])
app.include_router(scenarios.app.router, tags=["scenarios"])


@app.exception_handler(SimulationNotFoundError)
async def simulation_not_found(request: Request, exc: SimulationNotFoundError):
    return error_response(404, str(exc))


@app.exception_handler(ScenarioNotFoundError)
async def scenario_not_found(request: Request, exc: ScenarioNotFoundError):
    return error_response(404, str(exc))


@app.exception_handler(ConfigurationError)
async def invalid_configuration(request: Request, exc: ConfigurationError):
    return error_response(422, "Invalid configuration", [str(exc)])


@app.exception_handler(SimulationStateError)
async def invalid_state(request: Request, exc: SimulationStateError):
    return error_response(409, str(exc))


@app.exception_handler(BackendUnavailableError)
async def backend_unavailable(request: Request, exc: BackendUnavailableError):
    return error_response(503, str(exc))


@app.exception_handler(BackendError)
async def backend_failed(request: Request, exc: BackendError):
    # upstream 4xx pass through, upstream 5xx become a bad gateway
    status_code = exc.status_code if exc.status_code and exc.status_code < 500 else 502
    return error_response(status_code, str(exc))


@app.exception_handler(SimulationExistsError)
async def simulation_exists(request: Request, exc: SimulationExistsError):
    return error_response(409, str(exc))


def init_app(
    backend: SimulationBackend,
    broadcaster: RealtimeBroadcaster,
    catalog: ScenarioCatalog,
    base_config: Optional[SimulationConfig] = None,
):
    """Wires the shared components into every router."""
    simulations.init_backend(backend)
    streaming.init_broadcaster(broadcaster)
    scenarios.init_catalog(catalog, base_config)


# Initialize shared components
broadcaster = RealtimeBroadcaster()
manager = SimulationManager(broadcaster)
catalog = ScenarioCatalog(ConfigManager().load_scenarios())
init_app(LocalSimulationBackend(manager, catalog), broadcaster, catalog)

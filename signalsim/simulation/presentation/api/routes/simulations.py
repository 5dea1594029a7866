"""
API for managing simulations.
"""
from fastapi import FastAPI, HTTPException
from typing import Optional

from ....domain.protocols import SimulationBackend
from .....common.schemas.simulation import SimulationConfigRequest, SimulationRequest
from ..responses import envelope

app = FastAPI()

# Singleton
_backend: Optional[SimulationBackend] = None

def init_backend(backend: SimulationBackend):
    global _backend
    _backend = backend

def get_backend() -> SimulationBackend:
    if _backend is None:
        raise HTTPException(500, "Backend not initialized")
    return _backend

@app.post("/simulations")
async def create_simulation(config: SimulationConfigRequest):
    """
    Creates a simulation and returns its id.

    Body example:
    {
        "name": "Morning peak",
        "scenario": "BALANCED",
        "lambdaNorth": 0.3, "lambdaSouth": 0.3, "lambdaEast": 0.3, "lambdaWest": 0.3,
        "muNorth": 0.1, "muSouth": 0.1, "muEast": 0.1, "muWest": 0.1,
        "sigmaNorth": 0.5, "sigmaSouth": 0.5, "sigmaEast": 0.5, "sigmaWest": 0.5,
        "minGreenTime": 10, "maxGreenTime": 60
    }
    """
    backend = get_backend()
    simulation_id = await backend.create(config.model_dump(mode="json", by_alias=True))
    return envelope(simulation_id, "Simulation created")

@app.get("/simulations")
async def list_simulations():
    backend = get_backend()
    return envelope(await backend.list())

@app.post("/simulations/{simulation_id}/start")
async def start_simulation(simulation_id: str, request: Optional[SimulationRequest] = None):
    """Starts the periodic timer of a simulation."""
    backend = get_backend()
    request = request or SimulationRequest()
    await backend.start(simulation_id, request.model_dump(mode="json", by_alias=True))
    return envelope(message=f"Simulation {simulation_id} started")

@app.post("/simulations/{simulation_id}/stop")
async def stop_simulation(simulation_id: str):
    """Stops a simulation, keeping its last state."""
    backend = get_backend()
    await backend.stop(simulation_id)
    return envelope(message=f"Simulation {simulation_id} stopped")

@app.get("/simulations/{simulation_id}/status")
async def get_simulation_status(simulation_id: str):
    backend = get_backend()
    return envelope(await backend.get_status(simulation_id))

@app.get("/simulations/{simulation_id}/config")
async def get_simulation_config(simulation_id: str):
    backend = get_backend()
    return envelope(await backend.get_config(simulation_id))

@app.get("/simulations/{simulation_id}/metrics")
async def get_simulation_metrics(simulation_id: str):
    backend = get_backend()
    return envelope(await backend.get_metrics(simulation_id))

@app.delete("/simulations/{simulation_id}")
async def delete_simulation(simulation_id: str):
    backend = get_backend()
    await backend.delete(simulation_id)
    return envelope(message=f"Simulation {simulation_id} deleted")

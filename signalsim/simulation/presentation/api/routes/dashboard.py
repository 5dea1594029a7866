"""
Display-oriented views of running simulations.
"""
from fastapi import Body, FastAPI, Query
from typing import List

from .simulations import get_backend
from ..responses import envelope

app = FastAPI()

@app.get("/dashboard/summary")
async def get_summary():
    """Counts, average performance index and best scenario across all simulations."""
    backend = get_backend()
    return envelope(await backend.get_summary())

@app.get("/dashboard/trafficlight/{simulation_id}")
async def get_traffic_light_status(simulation_id: str):
    """Per-approach light colors, remaining green and pedestrian crossing flags."""
    backend = get_backend()
    return envelope(await backend.get_traffic_light(simulation_id))

@app.get("/dashboard/topperformers")
async def get_top_performers(limit: int = Query(5, ge=1, le=100)):
    """Simulations ranked by combined performance index, lowest first."""
    backend = get_backend()
    return envelope(await backend.get_top_performers(limit))

@app.post("/dashboard/compare")
async def compare_simulations(simulation_ids: List[str] = Body(...)):
    """
    Side-by-side metrics for the given simulations.

    Body example: ["3f2c...", "9ab1..."]
    """
    backend = get_backend()
    return envelope(await backend.compare(simulation_ids))

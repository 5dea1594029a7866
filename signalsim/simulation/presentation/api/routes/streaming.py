"""
Endpoints for realtime streaming.
"""
from fastapi import FastAPI, HTTPException
from sse_starlette.sse import EventSourceResponse
import asyncio
import json
from typing import Optional
from ....infrastructure.broadcast.realtime_broadcaster import END_OF_STREAM, RealtimeBroadcaster
from .simulations import get_backend

app = FastAPI()

# Singleton broadcaster
_broadcaster: Optional[RealtimeBroadcaster] = None

def init_broadcaster(broadcaster: RealtimeBroadcaster):
    global _broadcaster
    _broadcaster = broadcaster

def get_broadcaster() -> RealtimeBroadcaster:
    if _broadcaster is None:
        raise HTTPException(500, "Broadcaster not initialized")
    return _broadcaster

async def traffic_events(broadcaster: RealtimeBroadcaster, simulation_id: str, queue: asyncio.Queue):
    """Yields SSE events from a client queue until the simulation is deleted."""
    try:
        while True:
            data = await queue.get()
            if data is END_OF_STREAM:
                break
            yield {
                "event": "traffic",
                "data": json.dumps(data)
            }
    finally:
        await broadcaster.unsubscribe(simulation_id, queue)

@app.get("/stream/{simulation_id}")
async def stream_simulation(simulation_id: str):
    """
    Server-Sent Events endpoint, one `traffic` event per tick.

    Frontend usage:
    ```javascript
    const eventSource = new EventSource('/stream/<simulationId>');
    eventSource.addEventListener('traffic', (event) => {
        const state = JSON.parse(event.data);
        console.log('Phase:', state.currentPhase);
    });
    ```
    """
    broadcaster = get_broadcaster()
    await get_backend().get_status(simulation_id)  # 404 for unknown ids
    queue = await broadcaster.subscribe(simulation_id)
    return EventSourceResponse(traffic_events(broadcaster, simulation_id, queue))

@app.get("/snapshot/{simulation_id}")
async def get_snapshot(simulation_id: str):
    """Gets latest state of a simulation (polling fallback)."""
    broadcaster = get_broadcaster()
    latest = broadcaster.latest(simulation_id)
    if latest is None:
        raise HTTPException(404, "No snapshot published yet")
    return latest

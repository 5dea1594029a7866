import asyncio
from typing import Dict, Set

from ....common.logging import setup_logger
from ....common.schemas.simulation import TrafficStateResponse
from ...domain.entities import TrafficSnapshot

logger = setup_logger(__name__)

# Queued to a client when its channel is closed
END_OF_STREAM = None


class RealtimeBroadcaster:
    """
    Pub/sub system to transmit snapshots to connected clients.
    One channel per simulation; every client gets its own bounded queue.
    """

    def __init__(self):
        # Subscribers per simulation
        self._subscribers: Dict[str, Set[asyncio.Queue]] = {}
        self._lock = asyncio.Lock()

        # Cache latest state per simulation (for new subscribers)
        self._latest_state: Dict[str, dict] = {}

    @property
    def channels(self):
        return list(self._subscribers.keys())

    def latest(self, simulation_id: str):
        return self._latest_state.get(simulation_id)

    async def subscribe(self, simulation_id: str, queue_size: int = 50) -> asyncio.Queue:
        """
        Subscribes a client to updates from a specific simulation.
        Returns an async queue that will receive the data.
        """
        queue = asyncio.Queue(maxsize=queue_size)

        async with self._lock:
            if simulation_id not in self._subscribers:
                self._subscribers[simulation_id] = set()
            self._subscribers[simulation_id].add(queue)

        # Send latest known state immediately
        if simulation_id in self._latest_state:
            try:
                queue.put_nowait(self._latest_state[simulation_id])
            except asyncio.QueueFull:
                pass

        return queue

    async def unsubscribe(self, simulation_id: str, queue: asyncio.Queue):
        """Removes a subscriber."""
        async with self._lock:
            if simulation_id in self._subscribers:
                self._subscribers[simulation_id].discard(queue)
                if not self._subscribers[simulation_id]:
                    del self._subscribers[simulation_id]

    async def broadcast(self, simulation_id: str, data: dict):
        """
        Transmits data to all subscribers of a simulation.
        Non-blocking: if a client is slow, it is skipped.
        """
        async with self._lock:
            self.publish(simulation_id, data)

    def publish(self, simulation_id: str, data: dict):
        """
        Synchronous variant used from inside a tick. Never awaits.
        """
        self._latest_state[simulation_id] = data

        for queue in self._subscribers.get(simulation_id, set()).copy():
            try:
                queue.put_nowait(data)
            except asyncio.QueueFull:
                logger.warning(f"Skipping slow client for {simulation_id}")

    def forget(self, simulation_id: str):
        """
        Drops a deleted simulation: its cached state goes and every open
        client queue receives END_OF_STREAM.
        """
        self._latest_state.pop(simulation_id, None)

        for queue in self._subscribers.pop(simulation_id, set()):
            if queue.full():
                # make room for the marker, the client is closing anyway
                queue.get_nowait()
            queue.put_nowait(END_OF_STREAM)

    def serialize_snapshot(self, snapshot: TrafficSnapshot) -> dict:
        """
        Converts a TrafficSnapshot to a JSON-serializable dict.
        """
        return TrafficStateResponse.from_snapshot(snapshot).model_dump(mode="json", by_alias=True)


class BroadcastSubscriber:
    """
    SnapshotSubscriber that forwards every snapshot to one broadcaster channel.
    """

    def __init__(self, broadcaster: RealtimeBroadcaster, simulation_id: str):
        self.broadcaster = broadcaster
        self.simulation_id = simulation_id

    def on_snapshot(self, snapshot: TrafficSnapshot):
        self.broadcaster.publish(self.simulation_id, self.broadcaster.serialize_snapshot(snapshot))

    def __repr__(self):
        return f"BroadcastSubscriber({self.simulation_id})"

"""
Application module initialization.
"""
from .queue_simulator import QueueSimulator
from .signal_controller import SignalController, TickResult, adaptive_green_time
from .coordinator import TickCoordinator
from .scheduler import SimulationRunner, RunRequest
from .projections import traffic_light_status
from .scenarios import ScenarioCatalog

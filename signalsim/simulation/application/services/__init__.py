from .simulation_manager import SimulationManager, SimulationInstance

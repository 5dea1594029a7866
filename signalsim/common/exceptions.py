from typing import Optional

class SimulationError(Exception):
    """Base exception for all simulation module errors."""
    pass

class ConfigurationError(SimulationError):
    """Raised when a simulation configuration is invalid."""
    pass

class SimulationNotFoundError(SimulationError):
    """Raised when a simulation id is unknown."""

    def __init__(self, simulation_id: str):
        super().__init__(f"Simulation {simulation_id} not found")
        self.simulation_id = simulation_id

class SimulationStateError(SimulationError):
    """Raised when a start/stop command is not valid in the current status."""
    pass

class SimulationExistsError(SimulationError):
    """Raised when a simulation id is already registered."""

    def __init__(self, simulation_id: str):
        super().__init__(f"Simulation {simulation_id} already exists")
        self.simulation_id = simulation_id

class ScenarioNotFoundError(SimulationError):
    """Raised when a scenario template does not exist."""

    def __init__(self, name: str):
        super().__init__(f"Scenario {name} not found")
        self.name = name

class BackendError(SimulationError):
    """Raised when a simulation backend rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class BackendUnavailableError(BackendError):
    """Raised when a simulation backend cannot be reached."""
    pass

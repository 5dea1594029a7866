"""
Simulation backends and the factory that selects one from configuration.
"""
from typing import Optional

from ....common.config.models import BackendConfig
from ...application.scenarios import ScenarioCatalog
from ...application.services.simulation_manager import SimulationManager
from .local_backend import LocalSimulationBackend
from .remote_backend import RemoteBackend
from .failover_backend import FailoverBackend


def create_backend(config: BackendConfig, manager: SimulationManager, scenarios: Optional[ScenarioCatalog] = None):
    """
    Builds the backend named by `config.mode`: local, remote or auto
    (remote with local fallback).
    """
    mode = config.mode.lower()
    if mode == "local":
        return LocalSimulationBackend(manager, scenarios)
    remote = RemoteBackend(config.remote_url, timeout=config.timeout_seconds)
    if mode == "remote":
        return remote
    if mode == "auto":
        return FailoverBackend(remote, LocalSimulationBackend(manager, scenarios))
    raise ValueError(f"Unknown backend mode: {config.mode}")


__all__ = [
    "LocalSimulationBackend",
    "RemoteBackend",
    "FailoverBackend",
    "create_backend",
]

from dataclasses import dataclass, field
from typing import Any, Dict

@dataclass
class RunConfig:
    duration_seconds: int = 300
    time_step_millis: int = 1000
    real_time_mode: bool = True

@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000

@dataclass
class BackendConfig:
    mode: str = "local"  # local | remote | auto
    remote_url: str = "http://localhost:8080/api"
    timeout_seconds: float = 5.0

@dataclass
class AppConfig:
    simulation: Dict[str, Any] = field(default_factory=dict) # validated by SimulationConfig
    run: RunConfig = field(default_factory=RunConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    log_level: str = "INFO"

from omegaconf import DictConfig, OmegaConf
from pathlib import Path
from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError
from .models import AppConfig
from ...simulation.domain.config import SimulationConfig

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "conf"

class ConfigManager:
    """Centralizes loading and validation of configuration files"""

    REQUIRED_SIMULATION_KEYS = ['arrival_rates', 'service_rates', 'min_green_time', 'max_green_time']

    def __init__(self, config_dir: Path = DEFAULT_CONFIG_DIR):
        self.config_dir = Path(config_dir)

    def _load(self, path: Path) -> DictConfig:
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
        return OmegaConf.load(path)

    def load_app_config(self, overrides: Optional[list] = None) -> DictConfig:
        """Loads conf/config.yaml on top of the structured defaults, then CLI dotlist overrides"""
        base = OmegaConf.structured(AppConfig)
        root = self._load(self.config_dir / "config.yaml")
        root.pop("defaults", None)
        simulation = self._load(self.config_dir / "simulation" / "default.yaml")
        cfg = OmegaConf.merge(base, root, {"simulation": simulation})
        if overrides:
            cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))
        return cfg

    def load_simulation_config(self, profile: str = "default") -> SimulationConfig:
        """Loads a simulation profile and validates it"""
        cfg = self._load(self.config_dir / "simulation" / f"{profile}.yaml")
        return self.to_simulation_config(cfg)

    def to_simulation_config(self, cfg: Any) -> SimulationConfig:
        if isinstance(cfg, DictConfig):
            values: Dict[str, Any] = OmegaConf.to_container(cfg, resolve=True)
        else:
            values = dict(cfg)

        for key in self.REQUIRED_SIMULATION_KEYS:
            if key not in values:
                raise ConfigurationError(f"Missing required config key: {key}")

        return SimulationConfig.build(**values)

    def load_scenarios(self) -> Dict[str, Dict[str, Any]]:
        """Loads the scenario templates, keyed by upper-case name"""
        cfg = self._load(self.config_dir / "simulation" / "scenarios.yaml")
        if "scenarios" not in cfg:
            raise ConfigurationError("Missing required config key: scenarios")
        scenarios = OmegaConf.to_container(cfg.scenarios, resolve=True)
        return {name.upper(): values for name, values in scenarios.items()}

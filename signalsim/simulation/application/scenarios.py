"""
Preset scenario templates.
"""
from typing import Any, Dict, List

from ...common.exceptions import ScenarioNotFoundError
from ..domain.config import Scenario, SimulationConfig

# Fields of a template that replace the base configuration.
TEMPLATE_FIELDS = (
    "arrival_rates",
    "pedestrian_rates",
    "service_rates",
    "min_green_time",
    "max_green_time",
    "yellow_time",
    "red_clearance_time",
    "pedestrian_weight",
    "switching_threshold",
    "vehicle_performance_weight",
    "pedestrian_performance_weight",
)


class ScenarioCatalog:
    """
    Named templates applied on top of a base configuration.
    """

    def __init__(self, templates: Dict[str, Dict[str, Any]]):
        self._templates = {name.upper(): dict(values) for name, values in templates.items()}

    def names(self) -> List[str]:
        return list(self._templates.keys())

    def description(self, name: str) -> str:
        return self.get(name).get("description", "")

    def get(self, name: str) -> Dict[str, Any]:
        try:
            return self._templates[name.upper()]
        except KeyError:
            raise ScenarioNotFoundError(name) from None

    def apply(self, name: str, base: SimulationConfig) -> SimulationConfig:
        """Returns a new validated config with the template's values."""
        template = self.get(name)
        overrides = {k: v for k, v in template.items() if k in TEMPLATE_FIELDS}
        scenario = Scenario(name.upper()) if name.upper() in Scenario.__members__ else Scenario.CUSTOM
        return base.with_overrides(scenario=scenario, **overrides)

    def templates(self, base: SimulationConfig) -> Dict[str, SimulationConfig]:
        return {name: self.apply(name, base) for name in self.names()}

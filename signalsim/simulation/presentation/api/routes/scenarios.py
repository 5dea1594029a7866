"""
Preset scenario templates.
"""
from fastapi import FastAPI, HTTPException
from typing import Optional

from .....common.schemas.simulation import ScenarioTemplate, SimulationConfigRequest
from ....application.scenarios import ScenarioCatalog
from ....domain.config import SimulationConfig
from .simulations import get_backend
from ..responses import envelope

app = FastAPI()

# Singletons
_catalog: Optional[ScenarioCatalog] = None
_base_config: SimulationConfig = SimulationConfig()

def init_catalog(catalog: ScenarioCatalog, base_config: Optional[SimulationConfig] = None):
    global _catalog, _base_config
    _catalog = catalog
    if base_config is not None:
        _base_config = base_config

def get_catalog() -> ScenarioCatalog:
    if _catalog is None:
        raise HTTPException(500, "Scenario catalog not initialized")
    return _catalog

@app.get("/scenarios")
async def list_scenarios():
    catalog = get_catalog()
    templates = []
    for name, config in catalog.templates(_base_config).items():
        values = SimulationConfigRequest.from_config(config).model_dump()
        values["name"] = name
        template = ScenarioTemplate(description=catalog.description(name), **values)
        templates.append(template.model_dump(mode="json", by_alias=True))
    return envelope(templates)

@app.post("/scenarios/{name}/apply/{simulation_id}")
async def apply_scenario(name: str, simulation_id: str):
    """Replaces the configuration of an idle simulation with a template."""
    get_catalog().get(name)  # 404 before touching the simulation
    backend = get_backend()
    await backend.apply_scenario(name, simulation_id)
    return envelope(message=f"Scenario {name.upper()} applied to {simulation_id}")

import json
import pytest
import httpx
import respx
from unittest.mock import AsyncMock, MagicMock
from signalsim.common.config import BackendConfig, ConfigManager
from signalsim.common.exceptions import (
    BackendError, BackendUnavailableError, ScenarioNotFoundError, SimulationNotFoundError,
)
from signalsim.simulation.application.scenarios import ScenarioCatalog
from signalsim.simulation.application.services.simulation_manager import SimulationManager
from signalsim.simulation.infrastructure.backends import (
    FailoverBackend, LocalSimulationBackend, RemoteBackend, create_backend,
)

CONFIG_PAYLOAD = {
    "name": "Morning peak",
    "scenario": "BALANCED",
    "lambdaNorth": 0.3, "lambdaSouth": 0.3, "lambdaEast": 0.3, "lambdaWest": 0.3,
    "muNorth": 0.1, "muSouth": 0.1, "muEast": 0.1, "muWest": 0.1,
    "sigmaNorth": 0.5, "sigmaSouth": 0.5, "sigmaEast": 0.5, "sigmaWest": 0.5,
    "minGreenTime": 15, "maxGreenTime": 45,
    "seed": 3,
}

# --- Local ---
@pytest.fixture
def local_backend():
    catalog = ScenarioCatalog(ConfigManager().load_scenarios())
    return LocalSimulationBackend(SimulationManager(), catalog)

@pytest.mark.asyncio
async def test_local_create_and_describe(local_backend):
    sim_id = await local_backend.create(CONFIG_PAYLOAD)

    config = await local_backend.get_config(sim_id)
    assert config["simulationId"] == sim_id
    assert config["name"] == "Morning peak"
    assert config["lambdaNorth"] == 0.3
    assert config["status"] == "IDLE"
    assert [c["simulationId"] for c in await local_backend.list()] == [sim_id]

@pytest.mark.asyncio
async def test_local_run_status_and_metrics(local_backend):
    sim_id = await local_backend.create(CONFIG_PAYLOAD)
    await local_backend.start(sim_id, {"durationSeconds": 5, "timeStepMillis": 1000, "realTimeMode": False})
    await local_backend.manager.get(sim_id).runner.wait()

    status = await local_backend.get_status(sim_id)
    assert status["status"] == "COMPLETED"
    assert status["currentTimeStep"] == 5
    assert status["currentState"]["timeStep"] == 5

    metrics = await local_backend.get_metrics(sim_id)
    assert metrics["simulationId"] == sim_id
    assert metrics["totalTimeSteps"] == 5

    light = await local_backend.get_traffic_light(sim_id)
    assert light["northSouth"]["color"] in ("GREEN", "YELLOW", "RED")

@pytest.mark.asyncio
async def test_local_apply_scenario(local_backend):
    sim_id = await local_backend.create(CONFIG_PAYLOAD)
    await local_backend.apply_scenario("RUSH_HOUR", sim_id)

    config = await local_backend.get_config(sim_id)
    assert config["scenario"] == "RUSH_HOUR"
    assert config["lambdaNorth"] == 0.7
    assert config["maxGreenTime"] == 90

    with pytest.raises(ScenarioNotFoundError):
        await local_backend.apply_scenario("GRIDLOCK", sim_id)

@pytest.mark.asyncio
async def test_local_dashboard_analytics(local_backend):
    first = await local_backend.create(CONFIG_PAYLOAD)
    second = await local_backend.create({**CONFIG_PAYLOAD, "name": "Evening", "seed": 4})
    for sim_id in (first, second):
        await local_backend.start(sim_id, {"durationSeconds": 20, "realTimeMode": False})
        await local_backend.manager.get(sim_id).runner.wait()

    summary = await local_backend.get_summary()
    assert summary["totalSimulations"] == 2
    assert summary["completedSimulations"] == 2
    assert summary["bestPerformingScenario"] == "BALANCED"
    assert summary["mostRecentSimulation"]["simulationId"] in (first, second)
    assert len(summary["recentPerformance"]) == 2
    assert "performanceIndex" in summary["recentPerformance"][0]

    top = await local_backend.get_top_performers(limit=1)
    assert len(top) == 1
    assert "combinedPerformanceIndex" in top[0]

    report = await local_backend.compare([first, second])
    assert [s["simulationId"] for s in report["simulations"]] == [first, second]
    assert [m["simulationId"] for m in report["metrics"]] == [first, second]
    assert len(report["insights"]) == 3

@pytest.mark.asyncio
async def test_local_delete(local_backend):
    sim_id = await local_backend.create(CONFIG_PAYLOAD)
    await local_backend.delete(sim_id)
    with pytest.raises(SimulationNotFoundError):
        await local_backend.get_status(sim_id)

# --- Remote ---
BASE_URL = "http://sim.test/api"

@pytest.fixture
def remote():
    return RemoteBackend(BASE_URL)

@pytest.mark.asyncio
async def test_remote_unwraps_envelope(remote):
    with respx.mock(assert_all_called=True, using="httpx") as router:
        route = router.post(f"{BASE_URL}/simulations").respond(
            200, json={"success": True, "message": "Simulation created", "data": "abc"}
        )

        assert await remote.create(CONFIG_PAYLOAD) == "abc"
        assert route.calls.call_count == 1

@pytest.mark.asyncio
async def test_remote_traffic_light_path(remote):
    with respx.mock(assert_all_called=True, using="httpx") as router:
        router.get(f"{BASE_URL}/dashboard/trafficlight/abc").respond(
            200, json={"success": True, "data": {"timeStep": 3}}
        )

        assert await remote.get_traffic_light("abc") == {"timeStep": 3}

@pytest.mark.asyncio
async def test_remote_not_found(remote):
    with respx.mock(using="httpx") as router:
        router.get(f"{BASE_URL}/simulations/abc/status").respond(404, json={"success": False, "message": "nope"})

        with pytest.raises(SimulationNotFoundError) as exc:
            await remote.get_status("abc")
    assert exc.value.simulation_id == "abc"

@pytest.mark.asyncio
async def test_remote_server_error_is_backend_error(remote):
    with respx.mock(using="httpx") as router:
        router.get(f"{BASE_URL}/simulations").respond(503)

        with pytest.raises(BackendError) as exc:
            await remote.list()
    # The remote answered, so this is not a connection failure
    assert not isinstance(exc.value, BackendUnavailableError)
    assert exc.value.status_code == 503

@pytest.mark.asyncio
async def test_remote_rejected_request(remote):
    with respx.mock(using="httpx") as router:
        router.post(f"{BASE_URL}/simulations/abc/start").respond(
            200, json={"success": False, "message": "Already running"}
        )

        with pytest.raises(BackendError) as exc:
            await remote.start("abc", {})
    assert str(exc.value) == "Already running"
    assert not isinstance(exc.value, BackendUnavailableError)

@pytest.mark.asyncio
async def test_remote_connection_error(remote):
    with respx.mock(using="httpx") as router:
        router.get(f"{BASE_URL}/simulations/abc/config").mock(side_effect=httpx.ConnectError("boom"))

        with pytest.raises(BackendUnavailableError):
            await remote.get_config("abc")

@pytest.mark.asyncio
async def test_remote_dashboard_paths(remote):
    with respx.mock(assert_all_called=True, using="httpx") as router:
        router.get(f"{BASE_URL}/dashboard/summary").respond(
            200, json={"success": True, "data": {"totalSimulations": 2}}
        )
        top = router.get(f"{BASE_URL}/dashboard/topperformers", params={"limit": "3"}).respond(
            200, json={"success": True, "data": None}
        )
        compare = router.post(f"{BASE_URL}/dashboard/compare").respond(
            200, json={"success": True, "data": {"insights": ["ok"]}}
        )

        assert await remote.get_summary() == {"totalSimulations": 2}
        assert await remote.get_top_performers(limit=3) == []
        assert await remote.compare(["a", "b"]) == {"insights": ["ok"]}
    assert top.calls.call_count == 1
    assert json.loads(compare.calls.last.request.content) == ["a", "b"]

# --- Failover ---
@pytest.fixture
def primary():
    backend = MagicMock()
    backend.name = "remote"
    backend.create = AsyncMock(side_effect=BackendUnavailableError("down"))
    backend.list = AsyncMock(return_value=[])
    backend.stop = AsyncMock(side_effect=BackendError("bad request", status_code=400))
    return backend

@pytest.fixture
def fallback():
    backend = MagicMock()
    backend.name = "local"
    backend.create = AsyncMock(return_value="local-id")
    backend.list = AsyncMock(return_value=[{"simulationId": "local-id"}])
    return backend

@pytest.mark.asyncio
async def test_failover_uses_primary_while_healthy(primary, fallback):
    backend = FailoverBackend(primary, fallback)
    assert await backend.list() == []
    assert not backend.failed_over
    assert backend.name == "remote"

@pytest.mark.asyncio
async def test_failover_swaps_on_unavailable(primary, fallback):
    backend = FailoverBackend(primary, fallback)

    assert await backend.create({}) == "local-id"
    assert backend.failed_over
    assert backend.name == "local"

    # Later calls go straight to the fallback
    assert await backend.list() == [{"simulationId": "local-id"}]
    primary.list.assert_not_called()

@pytest.mark.asyncio
async def test_failover_propagates_other_errors(primary, fallback):
    backend = FailoverBackend(primary, fallback)
    with pytest.raises(BackendError):
        await backend.stop("abc")
    assert not backend.failed_over

@pytest.mark.asyncio
async def test_failover_keeps_primary_on_server_error(fallback):
    remote = RemoteBackend(BASE_URL)
    backend = FailoverBackend(remote, fallback)
    with respx.mock(using="httpx") as router:
        router.get(f"{BASE_URL}/simulations").respond(500, json={"success": False, "message": "boom"})

        with pytest.raises(BackendError):
            await backend.list()
    assert not backend.failed_over
    fallback.list.assert_not_called()

@pytest.mark.asyncio
async def test_failover_delegates_dashboard(primary, fallback):
    primary.get_summary = AsyncMock(side_effect=BackendUnavailableError("down"))
    fallback.get_summary = AsyncMock(return_value={"totalSimulations": 0})
    fallback.get_top_performers = AsyncMock(return_value=[])
    fallback.compare = AsyncMock(return_value={"insights": []})
    backend = FailoverBackend(primary, fallback)

    assert await backend.get_summary() == {"totalSimulations": 0}
    assert await backend.get_top_performers(2) == []
    assert await backend.compare(["x"]) == {"insights": []}
    fallback.get_top_performers.assert_awaited_once_with(2)
    fallback.compare.assert_awaited_once_with(["x"])

# --- Factory ---
def test_create_backend_modes():
    manager = SimulationManager()
    assert isinstance(create_backend(BackendConfig(mode="local"), manager), LocalSimulationBackend)
    assert isinstance(create_backend(BackendConfig(mode="remote"), manager), RemoteBackend)

    auto = create_backend(BackendConfig(mode="AUTO"), manager)
    assert isinstance(auto, FailoverBackend)
    assert isinstance(auto.primary, RemoteBackend)
    assert isinstance(auto.fallback, LocalSimulationBackend)

    with pytest.raises(ValueError):
        create_backend(BackendConfig(mode="cluster"), manager)

import pytest
from unittest.mock import MagicMock
from datetime import datetime, timezone
from signalsim.common.exceptions import (
    ConfigurationError, SimulationExistsError, SimulationNotFoundError, SimulationStateError,
)
from signalsim.simulation.application.services.simulation_manager import SimulationInstance, SimulationManager
from signalsim.simulation.domain.config import Scenario, SimulationConfig
from signalsim.simulation.domain.entities import LightColor, SimulationStatus
from signalsim.simulation.infrastructure.broadcast.realtime_broadcaster import RealtimeBroadcaster

@pytest.fixture
def manager():
    return SimulationManager()

def test_create_simulation(manager, config):
    sim_id = manager.create(config)

    instance = manager.get(sim_id)
    assert isinstance(instance, SimulationInstance)
    assert instance.config is config
    assert instance.status is SimulationStatus.IDLE
    assert [i.simulation_id for i in manager.list()] == [sim_id]

def test_create_duplicate_id(manager, config):
    manager.create(config, simulation_id="sim1")
    with pytest.raises(SimulationExistsError):
        manager.create(config, simulation_id="sim1")

def test_unknown_simulation(manager):
    with pytest.raises(SimulationNotFoundError):
        manager.get("missing")

@pytest.mark.asyncio
async def test_start_collects_metrics(manager, config):
    sim_id = manager.create(config)
    await manager.start(sim_id, duration_seconds=30, real_time_mode=False)
    await manager.get(sim_id).runner.wait()

    status = manager.get_status(sim_id)
    assert status["status"] is SimulationStatus.COMPLETED
    assert status["current_time_step"] == 30
    assert status["total_time_steps"] == 30
    assert status["progress"] == 100.0
    assert status["current_state"].time_step == 30

    metrics = manager.get_metrics(sim_id)
    assert metrics.total_time_steps == 30
    assert metrics.phase1_total_time + metrics.phase2_total_time == pytest.approx(30.0)

@pytest.mark.asyncio
async def test_simulations_are_independent(manager):
    a = manager.create(SimulationConfig(seed=1))
    b = manager.create(SimulationConfig(seed=1))
    await manager.start(a, duration_seconds=10, real_time_mode=False)
    await manager.get(a).runner.wait()

    assert manager.get(a).coordinator.simulator.time_step == 10
    assert manager.get(b).coordinator.simulator.time_step == 0
    assert manager.get(b).status is SimulationStatus.IDLE

@pytest.mark.asyncio
async def test_snapshots_reach_broadcaster(config):
    broadcaster = RealtimeBroadcaster()
    manager = SimulationManager(broadcaster)
    sim_id = manager.create(config)
    queue = await broadcaster.subscribe(sim_id)

    await manager.start(sim_id, duration_seconds=3, real_time_mode=False)
    await manager.get(sim_id).runner.wait()

    assert [(await queue.get())["timeStep"] for _ in range(3)] == [1, 2, 3]

@pytest.mark.asyncio
async def test_delete_closes_stream(config):
    broadcaster = RealtimeBroadcaster()
    manager = SimulationManager(broadcaster)
    sim_id = manager.create(config)
    queue = await broadcaster.subscribe(sim_id)

    await manager.delete(sim_id)

    assert await queue.get() is None
    assert sim_id not in broadcaster.channels

@pytest.mark.asyncio
async def test_replace_config_while_running(manager, config):
    sim_id = manager.create(config)
    await manager.start(sim_id, duration_seconds=300, real_time_mode=True)
    try:
        with pytest.raises(SimulationStateError):
            manager.replace_config(sim_id, config.with_overrides(max_green_time=60))
    finally:
        await manager.stop_all()
    assert manager.get(sim_id).status is SimulationStatus.STOPPED

def test_replace_config_keeps_identity(manager, config):
    sim_id = manager.create(config)
    created_at = manager.get(sim_id).created_at

    manager.replace_config(sim_id, config.with_overrides(max_green_time=60))

    assert manager.get_config(sim_id).max_green_time == 60
    assert manager.get(sim_id).created_at == created_at

@pytest.mark.asyncio
async def test_delete(config):
    broadcaster = MagicMock()
    manager = SimulationManager(broadcaster)
    sim_id = manager.create(config)

    await manager.delete(sim_id)

    broadcaster.forget.assert_called_once_with(sim_id)
    with pytest.raises(SimulationNotFoundError):
        manager.get(sim_id)

def test_traffic_light_before_start(manager, config):
    sim_id = manager.create(config)
    status = manager.get_traffic_light(sim_id)

    assert status.time_step == 0
    assert status.north_south.color is LightColor.GREEN
    assert status.east_west.color is LightColor.RED
    assert status.remaining_green_time == pytest.approx(30.0)

async def run_to_completion(manager, sim_id, steps=60):
    await manager.start(sim_id, duration_seconds=steps, real_time_mode=False)
    await manager.get(sim_id).runner.wait()

def test_summary_of_empty_manager(manager):
    summary = manager.summary()
    assert summary.total_simulations == 0
    assert summary.average_performance_index == 0.0
    assert summary.best_performing_scenario is None
    assert summary.most_recent_simulation is None
    assert summary.recent_performance == []

@pytest.mark.asyncio
async def test_summary_aggregates_finished_runs():
    manager = SimulationManager()
    balanced = manager.create(SimulationConfig(name="Balanced", scenario=Scenario.BALANCED, seed=1))
    rush = manager.create(SimulationConfig(name="Rush", scenario=Scenario.RUSH_HOUR, seed=2))
    idle = manager.create(SimulationConfig(name="Idle", seed=3))
    manager.get(idle).created_at = datetime(2030, 1, 1, tzinfo=timezone.utc)
    await run_to_completion(manager, balanced)
    await run_to_completion(manager, rush)

    summary = manager.summary()

    indexes = {
        sim_id: manager.get_metrics(sim_id).combined_performance_index for sim_id in (balanced, rush)
    }
    best = min(indexes, key=indexes.get)
    assert summary.total_simulations == 3
    assert summary.active_simulations == 0
    assert summary.completed_simulations == 2
    # The idle simulation has no traffic processed and is left out of the average
    assert summary.average_performance_index == pytest.approx(sum(indexes.values()) / 2)
    assert summary.best_performing_scenario == manager.get_config(best).scenario.value
    assert summary.most_recent_simulation.simulation_id == idle
    assert {s.simulation_id for s in summary.recent_performance} == {balanced, rush}

@pytest.mark.asyncio
async def test_top_performers_are_ranked_lowest_first():
    manager = SimulationManager()
    ids = [manager.create(SimulationConfig(seed=seed)) for seed in (1, 2, 3)]
    idle = manager.create(SimulationConfig(seed=4))
    for sim_id in ids:
        await run_to_completion(manager, sim_id)

    ranked = manager.top_performers(limit=10)

    assert [sim_id for sim_id, _ in ranked if sim_id == idle] == []
    indexes = [metrics.combined_performance_index for _, metrics in ranked]
    assert indexes == sorted(indexes)
    assert len(ranked) == 3
    assert len(manager.top_performers(limit=2)) == 2

@pytest.mark.asyncio
async def test_compare_reports_best_and_worst():
    manager = SimulationManager()
    a = manager.create(SimulationConfig(name="A", seed=1))
    b = manager.create(SimulationConfig(name="B", seed=2))
    await run_to_completion(manager, a)
    await run_to_completion(manager, b)

    report = manager.compare([a, b, a])

    assert [i.simulation_id for i in report.simulations] == [a, b]
    assert len(report.metrics) == 2
    best = a if report.metrics[0].combined_performance_index <= report.metrics[1].combined_performance_index else b
    assert best in report.insights[0]
    assert "lowest" in report.insights[0]
    assert "highest" in report.insights[1]
    assert report.insights[2].startswith("Average vehicle waiting time")

def test_compare_idle_simulation(manager, config):
    sim_id = manager.create(config)
    report = manager.compare([sim_id])
    assert report.insights == [
        f"{sim_id} has not processed any traffic yet",
        "Run at least two simulations to rank them",
    ]

def test_compare_validation(manager):
    with pytest.raises(ConfigurationError):
        manager.compare([])
    with pytest.raises(SimulationNotFoundError):
        manager.compare(["missing"])

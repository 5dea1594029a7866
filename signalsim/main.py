import argparse


def run_headless(cfg) -> None:
    """Runs one simulation to completion without a server, printing snapshots."""
    from omegaconf import OmegaConf
    from .common.config import ConfigManager
    from .common.logging import set_log_level
    from .common.metrics import MetricsCollector
    from .simulation.application.coordinator import TickCoordinator
    from .simulation.application.scheduler import RunRequest

    set_log_level(cfg.log_level)
    config = ConfigManager().to_simulation_config(cfg.simulation)
    request = RunRequest(**OmegaConf.to_container(cfg.run, resolve=True))

    coordinator = TickCoordinator(config)
    metrics = MetricsCollector(
        vehicle_weight=config.vehicle_performance_weight,
        pedestrian_weight=config.pedestrian_performance_weight,
    )
    coordinator.subscribe(metrics)

    print(f"Running '{config.name}' ({config.scenario.value}) for {request.total_steps} steps...")
    try:
        for snapshot in coordinator.run(request.total_steps, request.time_step_seconds):
            marker = " *switch*" if snapshot.phase_switched else ""
            print(
                f"[{snapshot.time_step:5d}] {snapshot.active_phase.value} "
                f"green {snapshot.current_green_time:3d}/{snapshot.calculated_green_time:5.1f}s "
                f"vehicles {snapshot.vehicle_queues.as_dict()} "
                f"pedestrians {snapshot.pedestrian_queues.as_dict()}{marker}"
            )
    except KeyboardInterrupt:
        print("\nStopping simulation...")

    for key, value in metrics.get_metrics().to_dict().items():
        print(f"{key}: {value}")


def run_server(cfg) -> None:
    import uvicorn
    from omegaconf import OmegaConf
    from .common.logging import set_log_level
    from .simulation.presentation.api import app, broadcaster, catalog, init_app, manager
    from .simulation.infrastructure.backends import create_backend
    from .common.config import BackendConfig, ConfigManager

    set_log_level(cfg.log_level)
    base_config = ConfigManager().to_simulation_config(cfg.simulation)
    backend = create_backend(BackendConfig(**OmegaConf.to_container(cfg.backend, resolve=True)), manager, catalog)
    init_app(backend, broadcaster, catalog, base_config)

    @app.on_event("shutdown")
    async def shutdown_event():
        await manager.stop_all()

    print(f"Starting server at http://{cfg.server.host}:{cfg.server.port} (backend: {cfg.backend.mode})")
    uvicorn.run(app, host=cfg.server.host, port=cfg.server.port)


def main():
    """
    Main entry point. Extra arguments are OmegaConf dotlist overrides,
    e.g. `simulation.min_green_time=10 run.real_time_mode=false`.
    """
    parser = argparse.ArgumentParser(description="Adaptive traffic signal simulation")
    parser.add_argument('module', choices=['simulate', 'server'], help="Module to run")

    args, unknown = parser.parse_known_args()

    from .common.config import ConfigManager
    cfg = ConfigManager().load_app_config(unknown)

    print(f"Starting module: {args.module}")
    if args.module == 'simulate':
        run_headless(cfg)
    elif args.module == 'server':
        run_server(cfg)


if __name__ == "__main__":
    main()

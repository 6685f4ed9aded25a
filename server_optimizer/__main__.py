#!/usr/bin/env python3
"""
Server Optimizer - Entry Point

Runs the dynamic FPS service against the virtual game server, optionally
driven by a scripted load scenario.

Usage:
    python -m server_optimizer                           # Idle until Ctrl+C
    python -m server_optimizer --config my.yaml          # Use custom config file
    python -m server_optimizer --scenario busy_evening   # Play a load scenario
    python -m server_optimizer --dry-run                 # Print config and exit
    python -m server_optimizer --verbose                 # Enable debug logging
"""

import argparse
import asyncio
import sys

from server_optimizer.common.config import OptimizerConfig
from server_optimizer.common.exceptions import OptimizerError
from server_optimizer.common.logging_setup import get_service_logger, configure_logging
from server_optimizer.service import OptimizerService
from server_optimizer.services.config import DEFAULT_CONFIG_PATH, ConfigStore
from server_optimizer.simulator import SCENARIOS, VirtualServer, get_scenario, run_scenario

logger = get_service_logger("main")


def print_startup_banner(config: OptimizerConfig, config_path: str) -> None:
    """Print startup information."""
    print()
    print("=" * 60)
    print("  SERVER OPTIMIZER - DYNAMIC FPS")
    print("=" * 60)
    print()
    print(f"  Config file:          {config_path}")
    print(f"  Dynamic adjustment:   {'Enabled' if config.enabled else 'Disabled'}")
    print(f"  FPS when empty:       {config.idle_fps}")
    print(f"  Base FPS:             {config.base_fps}")
    print(f"  Maximum FPS:          {config.max_fps}")
    print(f"  Increment per player: {config.fps_increment_per_player}")
    print(f"  Check interval:       {config.check_interval_s}s")
    print(f"  Shutdown FPS:         {config.neutral_fps}")
    print(f"  Language:             {config.default_language}")
    print(f"  Health endpoint:      http://{config.service.health_host}:{config.service.health_port}/health")
    print()
    print("=" * 60)
    print()


async def main_async(config_path: str, scenario: str | None, step_delay: float) -> None:
    """
    Async main function.

    Args:
        config_path: Path to the YAML configuration file
        scenario: Scenario to play, or None to idle until a signal
        step_delay: Pause between scenario steps in seconds
    """
    server = VirtualServer()
    service = OptimizerService(server, ConfigStore(config_path))

    await service.start()
    server.add_load_listener(service.loop.on_load_changed)
    server.set_command_handler(service.commands)

    try:
        if scenario is None:
            await service.wait_for_shutdown()
        else:
            await run_scenario(server, get_scenario(scenario), step_delay)
    finally:
        await service.stop()

    logger.info(f"fps.limit history: {server.applied_values}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Dynamically adjusts server FPS based on player count"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})"
    )
    parser.add_argument(
        "--scenario", "-s",
        choices=sorted(SCENARIOS),
        help="Play a scripted load scenario against the virtual server, then exit"
    )
    parser.add_argument(
        "--step-delay",
        type=float,
        default=0.5,
        help="Seconds between scenario steps (default: 0.5)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print configuration and exit without starting the service"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging"
    )

    args = parser.parse_args()

    config = ConfigStore(args.config).load()
    configure_logging(
        "DEBUG" if args.verbose else config.service.log_level,
        json_format=config.service.log_format.lower() == "json",
    )

    print_startup_banner(config, args.config)

    if args.dry_run:
        print("Dry run mode - exiting without starting the service")
        sys.exit(0)

    logger.info("Starting server optimizer...")
    print("Press Ctrl+C to stop\n")

    try:
        asyncio.run(main_async(args.config, args.scenario, args.step_delay))
    except KeyboardInterrupt:
        print("\nStopped by user")
    except OptimizerError as e:
        logger.error(e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()

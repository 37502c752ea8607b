"""Main entry point for occupy."""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from occupy import get_version
from occupy.core.config import load_config, validate_config, with_overrides
from occupy.occupancy import create_occupancy_controller
from occupy.occupancy.controller import OccupancyController
from occupy.occupancy.disk_padding import DiskPaddingManager
from occupy.occupancy.monitor import ResourceMonitor
from occupy.utils.logging_config import setup_logging
from occupy.utils.validation import ValidationError, parse_duration

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="occupy",
        description="Hold memory, CPU and disk utilization at target percentages."
    )
    parser.add_argument("-m", "--memory", type=float, help="target memory usage percent")
    parser.add_argument("-c", "--cpu", type=float, help="target CPU usage percent")
    parser.add_argument("-d", "--disk", type=float, help="target disk usage percent")
    parser.add_argument("-i", "--interval", help="sampling interval, e.g. 5s, 500ms, 1m")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--temp-dir", help="directory for disk padding files")
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="delete padding files left by earlier runs and exit"
    )
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser


async def run(controller: OccupancyController):
    """Run the controller until SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    stop_tasks = []

    def request_stop():
        logger.info("Shutdown signal received")
        stop_tasks.append(asyncio.ensure_future(controller.stop()))

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_stop)
        except NotImplementedError:
            # Windows: KeyboardInterrupt cancels start(), which still cleans up
            pass

    await controller.start()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Load configuration
    config = load_config(args.config)

    try:
        interval = parse_duration(args.interval) if args.interval else None
    except ValidationError as e:
        print(f"Invalid interval: {e}", file=sys.stderr)
        return 1

    config = with_overrides(
        config,
        memory_percent=args.memory,
        cpu_percent=args.cpu,
        disk_percent=args.disk,
        interval_seconds=interval,
        work_dir=args.temp_dir
    )
    if args.debug:
        config.debug_mode = True

    # Setup logging
    setup_logging(config.debug_mode, config.log_level, config.log_dir)

    if args.cleanup:
        deleted = DiskPaddingManager(config.disk).cleanup()
        logger.info(f"Cleanup finished, {deleted} padding file(s) removed")
        return 0

    # Validate configuration
    errors = validate_config(config)
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        return 1

    logger.info("=" * 60)
    logger.info(f"occupy v{get_version()} starting")
    logger.info("=" * 60)

    monitor = ResourceMonitor()
    work_dir = Path(config.disk.resolved_work_dir())
    summary_path = work_dir if work_dir.exists() else Path(work_dir.anchor or "/")
    logger.info(monitor.get_system_summary(str(summary_path)))

    controller = create_occupancy_controller(config, monitor)
    try:
        asyncio.run(run(controller))
    except KeyboardInterrupt:
        logger.info("Interrupted")

    logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Lakshman Rekha entry point.

``python -m src.main`` configures logging, loads the government datasets
and logs a summary.  With ``--monitor`` it keeps running the periodic
safety check against wall-clock time until interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

import structlog

from config.settings import Settings, settings
from src.data.repository import DatasetRepository
from src.services.escalation import (
    AsyncioScheduler,
    EscalationController,
    EscalationTimings,
    LoggingAlertTone,
    LoggingCallPlacer,
)
from src.services.region_risk import RegionRiskService
from src.services.safety_check import PeriodicSafetyCheck

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Structured logging configuration
# ---------------------------------------------------------------------------


def _configure_logging(config: Settings = settings) -> None:
    """Set up structlog with JSON or console rendering based on settings."""
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    level = logging.getLevelNamesMapping().get(config.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_safety_check(
    repository: DatasetRepository,
    config: Settings = settings,
) -> PeriodicSafetyCheck:
    """Wire a wall-clock safety check with logging capabilities."""
    controller = EscalationController(
        call_placer=LoggingCallPlacer(),
        tone_factory=LoggingAlertTone,
        scheduler=AsyncioScheduler(tick_seconds=config.tick_seconds),
        timings=EscalationTimings.from_settings(config),
    )
    return PeriodicSafetyCheck(
        controller,
        interval_seconds=config.safety_check_interval_seconds,
        poll_seconds=config.safety_check_poll_seconds,
        region_risk=RegionRiskService(repository),
    )


async def _monitor(repository: DatasetRepository) -> None:
    check = build_safety_check(repository, settings)
    task = check.start()
    try:
        await task
    finally:
        await check.stop()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="lakshman-rekha")
    parser.add_argument(
        "--monitor",
        action="store_true",
        help="keep running the periodic safety check",
    )
    args = parser.parse_args(argv)

    _configure_logging(settings)
    logger.info("app.starting", env=settings.env, data_dir=str(settings.data_dir))

    repository = DatasetRepository(settings).load()
    logger.info("app.datasets_ready", **repository.summary())

    if args.monitor:
        try:
            asyncio.run(_monitor(repository))
        except KeyboardInterrupt:
            logger.info("app.interrupted")


if __name__ == "__main__":
    main()

"""
Run scheduling.

A run is triggered once (single-shot) or on a fixed-rate timer. Each tick
builds a fresh executor; a failing run is logged and the timer keeps going.
"""

import asyncio
import logging

from .services import Services

logger = logging.getLogger(__name__)


async def run_once(services: Services) -> None:
    """Execute a single monitoring run."""
    executor = services.domain_checker()
    await executor.run()


async def run_periodic(services: Services, interval_hours: float) -> None:
    """
    Run forever at a fixed rate, starting immediately.

    Args:
        services: Service container
        interval_hours: Hours between run starts
    """
    interval = interval_hours * 3600
    loop = asyncio.get_running_loop()
    next_run = loop.time()

    logger.info(f"Periodic expiry check started (every {interval_hours}h)")

    while True:
        try:
            await run_once(services)
        except Exception as e:
            logger.error(f"Periodic check failed: {e}", exc_info=True)

        next_run += interval
        # Skip ticks missed while a long run was in progress
        while next_run <= loop.time():
            next_run += interval

        await asyncio.sleep(next_run - loop.time())

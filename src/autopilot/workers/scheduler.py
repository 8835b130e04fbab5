"""Background loop that runs the job runner on a fixed interval."""

import asyncio
import logging

logger = logging.getLogger(__name__)


async def run_scheduler(app, poll_interval: int) -> None:
    """Background task that runs one job batch every ``poll_interval`` seconds."""
    logger.info("Job scheduler started (poll_interval=%ds)", poll_interval)

    while True:
        try:
            await asyncio.sleep(poll_interval)

            runner = getattr(app.state, "job_runner", None)
            if not runner:
                continue

            results = await runner.run_once()
            if results:
                logger.info("Scheduler ran %d job(s)", len(results))

        except asyncio.CancelledError:
            logger.info("Job scheduler stopped")
            break
        except Exception as exc:
            logger.exception("Scheduler error: %s", exc)
            # Continue running despite errors


async def run_forever(runner, poll_interval: int) -> None:
    """Standalone worker loop used by the CLI."""
    logger.info("Job worker started (poll_interval=%ds)", poll_interval)
    while True:
        try:
            await runner.run_once()
        except Exception as exc:
            logger.exception("Worker batch error: %s", exc)
        await asyncio.sleep(poll_interval)

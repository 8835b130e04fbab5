"""Job runner: picks due jobs and drives them through the job state machine.

    queued --claim--> running --ok--> done
    running --error, attempts < max--> queued (run_after = now + backoff)
    running --error, attempts >= max--> failed
    running --unknown type--> failed
    running --lease expired--> queued, or failed when attempts are exhausted

Jobs of one batch run one after another. A job's failure is recorded on
that job alone and never stops the batch.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from autopilot.errors.exceptions import UnknownJobTypeError
from autopilot.logging_config import bind_job_context, clear_context
from autopilot.models.enums import JobState
from autopilot.repositories.job_repo import JobRepository
from autopilot.workers.base import WorkerServices
from autopilot.workers.registry import get_worker

logger = logging.getLogger(__name__)

_LEASE_EXPIRED = "lease expired before the job finished"


def compute_backoff(attempts: int, base_seconds: int = 30, multiplier: int = 4) -> timedelta:
    """Delay before retry number ``attempts``: 30s, 120s, 480s, ... by default."""
    return timedelta(seconds=base_seconds * multiplier ** max(attempts - 1, 0))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRunner:
    """Runs one batch of due jobs per :meth:`run_once` call."""

    def __init__(
        self,
        session_factory,
        services: WorkerServices,
        batch_size: int = 5,
        backoff_base_seconds: int = 30,
        backoff_multiplier: int = 4,
        lease_seconds: int = 600,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.session_factory = session_factory
        self.services = services
        self.batch_size = batch_size
        self.backoff_base_seconds = backoff_base_seconds
        self.backoff_multiplier = backoff_multiplier
        self.lease = timedelta(seconds=lease_seconds)
        self.clock = clock

    @classmethod
    def from_settings(cls, settings, session_factory, services: WorkerServices) -> "JobRunner":
        return cls(
            session_factory,
            services,
            batch_size=settings.worker_batch_size,
            backoff_base_seconds=settings.job_backoff_base_seconds,
            backoff_multiplier=settings.job_backoff_multiplier,
            lease_seconds=settings.job_lease_seconds,
        )

    async def run_once(self) -> list[dict]:
        """Reclaim expired leases, then process up to ``batch_size`` due jobs.

        Returns:
            One outcome dict per job processed, e.g.
            ``{"id": ..., "state": "retrying", "error": ..., "nextRun": ...}``.
        """
        now = self.clock()
        await self.reclaim_expired(now)

        async with self.session_factory() as session:
            jobs = await JobRepository(session).list_due(now, self.batch_size)

        results = []
        for job in jobs:
            outcome = await self._run_job(job)
            if outcome is not None:
                results.append(outcome)

        if results:
            logger.info("Job runner processed %d job(s)", len(results))
        return results

    async def reclaim_expired(self, now: datetime) -> int:
        """Return jobs stuck in ``running`` past their lease to the queue."""
        async with self.session_factory() as session:
            repo = JobRepository(session)
            expired = await repo.list_expired_leases(now)
            for job in expired:
                if job.attempts >= job.max_attempts:
                    await repo.mark_failed(job.job_id, _LEASE_EXPIRED, now)
                else:
                    await repo.requeue(job.job_id, _LEASE_EXPIRED, now, now)
                logger.warning("Reclaimed job %s (type=%s) after lease expiry", job.job_id, job.job_type)
            await session.commit()
        return len(expired)

    async def _run_job(self, job) -> dict | None:
        claimed_at = self.clock()
        async with self.session_factory() as session:
            repo = JobRepository(session)
            if not await repo.claim(job.job_id, claimed_at, claimed_at + self.lease):
                await session.commit()
                logger.debug("Job %s was claimed by another runner", job.job_id)
                return None
            await session.commit()

            attempts = job.attempts + 1
            bind_job_context(job.job_id, job.job_type, job.seller_id)
            try:
                worker = get_worker(job.job_type, self.services)
                output = await worker.process(job, session)
                if not await repo.mark_done(job.job_id, output or {}, self.clock()):
                    logger.warning("Job %s finished after losing its lease", job.job_id)
                await session.commit()
                logger.info("Job %s done (type=%s, attempt=%d)", job.job_id, job.job_type, attempts)
                return {"id": job.job_id, "state": JobState.DONE.value}
            except Exception as exc:
                await session.rollback()
                error = str(exc) or exc.__class__.__name__
                logger.exception(
                    "Job %s failed (type=%s, attempt=%d/%d)",
                    job.job_id, job.job_type, attempts, job.max_attempts,
                )
                return await self._record_failure(session, repo, job, attempts, exc, error)
            finally:
                clear_context()

    async def _record_failure(self, session, repo, job, attempts: int, exc: Exception, error: str) -> dict:
        now = self.clock()
        if isinstance(exc, UnknownJobTypeError) or attempts >= job.max_attempts:
            await repo.mark_failed(job.job_id, error, now)
            await session.commit()
            return {"id": job.job_id, "state": JobState.FAILED.value, "error": error}

        run_after = now + compute_backoff(attempts, self.backoff_base_seconds, self.backoff_multiplier)
        await repo.requeue(job.job_id, error, run_after, now)
        await session.commit()
        return {
            "id": job.job_id,
            "state": "retrying",
            "error": error,
            "nextRun": run_after.isoformat(),
        }

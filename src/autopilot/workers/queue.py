"""Job creation: the only way work reaches the worker."""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.config import settings
from autopilot.db.models.job import JobRow
from autopilot.models.enums import JobState, JobType
from autopilot.repositories.job_repo import JobRepository
from autopilot.services.id_generator import generate_id


async def enqueue_job(
    session: AsyncSession,
    job_type: JobType,
    seller_id: str,
    payload: dict | None = None,
    max_attempts: int | None = None,
) -> JobRow:
    """Create a job record with ``state=queued``, ``attempts=0``, ``run_after=now``.

    The caller commits.
    """
    now = datetime.now(timezone.utc)
    return await JobRepository(session).create(
        job_id=generate_id("job_"),
        job_type=str(job_type),
        seller_id=seller_id,
        input=payload or {},
        state=JobState.QUEUED,
        attempts=0,
        max_attempts=max_attempts or settings.job_max_attempts,
        run_after=now,
        created_at=now,
        updated_at=now,
    )

"""Job repository: the only place job lifecycle columns are written."""

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.job import JobRow
from autopilot.models.enums import JobState
from autopilot.repositories.base import BaseRepository


class JobRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, JobRow)

    async def get(self, job_id: str) -> JobRow | None:
        return await self.get_by_id("job_id", job_id)

    async def list_due(self, now: datetime, limit: int) -> list[JobRow]:
        """Queued jobs whose run_after has passed, oldest first."""
        stmt = (
            select(JobRow)
            .where(JobRow.state == JobState.QUEUED, JobRow.run_after <= now)
            .order_by(JobRow.created_at.asc(), JobRow.job_id.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_open(self, seller_id: str, job_type: str) -> list[JobRow]:
        """Queued or running jobs of one type for a seller."""
        stmt = select(JobRow).where(
            JobRow.seller_id == seller_id,
            JobRow.job_type == job_type,
            JobRow.state.in_([JobState.QUEUED, JobState.RUNNING]),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_expired_leases(self, now: datetime) -> list[JobRow]:
        stmt = select(JobRow).where(
            JobRow.state == JobState.RUNNING,
            JobRow.locked_until.is_not(None),
            JobRow.locked_until < now,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _transition(self, job_id: str, from_state: JobState, **values: Any) -> bool:
        stmt = (
            update(JobRow)
            .where(JobRow.job_id == job_id, JobRow.state == from_state)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def claim(self, job_id: str, now: datetime, locked_until: datetime) -> bool:
        """Move a queued job to running and count the attempt.

        Conditional on the job still being queued and due, so of two
        overlapping workers at most one wins.
        """
        stmt = (
            update(JobRow)
            .where(
                JobRow.job_id == job_id,
                JobRow.state == JobState.QUEUED,
                JobRow.run_after <= now,
            )
            .values(
                state=JobState.RUNNING,
                attempts=JobRow.attempts + 1,
                locked_until=locked_until,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_done(self, job_id: str, output: dict, now: datetime) -> bool:
        return await self._transition(
            job_id, JobState.RUNNING,
            state=JobState.DONE, output=output, error=None, locked_until=None, updated_at=now,
        )

    async def mark_failed(self, job_id: str, error: str, now: datetime) -> bool:
        return await self._transition(
            job_id, JobState.RUNNING,
            state=JobState.FAILED, error=error, locked_until=None, updated_at=now,
        )

    async def requeue(self, job_id: str, error: str, run_after: datetime, now: datetime) -> bool:
        return await self._transition(
            job_id, JobState.RUNNING,
            state=JobState.QUEUED, error=error, run_after=run_after, locked_until=None, updated_at=now,
        )

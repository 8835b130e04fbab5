"""Job status polling endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.dependencies import get_auth, get_db
from autopilot.errors.exceptions import NotFoundError
from autopilot.models.common import ok
from autopilot.models.job import JobStatusModel
from autopilot.repositories.job_repo import JobRepository
from autopilot.services.auth_gate import AuthContext

router = APIRouter(tags=["Jobs"])


@router.get("/jobs/{job_id}")
async def get_job_status(
    job_id: str,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    row = await JobRepository(db).get(job_id)
    if not row or row.seller_id != auth.seller_id:
        raise NotFoundError("Job", job_id)
    return ok(job=JobStatusModel.model_validate(row).to_json())

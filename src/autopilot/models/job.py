"""Pydantic model for job status polling."""

from datetime import datetime
from typing import Any

from pydantic import Field

from autopilot.models.common import CamelModel
from autopilot.models.enums import JobState


class JobStatusModel(CamelModel):
    id: str = Field(validation_alias="job_id")
    type: str = Field(validation_alias="job_type")
    state: JobState
    attempts: int
    max_attempts: int
    run_after: datetime
    input: dict[str, Any] | None = None
    output: dict[str, Any] | None = None
    error: str | None = None
    created_at: datetime
    updated_at: datetime

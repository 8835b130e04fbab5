"""Base worker interface for job processing."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.job import JobRow
from autopilot.integrations.cj import CJClient
from autopilot.integrations.ebay import EbayTradingClient


@dataclass
class WorkerServices:
    """External clients handed to every worker."""

    cj: CJClient
    ebay: EbayTradingClient
    ebay_default_category_id: str = "175673"
    ebay_order_lookback_days: int = 30


class BaseWorker(ABC):
    """Abstract base class for job workers.

    ``process`` runs inside the session the runner later uses to mark the job
    done, so domain writes and the state change commit together. Raising
    hands the job back to the runner's retry policy.
    """

    def __init__(self, services: WorkerServices):
        self.services = services

    @abstractmethod
    async def process(self, job: JobRow, session: AsyncSession) -> dict:
        """Process a job and return its output payload."""
        ...

    @staticmethod
    def require(job: JobRow, field: str) -> str:
        value = (job.input or {}).get(field)
        if not value:
            raise ValueError(f"job input must include {field}")
        return value

"""Worker registry mapping job types to worker classes."""

from autopilot.errors.exceptions import UnknownJobTypeError
from autopilot.models.enums import JobType
from autopilot.workers.base import BaseWorker, WorkerServices
from autopilot.workers.fulfill_worker import OrderFulfillWorker
from autopilot.workers.listing_worker import ListingPublishWorker
from autopilot.workers.orders_sync_worker import OrdersSyncWorker
from autopilot.workers.tracking_worker import TrackingSyncWorker

WORKERS: dict[JobType, type[BaseWorker]] = {
    JobType.ORDERS_SYNC: OrdersSyncWorker,
    JobType.ORDER_FULFILL: OrderFulfillWorker,
    JobType.TRACKING_SYNC: TrackingSyncWorker,
    JobType.LISTING_PUBLISH: ListingPublishWorker,
}

# Adding a JobType without a worker fails at import time
_missing = set(JobType) - set(WORKERS)
if _missing:
    raise RuntimeError(f"No worker registered for job types: {sorted(_missing)}")


def get_worker(job_type: str, services: WorkerServices) -> BaseWorker:
    """Instantiate the worker for a job type.

    Raises:
        UnknownJobTypeError: the stored type is not a member of :class:`JobType`.
    """
    try:
        worker_class = WORKERS[JobType(job_type)]
    except ValueError:
        raise UnknownJobTypeError(job_type) from None
    return worker_class(services)

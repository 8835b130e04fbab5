"""Best-effort request audit logging."""

import logging

from autopilot.db.models.api_key import AuditLogRow
from autopilot.services.id_generator import generate_id

logger = logging.getLogger(__name__)


async def write_audit_entry(
    session_factory,
    *,
    method: str,
    path: str,
    status_code: int,
    duration_ms: int,
    ip: str,
    api_key_id: str | None = None,
    seller_id: str | None = None,
) -> None:
    """Append one audit row. Failures are logged and never raised."""
    try:
        async with session_factory() as session:
            session.add(AuditLogRow(
                audit_id=generate_id("aud_"),
                api_key_id=api_key_id,
                seller_id=seller_id,
                method=method,
                path=path[:2048],
                status_code=status_code,
                duration_ms=duration_ms,
                ip=ip,
            ))
            await session.commit()
    except Exception as exc:
        logger.warning("Audit log write failed for %s %s: %s", method, path, exc)

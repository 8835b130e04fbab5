"""API key management for the calling seller."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.dependencies import get_auth, get_db
from autopilot.errors.exceptions import NotFoundError
from autopilot.models.api_key import ApiKeyCreate, ApiKeyCreatedResponse, ApiKeyResponse, ApiKeyUpdate
from autopilot.models.common import ok
from autopilot.repositories.api_key_repo import ApiKeyRepository
from autopilot.services.auth_gate import AuthContext, generate_api_key, hash_api_key
from autopilot.services.id_generator import generate_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["API Keys"])

_STORE_WARNING = "Store this key securely. It cannot be retrieved again."


async def _get_owned(repo: ApiKeyRepository, key_id: str, seller_id: str):
    row = await repo.get(key_id)
    if not row or row.seller_id != seller_id:
        raise NotFoundError("API key", key_id)
    return row


@router.get("/api-keys")
async def list_api_keys(
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    rows = await ApiKeyRepository(db).list_for_seller(auth.seller_id)
    return ok(keys=[ApiKeyResponse.model_validate(row).to_json() for row in rows])


@router.get("/api-keys/{key_id}")
async def get_api_key(
    key_id: str,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    row = await _get_owned(ApiKeyRepository(db), key_id, auth.seller_id)
    return ok(key=ApiKeyResponse.model_validate(row).to_json())


@router.post("/api-keys", status_code=201)
async def create_api_key(
    body: ApiKeyCreate,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
):
    raw_key = generate_api_key()
    row = await ApiKeyRepository(db).create(
        key_id=generate_id("key_"),
        seller_id=auth.seller_id,
        name=body.name,
        key_hash=hash_api_key(raw_key),
        is_active=True,
    )
    await db.commit()
    await db.refresh(row)
    logger.info("Created API key %s for seller %s", row.key_id, auth.seller_id)

    created = ApiKeyCreatedResponse(
        key_id=row.key_id,
        name=row.name,
        is_active=row.is_active,
        last_used_at=row.last_used_at,
        created_at=row.created_at,
        key=raw_key,
    )
    return JSONResponse(status_code=201, content=ok(key=created.to_json(), warning=_STORE_WARNING))


@router.patch("/api-keys/{key_id}")
async def update_api_key(
    key_id: str,
    body: ApiKeyUpdate,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    repo = ApiKeyRepository(db)
    row = await _get_owned(repo, key_id, auth.seller_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        await repo.update(row, **changes)
        await db.commit()
        await db.refresh(row)
    return ok(key=ApiKeyResponse.model_validate(row).to_json())

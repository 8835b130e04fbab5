"""SKU mapping routes: marketplace SKU to supplier variant."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.dependencies import get_auth, get_db
from autopilot.errors.exceptions import NotFoundError
from autopilot.models.common import ok
from autopilot.models.sku_map import SkuMapCreate, SkuMapResponse, SkuMapUpdate
from autopilot.repositories.sku_map_repo import SkuMappingRepository
from autopilot.services.auth_gate import AuthContext
from autopilot.services.id_generator import generate_id

router = APIRouter(tags=["SKU Map"])


@router.get("/sku-map")
async def list_sku_mappings(
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    rows = await SkuMappingRepository(db).list_for_seller(auth.seller_id)
    mappings = [SkuMapResponse.model_validate(row).to_json() for row in rows]
    return ok(mappings=mappings, count=len(mappings))


@router.get("/sku-map/{sku_map_id}")
async def get_sku_mapping(
    sku_map_id: str,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    row = await SkuMappingRepository(db).get(sku_map_id, auth.seller_id)
    if not row:
        raise NotFoundError("SKU mapping", sku_map_id)
    return ok(mapping=SkuMapResponse.model_validate(row).to_json())


@router.post("/sku-map", status_code=201)
async def upsert_sku_mapping(
    body: SkuMapCreate,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
):
    """Create a mapping, or replace the existing one for the same eBay SKU."""
    repo = SkuMappingRepository(db)
    fields = body.model_dump(exclude={"ebay_sku"})
    row = await repo.get_by_sku(auth.seller_id, body.ebay_sku)
    if row:
        await repo.update(row, **fields)
    else:
        row = await repo.create(
            sku_map_id=generate_id("sku_"),
            seller_id=auth.seller_id,
            ebay_sku=body.ebay_sku,
            **fields,
        )
    await db.commit()
    await db.refresh(row)
    return JSONResponse(
        status_code=201,
        content=ok(mapping=SkuMapResponse.model_validate(row).to_json()),
    )


@router.patch("/sku-map/{sku_map_id}")
async def update_sku_mapping(
    sku_map_id: str,
    body: SkuMapUpdate,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    repo = SkuMappingRepository(db)
    row = await repo.get(sku_map_id, auth.seller_id)
    if not row:
        raise NotFoundError("SKU mapping", sku_map_id)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        await repo.update(row, **changes)
        await db.commit()
        await db.refresh(row)
    return ok(mapping=SkuMapResponse.model_validate(row).to_json())

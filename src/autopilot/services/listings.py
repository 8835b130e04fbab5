"""Listing drafts from supplier variants and idempotent publication per SKU."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.errors.exceptions import NotFoundError
from autopilot.models.enums import JobType, OfferState
from autopilot.models.listing import ListingPublishRequest
from autopilot.repositories.job_repo import JobRepository
from autopilot.repositories.listing_repo import OfferRepository, SourceProductRepository
from autopilot.services.id_generator import generate_id
from autopilot.services.pricing import PricingConfig, calculate_listing_price
from autopilot.workers.queue import enqueue_job

logger = logging.getLogger(__name__)

_CJ_SOURCE_TYPE = "cjdropshipping"


async def prepare_listing(
    session: AsyncSession,
    seller_id: str,
    variant_id: str,
    cj,
    pricing: PricingConfig,
) -> dict:
    """Fetch a CJ variant, store it as a source product and return a draft."""
    variant = await cj.get_variant(variant_id)
    price_source = float(variant.get("sellPrice") or variant.get("variantSellPrice") or 0)
    image = variant.get("productImage") or variant.get("variantImage")
    fields = {
        "source_type": _CJ_SOURCE_TYPE,
        "title": variant.get("productName") or variant.get("variantNameEn") or f"CJ Product {variant_id}",
        "description": variant.get("description") or "",
        "price_source": price_source,
        "images_json": [image] if image else [],
        "variants_json": [{
            "vid": variant_id,
            "name": variant.get("variantName") or variant.get("variantNameEn"),
            "price": price_source,
        }],
    }

    repo = SourceProductRepository(session)
    product = await repo.get_by_source_id(seller_id, variant_id)
    if product:
        await repo.update(product, **fields)
    else:
        product = await repo.create(
            source_product_id=generate_id("src_"),
            seller_id=seller_id,
            source_id=variant_id,
            **fields,
        )
    await session.commit()

    return {
        "source_product_id": product.source_product_id,
        "title": product.title,
        "description": product.description,
        "price_source": product.price_source,
        "images_json": product.images_json,
        "suggested_price": calculate_listing_price(product.price_source, pricing),
    }


async def _open_publish_job(session: AsyncSession, seller_id: str, offer_id: str):
    for job in await JobRepository(session).list_open(seller_id, JobType.LISTING_PUBLISH):
        if (job.input or {}).get("offerId") == offer_id:
            return job
    return None


async def publish_listing(session: AsyncSession, seller_id: str, body: ListingPublishRequest) -> tuple[dict, bool]:
    """Create or update the seller's single offer for a source product's SKU.

    Returns:
        ``(payload, created)``; ``created`` is False when an offer for the SKU
        already existed and was updated in place.
    """
    product = await SourceProductRepository(session).get(body.source_product_id, seller_id)
    if not product:
        raise NotFoundError("Source product", body.source_product_id)

    sku = product.source_id
    offers = OfferRepository(session)
    offer = await offers.get_by_sku(seller_id, sku)

    if offer:
        changes = {"price": body.price, "quantity": body.quantity}
        if body.title:
            changes["title"] = body.title
        if body.category_id:
            changes["category_id"] = body.category_id
        await offers.update(offer, **changes)

        job = await _open_publish_job(session, seller_id, offer.offer_id)
        if not job:
            job = await enqueue_job(session, JobType.LISTING_PUBLISH, seller_id, {"offerId": offer.offer_id})
        await session.commit()
        logger.info("Offer %s for SKU %s updated instead of duplicated", offer.offer_id, sku)
        return {
            "message": "Listing already exists, offer updated",
            "offerId": offer.offer_id,
            "jobId": job.job_id,
            "idempotent": True,
        }, False

    offer = await offers.create(
        offer_id=generate_id("off_"),
        seller_id=seller_id,
        sku=sku,
        title=body.title or product.title[:80],
        price=body.price,
        quantity=body.quantity,
        category_id=body.category_id,
        state=OfferState.DRAFT,
    )
    job = await enqueue_job(session, JobType.LISTING_PUBLISH, seller_id, {"offerId": offer.offer_id})
    await session.commit()
    return {
        "message": "Listing created, publishing job queued",
        "offerId": offer.offer_id,
        "jobId": job.job_id,
    }, True


async def push_offer(session: AsyncSession, seller_id: str, offer_id: str, ebay, default_category_id: str) -> dict:
    """Publish a draft offer, or revise price and quantity of a live one."""
    offer = await OfferRepository(session).get(offer_id, seller_id)
    if not offer:
        raise NotFoundError("Offer", offer_id)

    if offer.listing_id:
        await ebay.revise_fixed_price_item(offer.listing_id, offer.price, offer.quantity)
        return {"listingId": offer.listing_id, "message": "Listing revised"}

    product = await SourceProductRepository(session).get_by_source_id(seller_id, offer.sku)
    item_id = await ebay.add_fixed_price_item(
        sku=offer.sku,
        title=offer.title,
        description=(product.description if product else "") or offer.title,
        price=offer.price,
        quantity=offer.quantity or 1,
        category_id=offer.category_id or default_category_id,
        images=list(product.images_json) if product else [],
    )
    offer.listing_id = item_id
    offer.state = OfferState.PUBLISHED
    await session.flush()
    logger.info("Published offer %s as eBay item %s", offer_id, item_id)
    return {"listingId": item_id, "message": "Published to eBay"}

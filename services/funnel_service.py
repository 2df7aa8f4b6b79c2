import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from models.funnel import FunnelCreate, FunnelPageCreate, Seo, FUNNEL_PAGE_TYPES
from models.offer import OfferAnalysis
from services.funnel_ai_service import generate_funnel_copy, generate_page_layout
from services.llm_client import LLMClient
from utils.errors import NotFoundError
from utils.mongodb import get_db, to_object_id

logger = logging.getLogger(__name__)


def page_display_name(page_type: str) -> str:
    return f"{page_type[:1].upper()}{page_type[1:]} Page"


def build_funnel_page(llm: LLMClient, analysis: OfferAnalysis, funnel_id: str, page_type: str, index: int) -> dict:
    # Copy first, then the layout built from that copy
    copy = generate_funnel_copy(llm, analysis, page_type)
    blocks = generate_page_layout(llm, analysis, page_type, copy)

    headlines = analysis.copy_angles.headlines
    now = datetime.now(timezone.utc)
    page = FunnelPageCreate(
        funnel_id=funnel_id,
        name=page_display_name(page_type),
        slug=page_type,
        type=page_type,
        order_index=index,
        blocks=blocks,
        copy_data=copy,
        seo=Seo(title=headlines[0] if headlines else "Funnel Page", description=analysis.summary),
        created_at=now,
        updated_at=now,
    )
    return page.model_dump()


def create_funnel_from_offer(llm: LLMClient, offer_id: str, user_id: str) -> dict:
    """Create a draft funnel for an offer and generate its lead, sales and thank-you pages."""
    db = get_db()
    object_id = to_object_id(offer_id)
    offer = db['offers'].find_one({"_id": object_id}) if object_id else None
    if not offer:
        raise NotFoundError("Offer not found")

    analysis = OfferAnalysis.model_validate(offer["analysis"])

    now = datetime.now(timezone.utc)
    funnel = FunnelCreate(
        workspace_id=offer["workspace_id"],
        offer_id=str(offer["_id"]),
        user_id=user_id,
        name=f"{offer['name']} Funnel",
        status="draft",
        created_at=now,
        updated_at=now,
    )
    try:
        funnel_id = str(db['funnels'].insert_one(funnel.model_dump()).inserted_id)
    except Exception as e:
        raise Exception(f"Failed to create funnel: {e}")

    logger.info(f"Generating {len(FUNNEL_PAGE_TYPES)} pages for funnel {funnel_id}")
    with ThreadPoolExecutor(max_workers=len(FUNNEL_PAGE_TYPES)) as executor:
        futures = [
            executor.submit(build_funnel_page, llm, analysis, funnel_id, page_type, index)
            for index, page_type in enumerate(FUNNEL_PAGE_TYPES)
        ]
        pages = [future.result() for future in futures]

    db['funnel_pages'].insert_many(pages)
    return {"funnelId": funnel_id}


def get_funnel(funnel_id: str):
    """The funnel with its pages sorted by order_index, or None."""
    object_id = to_object_id(funnel_id)
    if object_id is None:
        return None
    db = get_db()
    funnel = db['funnels'].find_one({"_id": object_id})
    if not funnel:
        return None
    pages = list(db['funnel_pages'].find({"funnel_id": str(object_id)}))
    funnel["pages"] = sorted(pages, key=lambda page: page.get("order_index", 0))
    return funnel

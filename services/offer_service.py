from datetime import datetime, timezone
from pymongo import DESCENDING

from models.offer import OfferCreate, OfferInput, AnalysisResult
from utils.mongodb import get_db, to_object_id


def save_offer(workspace_id: str, user_id: str, offer_input: OfferInput, result: AnalysisResult) -> dict:
    """Persist an analysed offer. The first headline doubles as the offer name."""
    analysis = result.analysis
    headlines = analysis.copy_angles.headlines
    offer_name = headlines[0] if headlines else "New Offer"

    now = datetime.now(timezone.utc)
    offer = OfferCreate(
        workspace_id=workspace_id,
        user_id=user_id,
        name=offer_name,
        status="analyzed",
        input_type=offer_input.type,
        input_value=offer_input.value(),
        analysis=analysis.model_dump(),
        analysis_source="fallback" if result.used_fallback else "llm",
        created_at=now,
        updated_at=now,
    )
    try:
        db = get_db()
        collection = db['offers']
        offer_id = collection.insert_one(offer.model_dump()).inserted_id
        return collection.find_one({"_id": offer_id})
    except Exception as e:
        raise Exception(f"Error saving offer: {e}")


def get_offer(offer_id: str):
    object_id = to_object_id(offer_id)
    if object_id is None:
        return None
    try:
        db = get_db()
        return db['offers'].find_one({"_id": object_id})
    except Exception as e:
        raise Exception(f"Error fetching offer: {e}")


def get_workspace_offers(workspace_id: str) -> list:
    try:
        db = get_db()
        return list(db['offers'].find({"workspace_id": workspace_id}).sort("created_at", DESCENDING))
    except Exception as e:
        raise Exception(f"Error fetching offers for workspace {workspace_id}: {e}")

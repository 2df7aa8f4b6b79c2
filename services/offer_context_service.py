from datetime import datetime, timezone
from pymongo import DESCENDING, ReturnDocument

from models.sales_report import OfferContextInput
from utils.mongodb import get_db, to_object_id


def save_offer_context(data: OfferContextInput) -> dict:
    """Insert a new offer context, or update the one named by data.id."""
    fields = data.model_dump(exclude={"id"})
    fields["key_features"] = data.key_features or []
    now = datetime.now(timezone.utc)
    fields["updated_at"] = now

    try:
        db = get_db()
        collection = db['offer_contexts']
        object_id = to_object_id(data.id)
        if object_id is not None:
            return collection.find_one_and_update(
                {"_id": object_id},
                {"$set": fields, "$setOnInsert": {"created_at": now}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        fields["created_at"] = now
        context_id = collection.insert_one(fields).inserted_id
        return collection.find_one({"_id": context_id})
    except Exception as e:
        raise Exception(f"Failed to save offer context: {e}")


def get_offer_context(context_id: str):
    object_id = to_object_id(context_id)
    if object_id is None:
        return None
    db = get_db()
    return db['offer_contexts'].find_one({"_id": object_id})


def get_workspace_offer_contexts(workspace_id: str) -> list:
    db = get_db()
    return list(db['offer_contexts'].find({"workspace_id": workspace_id}).sort("created_at", DESCENDING))


def delete_offer_context(context_id: str) -> bool:
    """False when there was no such context."""
    object_id = to_object_id(context_id)
    if object_id is None:
        return False
    try:
        db = get_db()
        result = db['offer_contexts'].delete_one({"_id": object_id})
        return result.deleted_count > 0
    except Exception as e:
        raise Exception(f"Failed to delete context: {e}")

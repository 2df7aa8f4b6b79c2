import logging
from datetime import datetime, timedelta, timezone

from pymongo import DESCENDING

from models.sales_report import OfferFileCreate
from services.content_extraction import extract_content, get_file_category, is_valid_file_type
from services.llm_client import LLMClient
from services.storage_service import BlobStorage, build_storage_path
from services.summarization_service import generate_content_summary, DEFAULT_MAX_CHARS
from utils.errors import NotFoundError
from utils.mongodb import get_db, to_object_id

logger = logging.getLogger(__name__)


def upload_offer_file(storage: BlobStorage, workspace_id: str, offer_id: str, file_name: str, content_type: str, data: bytes):
    """Store the file and record it as pending extraction. Returns (record, error)."""
    if not data or not file_name or not workspace_id or not offer_id:
        return None, "Missing required fields"
    if not is_valid_file_type(content_type):
        return None, f"Unsupported file type: {content_type}"

    try:
        storage_path = storage.upload(build_storage_path(workspace_id, offer_id, file_name), data, content_type)
    except Exception as e:
        logger.error(f"Storage upload error: {e}", exc_info=True)
        return None, "Failed to upload file"

    now = datetime.now(timezone.utc)
    record = OfferFileCreate(
        workspace_id=workspace_id,
        offer_id=offer_id,
        file_name=file_name,
        file_type=content_type,
        file_size=len(data),
        storage_path=storage_path,
        extraction_status="pending",
        created_at=now,
        updated_at=now,
    )
    try:
        db = get_db()
        collection = db['offer_files']
        file_id = collection.insert_one(record.model_dump()).inserted_id
        return collection.find_one({"_id": file_id}), None
    except Exception as e:
        logger.error(f"Database error: {e}", exc_info=True)
        return None, "Failed to save file record"


def set_extraction_status(file_id, status: str, **fields) -> None:
    fields.update({"extraction_status": status, "updated_at": datetime.now(timezone.utc)})
    db = get_db()
    db['offer_files'].update_one({"_id": to_object_id(file_id)}, {"$set": fields})


def process_file_extraction(file_id: str, llm: LLMClient, summary_model, storage: BlobStorage, max_chars: int = DEFAULT_MAX_CHARS) -> dict:
    """
    Extract and summarize one uploaded file. The record ends up `complete`
    with its content, summary and metadata, or `failed` with the error.
    """
    db = get_db()
    object_id = to_object_id(file_id)
    file_record = db['offer_files'].find_one({"_id": object_id}) if object_id else None
    if not file_record:
        raise NotFoundError(f"File {file_id} not found")

    set_extraction_status(file_id, "processing")
    try:
        file_bytes = storage.download(file_record["storage_path"])
        category = get_file_category(file_record["file_type"])
        extracted_content, metadata = extract_content(llm, category, file_bytes, file_record["file_name"])

        summary = ""
        if extracted_content.strip():
            summary = generate_content_summary(summary_model, extracted_content, max_chars=max_chars)

        set_extraction_status(
            file_id,
            "complete",
            extracted_content=extracted_content,
            summary=summary,
            metadata=metadata,
            error=None,
        )
        logger.info(f"Extraction complete for file {file_id} ({category})")
    except Exception as e:
        logger.error(f"Extraction error for file {file_id}: {e}", exc_info=True)
        set_extraction_status(file_id, "failed", error=str(e))
        raise

    return db['offer_files'].find_one({"_id": object_id})


def get_offer_files(offer_id: str) -> list:
    db = get_db()
    return list(db['offer_files'].find({"offer_id": offer_id}).sort("created_at", DESCENDING))


def get_offer_file(file_id: str):
    object_id = to_object_id(file_id)
    if object_id is None:
        return None
    db = get_db()
    return db['offer_files'].find_one({"_id": object_id})


def get_offer_file_download_url(storage: BlobStorage, file_id: str, expires_in: int = 3600):
    file_record = get_offer_file(file_id)
    if not file_record:
        return None
    return storage.generate_signed_url(file_record["storage_path"], expires_in)


def get_complete_file_summaries(offer_id: str) -> list:
    db = get_db()
    files = db['offer_files'].find({"offer_id": offer_id, "extraction_status": "complete"})
    return [f["summary"] for f in files if f.get("summary")]


def delete_offer_file(storage: BlobStorage, file_id: str) -> bool:
    """Remove the blob, then the record. False when the file does not exist."""
    file_record = get_offer_file(file_id)
    if not file_record:
        return False
    try:
        storage.delete(file_record["storage_path"])
        db = get_db()
        db['offer_files'].delete_one({"_id": file_record["_id"]})
        return True
    except Exception as e:
        raise Exception(f"Failed to delete file: {e}")


def reconcile_stuck_files(max_age_minutes: int) -> int:
    """Fail files left pending/processing longer than max_age_minutes."""
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=max_age_minutes)
    db = get_db()
    result = db['offer_files'].update_many(
        {"extraction_status": {"$in": ["pending", "processing"]}, "updated_at": {"$lt": cutoff}},
        {"$set": {"extraction_status": "failed", "error": "abandoned", "updated_at": datetime.now(timezone.utc)}},
    )
    return result.modified_count

import logging
from datetime import datetime, timedelta, timezone

from models.job import JobCreate
from utils.mongodb import get_db, to_object_id

logger = logging.getLogger(__name__)


def create_job(kind: str, target_id: str) -> dict:
    now = datetime.now(timezone.utc)
    job = JobCreate(kind=kind, target_id=target_id, created_at=now, updated_at=now)
    try:
        db = get_db()
        collection = db['jobs']
        job_id = collection.insert_one(job.model_dump()).inserted_id
        return collection.find_one({"_id": job_id})
    except Exception as e:
        raise Exception(f"Error creating job: {e}")


def get_job(job_id: str):
    object_id = to_object_id(job_id)
    if object_id is None:
        return None
    db = get_db()
    return db['jobs'].find_one({"_id": object_id})


def update_job(job_id: str, **fields) -> None:
    object_id = to_object_id(job_id)
    if object_id is None:
        return
    fields["updated_at"] = datetime.now(timezone.utc)
    db = get_db()
    db['jobs'].update_one({"_id": object_id}, {"$set": fields})


def mark_job_running(job_id: str) -> None:
    object_id = to_object_id(job_id)
    if object_id is None:
        return
    db = get_db()
    db['jobs'].update_one(
        {"_id": object_id},
        {"$set": {"status": "running", "updated_at": datetime.now(timezone.utc)}, "$inc": {"attempts": 1}},
    )


def mark_job_complete(job_id: str) -> None:
    update_job(job_id, status="complete", error=None)


def mark_job_failed(job_id: str, error: str) -> None:
    logger.error(f"Job {job_id} failed: {error}")
    update_job(job_id, status="failed", error=error)


def reconcile_stuck_jobs(max_age_minutes: int) -> int:
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=max_age_minutes)
    db = get_db()
    result = db['jobs'].update_many(
        {"status": {"$in": ["queued", "running"]}, "updated_at": {"$lt": cutoff}},
        {"$set": {"status": "failed", "error": "abandoned", "updated_at": datetime.now(timezone.utc)}},
    )
    return result.modified_count

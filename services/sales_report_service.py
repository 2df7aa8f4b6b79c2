import logging
from datetime import datetime, timedelta, timezone

from pymongo import ASCENDING, DESCENDING

from models.sales_report import OfferContext, ReportVersionCreate, SalesReportCreate
from services.llm_client import LLMClient
from services.offer_context_service import get_offer_context
from services.offer_file_service import get_complete_file_summaries
from services.report_generation import (
    ReportGenerator,
    regenerate_report_section,
    replace_report_section,
)
from services.report_sections import REPORT_SECTIONS
from utils.errors import NotFoundError
from utils.mongodb import get_db, to_object_id

logger = logging.getLogger(__name__)


def create_sales_report(workspace_id: str, offer_id: str, title: str) -> dict:
    now = datetime.now(timezone.utc)
    report = SalesReportCreate(
        workspace_id=workspace_id,
        offer_id=offer_id,
        title=title,
        metadata={"sections": {}},
        created_at=now,
        updated_at=now,
    )
    try:
        db = get_db()
        collection = db['sales_reports']
        report_id = collection.insert_one(report.model_dump()).inserted_id
        return collection.find_one({"_id": report_id})
    except Exception as e:
        raise Exception(f"Failed to create sales report: {e}")


def get_sales_report(report_id: str):
    object_id = to_object_id(report_id)
    if object_id is None:
        return None
    db = get_db()
    return db['sales_reports'].find_one({"_id": object_id})


def get_workspace_sales_reports(workspace_id: str) -> list:
    db = get_db()
    return list(db['sales_reports'].find({"workspace_id": workspace_id}).sort("created_at", DESCENDING))


def _update_report(report_id, fields: dict) -> None:
    fields["updated_at"] = datetime.now(timezone.utc)
    db = get_db()
    db['sales_reports'].update_one({"_id": to_object_id(report_id)}, {"$set": fields})


def _load_report_and_context(report_id: str):
    report = get_sales_report(report_id)
    if not report:
        raise NotFoundError("Report not found")
    context_doc = get_offer_context(report["offer_id"])
    if not context_doc:
        raise NotFoundError("Offer context not found")
    return report, OfferContext.model_validate(context_doc)


def generate_report_content(report_id: str, generator: ReportGenerator) -> str:
    """
    Generate the full report for report_id from its offer context and the
    summaries of its completed files, then snapshot it as a version.

    The report is `generating` while this runs and goes back to `draft` if
    anything fails.
    """
    report, context = _load_report_and_context(report_id)
    summaries = get_complete_file_summaries(report["offer_id"])

    _update_report(report_id, {"status": "generating"})
    try:
        content = generator.generate(context, summaries)

        last_updated = datetime.now(timezone.utc).isoformat()
        _update_report(report_id, {
            "content": content,
            "status": "complete",
            "metadata.sections": {
                section: {"status": "complete", "lastUpdated": last_updated}
                for section in REPORT_SECTIONS
            },
        })
        _insert_version(report_id, report.get("version", 1), content)
    except Exception as e:
        logger.error(f"Generate report error for {report_id}: {e}", exc_info=True)
        _update_report(report_id, {"status": "draft"})
        raise

    logger.info(f"Report {report_id} generated ({len(summaries)} file summaries)")
    return content


def update_report_content(report_id: str, content: str) -> bool:
    """False when the report does not exist."""
    if not get_sales_report(report_id):
        return False
    try:
        _update_report(report_id, {"content": content})
        return True
    except Exception as e:
        raise Exception(f"Failed to update report: {e}")


def regenerate_section(report_id: str, section: str, instructions: str, llm: LLMClient) -> str:
    """Regenerate one section in place. Returns the new section body."""
    if section not in REPORT_SECTIONS:
        raise ValueError(f"Unknown report section: {section}")
    report, context = _load_report_and_context(report_id)
    summaries = get_complete_file_summaries(report["offer_id"])

    new_body = regenerate_report_section(llm, section, context, summaries, instructions or "")
    _update_report(report_id, {
        "content": replace_report_section(report.get("content") or "", section, new_body),
        f"metadata.sections.{section}": {
            "status": "complete",
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        },
    })
    return new_body


def delete_sales_report(report_id: str) -> bool:
    """Deletes the report and its versions. False when it does not exist."""
    report = get_sales_report(report_id)
    if not report:
        return False
    try:
        db = get_db()
        db['report_versions'].delete_many({"report_id": str(report["_id"])})
        db['sales_reports'].delete_one({"_id": report["_id"]})
        return True
    except Exception as e:
        raise Exception(f"Failed to delete report: {e}")


def _insert_version(report_id, version: int, content: str):
    snapshot = ReportVersionCreate(
        report_id=str(report_id),
        version=version,
        content=content or "",
        created_at=datetime.now(timezone.utc),
    )
    db = get_db()
    return db['report_versions'].insert_one(snapshot.model_dump()).inserted_id


def create_report_version(report_id: str):
    """
    Snapshot the current content at the current version number, then bump
    the report's version. Returns the new version, or None when the report
    does not exist.
    """
    report = get_sales_report(report_id)
    if not report:
        return None
    try:
        current_version = report.get("version", 1)
        _insert_version(report_id, current_version, report.get("content", ""))
        new_version = current_version + 1
        _update_report(report_id, {"version": new_version})
        return new_version
    except Exception as e:
        raise Exception(f"Failed to create version: {e}")


def get_report_versions(report_id: str) -> list:
    db = get_db()
    return list(db['report_versions'].find({"report_id": report_id}).sort("version", ASCENDING))


def reconcile_stuck_reports(max_age_minutes: int) -> int:
    """Return reports left `generating` longer than max_age_minutes to `draft`."""
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=max_age_minutes)
    db = get_db()
    result = db['sales_reports'].update_many(
        {"status": "generating", "updated_at": {"$lt": cutoff}},
        {"$set": {"status": "draft", "updated_at": datetime.now(timezone.utc)}},
    )
    return result.modified_count

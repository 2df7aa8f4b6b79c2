import logging

from services.job_service import reconcile_stuck_jobs
from services.offer_file_service import reconcile_stuck_files
from services.sales_report_service import reconcile_stuck_reports

logger = logging.getLogger(__name__)


def reconcile_stuck_records(max_age_minutes: int) -> dict:
    """
    Move records abandoned in a non-terminal status (for example after a
    worker restart) to their failure state. Returns the count per collection.
    """
    counts = {
        "offer_files": reconcile_stuck_files(max_age_minutes),
        "sales_reports": reconcile_stuck_reports(max_age_minutes),
        "jobs": reconcile_stuck_jobs(max_age_minutes),
    }
    if any(counts.values()):
        logger.warning(f"Reconciled stuck records older than {max_age_minutes} minutes: {counts}")
    else:
        logger.info("No stuck records found")
    return counts

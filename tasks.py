import logging

from flask import current_app

from celery_worker import celery

from services.job_service import create_job, mark_job_complete, mark_job_failed, mark_job_running, update_job
from services.offer_file_service import process_file_extraction
from services.reconcile_service import reconcile_stuck_records
from services.registry import get_services
from services.report_generation import ReportGenerator
from services.sales_report_service import generate_report_content

logger = logging.getLogger(__name__)


@celery.task(bind=True, name="process_offer_file_task")
def process_offer_file_task(self, file_id, job_id):
    mark_job_running(job_id)
    try:
        self.update_state(state="PROGRESS", meta={
            "current": 1, "total": 2, "status": "Extracting content"
        })
        services = get_services()
        process_file_extraction(
            file_id,
            services.llm,
            services.summary_model,
            services.storage,
            max_chars=current_app.config["SUMMARY_CHUNK_CHARS"],
        )
        mark_job_complete(job_id)
        return {"message": "File processed", "file_id": file_id}
    except Exception as e:
        mark_job_failed(job_id, str(e))
        raise e


@celery.task(bind=True, name="generate_sales_report_task")
def generate_sales_report_task(self, report_id, job_id):
    mark_job_running(job_id)
    try:
        self.update_state(state="PROGRESS", meta={
            "current": 1, "total": 2, "status": "Generating report sections"
        })
        generator = ReportGenerator.from_config(get_services().llm, current_app.config)
        content = generate_report_content(report_id, generator)
        mark_job_complete(job_id)
        return {"message": "Report generated", "report_id": report_id, "length": len(content)}
    except Exception as e:
        mark_job_failed(job_id, str(e))
        raise e


@celery.task(name="reconcile_stuck_records_task")
def reconcile_stuck_records_task():
    return reconcile_stuck_records(current_app.config["STUCK_RECORD_MAX_AGE_MINUTES"])


def _enqueue(task, kind: str, target_id: str) -> dict:
    job = create_job(kind, target_id)
    job_id = str(job["_id"])
    result = task.apply_async(args=[target_id, job_id])
    update_job(job_id, task_id=result.id)
    logger.info(f"Queued {kind} job {job_id} for {target_id} (task {result.id})")
    return {"job_id": job_id, "task_id": result.id}


def enqueue_file_extraction(file_id: str) -> dict:
    return _enqueue(process_offer_file_task, "file_extraction", file_id)


def enqueue_report_generation(report_id: str) -> dict:
    return _enqueue(generate_sales_report_task, "report_generation", report_id)

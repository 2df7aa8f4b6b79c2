from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from services.job_service import get_job
from utils.json_converter import serialize_document

job_bp = Blueprint('jobs', __name__)


def task_progress(task_id):
    from celery_worker import celery
    task = celery.AsyncResult(task_id)

    response = {
        "state": task.state,
        "progress": task.info if task.state == "PROGRESS" else {}
    }
    if task.state == "SUCCESS":
        response["progress"] = {"current": 1, "total": 1, "status": "Completed"}
    elif task.state == "FAILURE":
        response["progress"] = {"current": 0, "total": 0, "status": "Failed"}
        response["error"] = str(task.info)
    return response


@job_bp.route('/<job_id>', methods=['GET'])
@jwt_required()
def job_status(job_id):
    """The persisted job record plus the live Celery task state."""
    try:
        job = get_job(job_id)
        if not job:
            return jsonify({"error": "Job not found"}), 404

        response = serialize_document(job)
        if job.get("task_id"):
            response["task"] = task_progress(job["task_id"])
        return jsonify(response), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500

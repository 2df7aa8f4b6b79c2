import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from services.content_extraction import format_file_size
from services.offer_file_service import (
    upload_offer_file,
    get_offer_files,
    get_offer_file,
    get_offer_file_download_url,
    delete_offer_file,
    set_extraction_status,
)
from services.registry import get_services
from services.workspace_service import get_workspace_by_id
from utils.json_converter import serialize_document

logger = logging.getLogger(__name__)

offer_file_bp = Blueprint('offer_files', __name__)


def file_response(file_record):
    data = serialize_document(file_record)
    data["file_size_label"] = format_file_size(file_record.get("file_size", 0))
    return data


@offer_file_bp.route('/upload-offer-file', methods=['POST'])
@jwt_required()
def upload_file():
    """
    Multipart upload (file, workspaceId, offerId). The file is stored right
    away; extraction and summarization run as a background job.
    """
    try:
        uploaded = request.files.get('file')
        workspace_id = request.form.get('workspaceId')
        offer_id = request.form.get('offerId')

        if not uploaded or not workspace_id or not offer_id:
            return jsonify({"error": "Missing required fields"}), 400
        if not get_workspace_by_id(workspace_id, get_jwt_identity()):
            return jsonify({"error": "Workspace not found"}), 404

        file_record, error = upload_offer_file(
            get_services().storage,
            workspace_id,
            offer_id,
            uploaded.filename,
            uploaded.mimetype,
            uploaded.read(),
        )
        if error:
            return jsonify({"error": error}), 400

        from tasks import enqueue_file_extraction
        file_id = str(file_record["_id"])
        try:
            job = enqueue_file_extraction(file_id)
        except Exception as e:
            # The blob and record already exist; fail the record instead of leaving it pending
            logger.error(f"Could not queue extraction for file {file_id}: {e}", exc_info=True)
            set_extraction_status(file_id, "failed", error="Failed to queue extraction")
            return jsonify({
                "success": False,
                "file": file_response(get_offer_file(file_id)),
                "error": "File uploaded but extraction could not be queued",
            }), 503
        return jsonify({"success": True, "file": file_response(file_record), **job}), 201
    except Exception as e:
        logger.error(f"API upload error: {e}", exc_info=True)
        return jsonify({"error": "Failed to upload file"}), 500


@offer_file_bp.route('/offers/<offer_id>/files', methods=['GET'])
@jwt_required()
def list_files(offer_id):
    try:
        files = get_offer_files(offer_id)
        return jsonify([file_response(f) for f in files]), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_file_bp.route('/offer-files/<file_id>/download', methods=['GET'])
@jwt_required()
def download_file(file_id):
    try:
        url = get_offer_file_download_url(
            get_services().storage,
            file_id,
            current_app.config["SIGNED_URL_EXPIRY_SECONDS"],
        )
        if not url:
            return jsonify({"error": "File not found"}), 404
        return jsonify({"url": url}), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_file_bp.route('/offer-files/<file_id>', methods=['DELETE'])
@jwt_required()
def remove_file(file_id):
    try:
        if not delete_offer_file(get_services().storage, file_id):
            return jsonify({"error": "File not found"}), 404
        return jsonify({"success": True}), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500

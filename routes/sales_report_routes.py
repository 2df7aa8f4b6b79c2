import logging
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from services.registry import get_services
from services.report_generation import refine_report_section
from services.report_sections import REPORT_SECTIONS
from services.sales_report_service import (
    create_sales_report,
    get_sales_report,
    get_workspace_sales_reports,
    update_report_content,
    regenerate_section,
    delete_sales_report,
    create_report_version,
    get_report_versions,
)
from services.workspace_service import get_workspace_by_id
from utils.errors import NotFoundError
from utils.json_converter import serialize_document

logger = logging.getLogger(__name__)

sales_report_bp = Blueprint('sales_reports', __name__)


@sales_report_bp.route('/sales-reports', methods=['POST'])
@jwt_required()
def create_report():
    try:
        data = request.get_json(silent=True) or {}
        workspace_id = data.get('workspaceId')
        offer_id = data.get('offerId')
        title = (data.get('title') or '').strip()
        if not workspace_id or not offer_id or not title:
            return jsonify({"error": "workspaceId, offerId and title are required"}), 400
        if not get_workspace_by_id(workspace_id, get_jwt_identity()):
            return jsonify({"error": "Workspace not found"}), 404

        report = create_sales_report(workspace_id, offer_id, title)
        return jsonify({"success": True, "report": serialize_document(report)}), 201
    except Exception as e:
        logger.error(f"Create report error: {e}")
        return jsonify({"error": "Failed to create sales report"}), 500


@sales_report_bp.route('/sales-reports/<report_id>', methods=['GET'])
@jwt_required()
def get_report(report_id):
    try:
        report = get_sales_report(report_id)
        if not report:
            return jsonify({"error": "Report not found"}), 404
        return jsonify(serialize_document(report)), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@sales_report_bp.route('/workspaces/<workspace_id>/sales-reports', methods=['GET'])
@jwt_required()
def list_reports(workspace_id):
    try:
        if not get_workspace_by_id(workspace_id, get_jwt_identity()):
            return jsonify({"error": "Workspace not found"}), 404
        reports = get_workspace_sales_reports(workspace_id)
        return jsonify([serialize_document(r) for r in reports]), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@sales_report_bp.route('/sales-reports/<report_id>/content', methods=['PUT'])
@jwt_required()
def update_content(report_id):
    try:
        data = request.get_json(silent=True) or {}
        content = data.get('content')
        if content is None:
            return jsonify({"error": "Content is required"}), 400
        if not update_report_content(report_id, content):
            return jsonify({"error": "Report not found"}), 404
        return jsonify({"success": True}), 200
    except Exception as e:
        logger.error(f"Update report error: {e}")
        return jsonify({"error": "Failed to update report"}), 500


@sales_report_bp.route('/sales-reports/<report_id>', methods=['DELETE'])
@jwt_required()
def remove_report(report_id):
    try:
        if not delete_sales_report(report_id):
            return jsonify({"error": "Report not found"}), 404
        return jsonify({"success": True}), 200
    except Exception as e:
        logger.error(f"Delete report error: {e}")
        return jsonify({"error": "Failed to delete report"}), 500


@sales_report_bp.route('/sales-reports/<report_id>/generate', methods=['POST'])
@jwt_required()
def generate_report(report_id):
    """Queue full report generation. Poll /jobs/<job_id> for progress."""
    try:
        if not get_sales_report(report_id):
            return jsonify({"error": "Report not found"}), 404

        from tasks import enqueue_report_generation
        job = enqueue_report_generation(report_id)
        return jsonify(job), 202
    except Exception as e:
        logger.error(f"Generate report error: {e}")
        return jsonify({"error": "Failed to generate report"}), 500


@sales_report_bp.route('/sales-reports/<report_id>/versions', methods=['POST'])
@jwt_required()
def add_version(report_id):
    try:
        new_version = create_report_version(report_id)
        if new_version is None:
            return jsonify({"error": "Report not found"}), 404
        return jsonify({"success": True, "version": new_version}), 201
    except Exception as e:
        logger.error(f"Create version error: {e}")
        return jsonify({"error": "Failed to create version"}), 500


@sales_report_bp.route('/sales-reports/<report_id>/versions', methods=['GET'])
@jwt_required()
def list_versions(report_id):
    try:
        versions = get_report_versions(report_id)
        return jsonify([serialize_document(v) for v in versions]), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@sales_report_bp.route('/sales-reports/<report_id>/sections/<section>/regenerate', methods=['POST'])
@jwt_required()
def regenerate_section_route(report_id, section):
    if section not in REPORT_SECTIONS:
        return jsonify({"error": f"Unknown section: {section}"}), 400
    try:
        data = request.get_json(silent=True) or {}
        content = regenerate_section(report_id, section, data.get('instructions', ''), get_services().llm)
        return jsonify({"success": True, "section": section, "content": content}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.error(f"Regenerate section error: {e}", exc_info=True)
        return jsonify({"error": "Failed to regenerate section"}), 500


@sales_report_bp.route('/sales-reports/<report_id>/sections/refine', methods=['POST'])
@jwt_required()
def refine_section_route(report_id):
    """Refine a piece of report markdown from user feedback. Nothing is saved."""
    try:
        data = request.get_json(silent=True) or {}
        current_content = data.get('content')
        message = data.get('message')
        if not current_content or not message:
            return jsonify({"error": "content and message are required"}), 400
        if not get_sales_report(report_id):
            return jsonify({"error": "Report not found"}), 404

        refined = refine_report_section(get_services().llm, current_content, message)
        return jsonify({"success": True, "content": refined}), 200
    except Exception as e:
        logger.error(f"Refine section error: {e}", exc_info=True)
        return jsonify({"error": "Failed to refine section"}), 500

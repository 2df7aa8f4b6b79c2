import logging
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from services.workspace_service import create_workspace, get_workspaces, get_workspace_by_id
from utils.json_converter import serialize_document

logger = logging.getLogger(__name__)

workspace_bp = Blueprint('workspaces', __name__)


@workspace_bp.route('', methods=['GET'])
@jwt_required()
def list_workspaces():
    try:
        current_user = get_jwt_identity()
        workspaces = get_workspaces(current_user)
        return jsonify([serialize_document(w) for w in workspaces]), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@workspace_bp.route('', methods=['POST'])
@jwt_required()
def add_workspace():
    try:
        current_user = get_jwt_identity()
        data = request.get_json(silent=True) or {}
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({"error": "Workspace name is required"}), 400

        workspace = create_workspace(current_user, name)
        logger.info(f"Workspace {workspace['_id']} created for user {current_user}")
        return jsonify(serialize_document(workspace)), 201
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@workspace_bp.route('/<workspace_id>', methods=['GET'])
@jwt_required()
def get_workspace(workspace_id):
    try:
        workspace = get_workspace_by_id(workspace_id, get_jwt_identity())
        if not workspace:
            return jsonify({"error": "Workspace not found"}), 404
        return jsonify(serialize_document(workspace)), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500

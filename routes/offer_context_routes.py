from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from pydantic import ValidationError

from models.sales_report import OfferContextInput
from services.offer_context_service import (
    save_offer_context,
    get_offer_context,
    get_workspace_offer_contexts,
    delete_offer_context,
)
from services.workspace_service import get_workspace_by_id
from utils.json_converter import serialize_document

offer_context_bp = Blueprint('offer_contexts', __name__)


@offer_context_bp.route('/offer-contexts', methods=['POST'])
@jwt_required()
def save_context():
    """Create an offer context, or update it when the body carries an id."""
    try:
        data = request.get_json(silent=True) or {}
        try:
            context_input = OfferContextInput(**data)
        except ValidationError as e:
            return jsonify({"error": "Invalid offer context", "errors": e.errors(include_url=False, include_context=False)}), 400

        if not get_workspace_by_id(context_input.workspace_id, get_jwt_identity()):
            return jsonify({"error": "Workspace not found"}), 404

        context = save_offer_context(context_input)
        return jsonify({"success": True, "context": serialize_document(context)}), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_context_bp.route('/offer-contexts/<context_id>', methods=['GET'])
@jwt_required()
def get_context(context_id):
    try:
        context = get_offer_context(context_id)
        if not context:
            return jsonify({"error": "Offer context not found"}), 404
        return jsonify(serialize_document(context)), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_context_bp.route('/workspaces/<workspace_id>/offer-contexts', methods=['GET'])
@jwt_required()
def list_contexts(workspace_id):
    try:
        if not get_workspace_by_id(workspace_id, get_jwt_identity()):
            return jsonify({"error": "Workspace not found"}), 404
        contexts = get_workspace_offer_contexts(workspace_id)
        return jsonify([serialize_document(c) for c in contexts]), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_context_bp.route('/offer-contexts/<context_id>', methods=['DELETE'])
@jwt_required()
def remove_context(context_id):
    try:
        if not delete_offer_context(context_id):
            return jsonify({"error": "Offer context not found"}), 404
        return jsonify({"success": True}), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500

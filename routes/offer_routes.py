import logging
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from pydantic import ValidationError

from models.offer import AnalysisResult, OfferAnalysis, OfferInput
from services.funnel_service import create_funnel_from_offer, get_funnel
from services.offer_analysis_service import analyze_offer
from services.offer_service import save_offer, get_offer, get_workspace_offers
from services.registry import get_services
from services.workspace_service import get_workspace_by_id
from utils.errors import LLMConfigurationError, NotFoundError
from utils.json_converter import serialize_document

logger = logging.getLogger(__name__)

offer_bp = Blueprint('offers', __name__)


def optional_llm():
    """The LLM client, or None when it is not configured."""
    try:
        return get_services().llm
    except LLMConfigurationError as e:
        logger.warning(f"LLM unavailable: {e}")
        return None


@offer_bp.route('/analyze-offer', methods=['POST'])
@jwt_required()
def analyze_offer_route():
    try:
        data = request.get_json(silent=True) or {}
        content = data.get('content')
        if not content:
            return jsonify({"error": "Content is required"}), 400

        # URLs are analysed as given; nothing is fetched
        result = analyze_offer(optional_llm(), content)
        return jsonify({
            "success": True,
            "analysis": result.analysis.model_dump(),
            "fallback": result.used_fallback,
            "error": result.error,
        }), 200
    except Exception as e:
        logger.error(f"Analysis Error: {e}", exc_info=True)
        return jsonify({"error": "Failed to analyze offer"}), 500


@offer_bp.route('/offers', methods=['POST'])
@jwt_required()
def create_offer():
    """
    Save an offer. The body carries workspaceId, input {type, text|url|file_content}
    and, optionally, an analysis already returned by /analyze-offer; without
    one the input is analysed here.
    """
    try:
        current_user = get_jwt_identity()
        data = request.get_json(silent=True) or {}
        workspace_id = data.get('workspaceId')
        if not workspace_id or not get_workspace_by_id(workspace_id, current_user):
            return jsonify({"error": "Workspace not found"}), 404

        try:
            offer_input = OfferInput(**(data.get('input') or {}))
            if data.get('analysis'):
                result = AnalysisResult(
                    analysis=OfferAnalysis.model_validate(data['analysis']),
                    used_fallback=bool(data.get('fallback', False)),
                )
            else:
                result = None
        except ValidationError as e:
            return jsonify({"error": "Invalid offer", "errors": e.errors(include_url=False, include_context=False)}), 400

        if not offer_input.value():
            return jsonify({"error": "Offer input is required"}), 400
        if result is None:
            result = analyze_offer(optional_llm(), offer_input.value())

        offer = save_offer(workspace_id, current_user, offer_input, result)
        return jsonify(serialize_document(offer)), 201
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_bp.route('/workspaces/<workspace_id>/offers', methods=['GET'])
@jwt_required()
def list_offers(workspace_id):
    try:
        if not get_workspace_by_id(workspace_id, get_jwt_identity()):
            return jsonify({"error": "Workspace not found"}), 404
        offers = get_workspace_offers(workspace_id)
        return jsonify([serialize_document(o) for o in offers]), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_bp.route('/offers/<offer_id>', methods=['GET'])
@jwt_required()
def get_offer_route(offer_id):
    try:
        offer = get_offer(offer_id)
        if not offer:
            return jsonify({"error": "Offer not found"}), 404
        return jsonify(serialize_document(offer)), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@offer_bp.route('/offers/<offer_id>/funnel', methods=['POST'])
@jwt_required()
def create_funnel_route(offer_id):
    try:
        result = create_funnel_from_offer(get_services().llm, offer_id, get_jwt_identity())
        return jsonify(result), 201
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.error(f"Funnel creation failed for offer {offer_id}: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@offer_bp.route('/funnels/<funnel_id>', methods=['GET'])
@jwt_required()
def get_funnel_route(funnel_id):
    try:
        funnel = get_funnel(funnel_id)
        if not funnel:
            return jsonify({"error": "Funnel not found"}), 404
        funnel["pages"] = [serialize_document(page) for page in funnel["pages"]]
        return jsonify(serialize_document(funnel)), 200
    except Exception as e:
        return jsonify({"error": str(e)}), 500

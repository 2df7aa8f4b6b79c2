import logging
from datetime import timedelta
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token
from pydantic import ValidationError

from models.user import UserRegister
from services.auth_service import register_user, authenticate_user

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def issue_token(user):
    expires_delta = timedelta(days=current_app.config["JWT_EXPIRES_DAYS"])
    return create_access_token(identity=str(user['_id']), expires_delta=expires_delta)


def user_response(user, token):
    return {
        "id": str(user['_id']),
        "name": user.get('name'),
        "email": user['email'],
        "token": token,
    }


@auth_bp.route('/register', methods=['POST', 'OPTIONS'])
def register():
    """
    Create an account from {name, email, password} and log it in.
    """
    if request.method == 'OPTIONS':
        return jsonify({'message': 'OK'}), 200

    data = request.get_json(silent=True) or {}
    try:
        user_info = UserRegister(**data)
    except ValidationError as e:
        logger.error(f"Pydantic validation error: {e.errors()}")
        return jsonify({"error": "Missing required fields", "errors": e.errors(include_url=False, include_context=False)}), 400

    try:
        user, error = register_user(user_info)
        if error:
            return jsonify({"error": error}), 400

        return jsonify(user_response(user, issue_token(user))), 201

    except Exception as e:
        logger.error(f"Error occurred during registration: {str(e)}")
        return jsonify({"error": "Registration failed"}), 500


@auth_bp.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'message': 'OK'}), 200

    data = request.get_json(silent=True) or {}
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    try:
        user = authenticate_user(email, password)
        if not user:
            logger.info(f"Failed login for {email}")
            return jsonify({"error": "Invalid email or password"}), 401

        return jsonify(user_response(user, issue_token(user))), 200

    except Exception as e:
        logger.error(f"Error occurred during login: {str(e)}")
        return jsonify({"error": "Login failed"}), 500

"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login
- Profile retrieval (/me)

Business rules live in `auth_service.service`; JWT logic in
`auth_service.utils`. Errors propagate to the gateway's error handlers.
"""

import logging
from typing import Tuple

from flask import Blueprint, request, jsonify, Response

from calendar_app.auth_service.service import register_user, login_user, get_user
from calendar_app.auth_service.utils import verify_token_from_request
from calendar_app.errors import get_json_body

auth_bp = Blueprint("auth", __name__)


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every request to the authentication service.
    Headers are not logged since they carry bearer tokens.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - username (str): Unique username.
    - email (str): Unique email address.
    - password (str): Minimum 6 characters.

    Returns:
        201: JSON with token and public user {id, username, email}.
        400: Missing fields, weak password, or user already exists.
    """
    data = get_json_body()

    result = register_user(
        data.get("username"),
        data.get("email"),
        data.get("password"),
    )
    return jsonify(result), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with token and public user.
        400: Missing or invalid credentials (same message for wrong email
             and wrong password).
    """
    data = get_json_body()

    result = login_user(data.get("email"), data.get("password"))
    return jsonify(result), 200


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
def get_current_user() -> Tuple[Response, int]:
    """
    Return the public profile of the token's owner.

    Requires Authorization header: Bearer <token>
    """
    user_id = verify_token_from_request()
    return jsonify(get_user(user_id)), 200

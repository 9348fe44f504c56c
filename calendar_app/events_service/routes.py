"""
Events service routes: create, read, update and delete the caller's events.

Every route verifies the bearer token first; a request without a valid
token never reaches the event store.
"""

import logging
from typing import Tuple

from flask import Blueprint, request, jsonify, Response

from calendar_app.auth_service.utils import verify_token_from_request
from calendar_app.errors import ValidationError, get_json_body
from calendar_app.events_service import service

events_bp = Blueprint("events", __name__)


@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


@events_bp.route("/events", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return all events owned by the authenticated user.

    Returns:
        200: List of event objects.
        401: Missing or invalid token.
    """
    user_id = verify_token_from_request()
    return jsonify(service.list_events(user_id)), 200


@events_bp.route("/events", methods=["POST"])
def create_event() -> Tuple[Response, int]:
    """
    Create an event for the authenticated user.

    Body: {title, date, description?, category?, reminder?, reminder_time?}

    Returns:
        201: The created event.
        400: Validation error.
        401: Missing or invalid token.
    """
    user_id = verify_token_from_request()
    data = get_json_body()
    return jsonify(service.create_event(user_id, data)), 201


@events_bp.route("/events/<int:event_id>", methods=["PUT"])
def update_event(event_id: int) -> Tuple[Response, int]:
    """
    Update fields of one of the caller's events.

    An optional integer "version" in the body turns on the stale-write check.

    Returns:
        200: The updated event.
        400: Validation error.
        401: Missing or invalid token.
        404: Event not found (or owned by someone else).
        409: "version" did not match the stored event.
    """
    user_id = verify_token_from_request()
    data = get_json_body()

    expected_version = data.get("version")
    if expected_version is not None and (
        isinstance(expected_version, bool) or not isinstance(expected_version, int)
    ):
        raise ValidationError("version must be an integer")

    event = service.update_event(user_id, event_id, data, expected_version=expected_version)
    return jsonify(event), 200


@events_bp.route("/events/<int:event_id>", methods=["DELETE"])
def delete_event(event_id: int) -> Tuple[Response, int]:
    """
    Delete one of the caller's events.

    Returns:
        200: {"message": "Event deleted"}
        401: Missing or invalid token.
        404: Event not found (or owned by someone else, or already deleted).
    """
    user_id = verify_token_from_request()
    return jsonify(service.delete_event(user_id, event_id)), 200

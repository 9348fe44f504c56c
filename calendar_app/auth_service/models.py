"""
User record helpers for the authentication service.

A user row looks like:
    user_id, username, email, password_hash, created_at

Only the public projection ever leaves the service.
"""

from typing import Any, Dict, Mapping

MIN_PASSWORD_LENGTH = 6
USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255


def public_user(row: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Project a user row onto the fields safe to return to clients.

    The password hash is never included.
    """
    return {
        "id": row["user_id"],
        "username": row["username"],
        "email": row["email"],
    }

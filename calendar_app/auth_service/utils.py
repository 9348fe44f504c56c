"""
Shared authentication helpers.
Provides token creation and verification for every protected route.
"""

import os
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from flask import request
from dotenv import load_dotenv

from calendar_app.errors import Unauthenticated

# Load .env only once here
load_dotenv()

# Load secrets & configs
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET is missing. Set it in .env")

JWT_ALGORITHM = "HS256"
TOKEN_EXPIRATION_MINUTES = int(os.getenv("TOKEN_EXPIRATION_MINUTES", 1440))  # Default 24 hours


# --- JWT CREATION ---
def create_token(user_id: int, expires_in: Optional[timedelta] = None) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (int): The unique ID of the user.
        expires_in (timedelta, optional): Validity window. Defaults to
            TOKEN_EXPIRATION_MINUTES.

    Returns:
        str: Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(minutes=TOKEN_EXPIRATION_MINUTES)

    payload = {
        # PyJWT requires "sub" to be a string
        "sub": str(user_id),
        "exp": now + expires_in,
        "iat": now
    }

    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


# --- JWT VALIDATION ---
def verify_token(token: Optional[str]) -> int:
    """
    Validate a JWT and return the user id it was minted for.

    Args:
        token (str): JWT string.

    Returns:
        int: user_id embedded in the token.

    Raises:
        Unauthenticated: Token missing, malformed, expired or badly signed.
    """
    if not token:
        raise Unauthenticated()

    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
        return int(payload["sub"])
    except (jwt.InvalidTokenError, ValueError) as e:
        raise Unauthenticated() from e


def verify_token_from_request() -> int:
    """
    Verify the JWT in the Authorization header of the current request.

    Returns:
        int: The authenticated user's id.

    Raises:
        Unauthenticated: Header missing, not a Bearer token, or token invalid.
    """
    auth = request.headers.get("Authorization", "")

    if not auth.startswith("Bearer "):
        raise Unauthenticated()

    token = auth.split(" ", 1)[1].strip()
    return verify_token(token)

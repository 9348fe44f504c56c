"""
Authentication service operations.

These functions hold the registration/login rules and talk to the
credential store; routes.py only parses requests and shapes responses.
Failures are raised as `calendar_app.errors` exceptions.
"""

import logging
from typing import Any, Dict

import psycopg2.errors
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from calendar_app.auth_service.models import (
    EMAIL_MAX_LENGTH,
    MIN_PASSWORD_LENGTH,
    USERNAME_MAX_LENGTH,
    public_user,
)
from calendar_app.auth_service.utils import create_token
from calendar_app.database.db_connection import get_db
from calendar_app.errors import (
    DuplicateUser,
    InvalidCredentials,
    NotFound,
    ValidationError,
    WeakPassword,
)

ph = PasswordHasher()


def normalize_email(email: Any) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def register_user(username: str, email: str, password: str) -> Dict[str, Any]:
    """
    Create an account and mint its first token.

    Args:
        username (str): Unique display name.
        email (str): Unique email address (stored lower-cased).
        password (str): Plaintext password, at least MIN_PASSWORD_LENGTH chars.

    Returns:
        dict: {"token": str, "user": {"id", "username", "email"}}

    Raises:
        ValidationError: Missing or oversized fields.
        WeakPassword: Password shorter than MIN_PASSWORD_LENGTH.
        DuplicateUser: Username or email already registered.
    """
    username = username.strip() if isinstance(username, str) else ""
    email = normalize_email(email)
    if not isinstance(password, str):
        password = ""

    if not username or not email or not password:
        raise ValidationError("Username, email and password required")
    if "\x00" in username or "\x00" in email:
        raise ValidationError("Username and email cannot contain NUL characters")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be {USERNAME_MAX_LENGTH} characters or less")
    if len(email) > EMAIL_MAX_LENGTH or "@" not in email:
        raise ValidationError("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    # Hash password using Argon2 (salted per hash)
    pw_hash = ph.hash(password)

    sql = """
        INSERT INTO users (username, email, password_hash)
        VALUES (%s, %s, %s)
        RETURNING user_id, username, email;
    """

    # The unique constraints on both columns decide duplicates, so two
    # concurrent registrations cannot both succeed.
    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (username, email, pw_hash))
                user = cur.fetchone()
    except psycopg2.errors.UniqueViolation as e:
        raise DuplicateUser() from e

    logging.info(f"[Auth] Registered user_id={user['user_id']}")
    return {"token": create_token(user["user_id"]), "user": public_user(user)}


def login_user(email: str, password: str) -> Dict[str, Any]:
    """
    Check credentials and mint a token.

    Unknown email and wrong password raise the same InvalidCredentials so the
    response does not reveal which one was wrong.

    Returns:
        dict: {"token": str, "user": {"id", "username", "email"}}
    """
    email = normalize_email(email)
    if not isinstance(password, str):
        password = ""

    if not email or not password:
        raise ValidationError("Email and password required")
    if "\x00" in email:
        raise ValidationError("Email cannot contain NUL characters")

    sql = "SELECT user_id, username, email, password_hash FROM users WHERE email = %s;"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (email,))
            user = cur.fetchone()

    if not user:
        raise InvalidCredentials()

    # Verify password against hash
    try:
        ph.verify(user["password_hash"], password)
    except (VerificationError, InvalidHashError) as e:
        raise InvalidCredentials() from e

    logging.info(f"[Auth] Login user_id={user['user_id']}")
    return {"token": create_token(user["user_id"]), "user": public_user(user)}


def get_user(user_id: int) -> Dict[str, Any]:
    """
    Load the public profile of an authenticated user.

    Raises:
        NotFound: The account behind a still-valid token no longer exists.
    """
    sql = "SELECT user_id, username, email FROM users WHERE user_id = %s;"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (user_id,))
            user = cur.fetchone()

    if not user:
        raise NotFound("User not found")

    return public_user(user)

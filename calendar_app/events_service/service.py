"""
Event service operations: owner-scoped create, list, update and delete.

Every statement against the events table carries `user_id = %s` in its WHERE
clause (or sets it on insert). Callers pass the user id taken from a verified
token; ids found in request bodies are never used.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from calendar_app.database.db_connection import get_db
from calendar_app.errors import NotFound, ValidationError, VersionConflict

# --- CONSTANTS FOR VALIDATION ---
TITLE_MAX_LENGTH = 200
CATEGORY_MAX_LENGTH = 50

# Columns a client may set. Owner and bookkeeping columns are excluded.
MUTABLE_FIELDS = ["title", "description", "date", "category", "reminder", "reminder_time"]

EVENT_COLUMNS = (
    "event_id, user_id, title, description, date, category, "
    "reminder, reminder_time, version, created_at, updated_at"
)


def parse_dt(val: Optional[str]) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 or datetime-local string to an aware datetime.

    Values without an offset are taken as UTC.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not val or not isinstance(val, str):
        return None
    try:
        # Handles 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        if val.endswith('Z'):
            val = val[:-1] + '+00:00'
        parsed = datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso(val: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as ISO-8601 UTC with a trailing Z."""
    if val is None:
        return None
    if val.tzinfo is None:
        val = val.replace(tzinfo=timezone.utc)
    return val.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def serialize_event(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["event_id"],
        "user_id": row["user_id"],
        "title": row["title"],
        "description": row["description"],
        "date": to_iso(row["date"]),
        "category": row["category"],
        "reminder": bool(row["reminder"]),
        "reminder_time": to_iso(row["reminder_time"]),
        "version": row["version"],
        "created_at": to_iso(row["created_at"]),
        "updated_at": to_iso(row["updated_at"]),
    }


def clean_event_fields(data: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Validate client-supplied event fields and convert them to column values.

    Args:
        data (dict): Request body. Unknown keys (including any owner id) are dropped.
        partial (bool): If True only the keys present are validated (update);
            otherwise title and date are required (create).

    Returns:
        dict: column name -> value, restricted to MUTABLE_FIELDS.

    Raises:
        ValidationError: A field is missing or has the wrong shape.
    """
    fields: Dict[str, Any] = {}

    for key in ("title", "description", "category"):
        if isinstance(data.get(key), str) and "\x00" in data[key]:
            raise ValidationError(f"{key.capitalize()} cannot contain NUL characters")

    if "title" in data or not partial:
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required")
        title = title.strip()
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError(f"Title must be {TITLE_MAX_LENGTH} characters or less")
        fields["title"] = title

    if "date" in data or not partial:
        date = parse_dt(data.get("date"))
        if date is None:
            raise ValidationError("A valid ISO-8601 date is required")
        fields["date"] = date

    if "description" in data:
        description = data["description"]
        if description is not None and not isinstance(description, str):
            raise ValidationError("Description must be a string")
        fields["description"] = description

    if "category" in data:
        category = data["category"]
        if category is not None:
            if not isinstance(category, str):
                raise ValidationError("Category must be a string")
            if len(category) > CATEGORY_MAX_LENGTH:
                raise ValidationError(f"Category must be {CATEGORY_MAX_LENGTH} characters or less")
        fields["category"] = category

    if "reminder" in data:
        if not isinstance(data["reminder"], bool):
            raise ValidationError("Reminder must be true or false")
        fields["reminder"] = data["reminder"]

    if "reminder_time" in data:
        raw = data["reminder_time"]
        reminder_time = parse_dt(raw)
        if raw is not None and reminder_time is None:
            raise ValidationError("Invalid reminder_time format. Use ISO-8601.")
        fields["reminder_time"] = reminder_time

    return fields


def list_events(user_id: int) -> List[Dict[str, Any]]:
    """
    Return every event owned by `user_id`, in insertion order.

    Filtering by day or month is left to the client.
    """
    sql = f"SELECT {EVENT_COLUMNS} FROM events WHERE user_id = %s ORDER BY event_id;"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (user_id,))
            rows = cur.fetchall()

    return [serialize_event(row) for row in rows]


def create_event(user_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create an event owned by `user_id`.

    Any owner field in `data` is ignored; the owner is always `user_id`.
    """
    fields = clean_event_fields(data)
    fields["user_id"] = user_id

    columns = ", ".join(fields)
    placeholders = ", ".join(["%s"] * len(fields))
    sql = f"INSERT INTO events ({columns}) VALUES ({placeholders}) RETURNING {EVENT_COLUMNS};"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, list(fields.values()))
            row = cur.fetchone()

    logging.info(f"[Events] Created event_id={row['event_id']} for user_id={user_id}")
    return serialize_event(row)


def update_event(
    user_id: int,
    event_id: int,
    data: Mapping[str, Any],
    expected_version: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Merge `data` into the caller's event and return the stored result.

    Permission:
    - Only the owner. Another user's event id behaves exactly like an id
      that does not exist.

    Concurrency:
    - Without `expected_version` the last write wins.
    - With it, the update only applies if the stored version matches.

    Raises:
        ValidationError: No updatable fields, or a field is invalid.
        NotFound: No event with this id for this owner.
        VersionConflict: The event exists for this owner at another version.
    """
    fields = clean_event_fields(data, partial=True)
    if not fields:
        raise ValidationError("No valid fields to update")

    set_clause = ", ".join(f"{k} = %s" for k in fields)
    set_clause += ", version = version + 1, updated_at = CURRENT_TIMESTAMP"
    values: List[Any] = list(fields.values()) + [event_id, user_id]

    where = "event_id = %s AND user_id = %s"
    if expected_version is not None:
        where += " AND version = %s"
        values.append(expected_version)

    sql = f"UPDATE events SET {set_clause} WHERE {where} RETURNING {EVENT_COLUMNS};"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, values)
            row = cur.fetchone()

            if row is None and expected_version is not None:
                cur.execute(
                    "SELECT version FROM events WHERE event_id = %s AND user_id = %s;",
                    (event_id, user_id),
                )
                current = cur.fetchone()
                if current is not None:
                    raise VersionConflict(
                        f"Event was modified by another request (current version {current['version']})"
                    )

    if row is None:
        raise NotFound()

    logging.info(f"[Events] Updated event_id={event_id} for user_id={user_id}")
    return serialize_event(row)


def delete_event(user_id: int, event_id: int) -> Dict[str, str]:
    """
    Delete the caller's event.

    Raises:
        NotFound: No event with this id for this owner (also on repeat deletes).
    """
    sql = "DELETE FROM events WHERE event_id = %s AND user_id = %s RETURNING event_id;"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (event_id, user_id))
            row = cur.fetchone()

    if row is None:
        raise NotFound()

    logging.info(f"[Events] Deleted event_id={event_id} for user_id={user_id}")
    return {"message": "Event deleted"}

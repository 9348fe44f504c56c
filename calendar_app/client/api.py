"""
HTTP client for the calendar API.

    session = Session.load()
    client = CalendarClient("http://localhost:5000", session)
    if not session.is_authenticated:
        client.login("me@example.com", "secret1")
    events = client.list_events()
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from calendar_app.client.session import Session

DEFAULT_TIMEOUT_SECONDS = 10


class ClientError(Exception):
    """A non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class CalendarClient:
    def __init__(self, base_url: str, session: Session, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None, auth: bool = True) -> Any:
        headers = {}
        if auth:
            if not self.session.is_authenticated:
                raise ClientError(401, "Not logged in")
            headers["Authorization"] = f"Bearer {self.session.token}"

        response = requests.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            headers=headers,
            timeout=self.timeout,
        )

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = body.get("message", response.reason) if isinstance(body, dict) else response.reason
            if response.status_code == 401 and auth:
                # Expired or rejected token: back to the login screen
                logging.info("Session rejected by server, clearing it")
                self.session.clear()
            raise ClientError(response.status_code, message)

        return response.json()

    # --- AUTH ---
    def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        data = self._request(
            "POST", "/api/register",
            json={"username": username, "email": email, "password": password},
            auth=False,
        )
        self.session.start(data["token"], data["user"])
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/login", json={"email": email, "password": password}, auth=False)
        self.session.start(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.session.clear()

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/api/me")

    # --- EVENTS ---
    def list_events(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/events")

    def create_event(self, title: str, date: str, **fields: Any) -> Dict[str, Any]:
        return self._request("POST", "/api/events", json={"title": title, "date": date, **fields})

    def update_event(self, event_id: int, **fields: Any) -> Dict[str, Any]:
        return self._request("PUT", f"/api/events/{event_id}", json=fields)

    def delete_event(self, event_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/events/{event_id}")

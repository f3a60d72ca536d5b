"""
Session Gate
============
Answers "who is signed in" for the garden and lets the user sign in, sign up
and sign out.

Two gates share one protocol:

- ``SupabaseSessionGate`` talks to a GoTrue-compatible auth API (the Supabase
  ``/auth/v1`` endpoints) over ``requests``.
- ``DemoSessionGate`` is used when no remote backend is configured. It always
  reports the fixed demo identity and its sign-in operations are no-ops.

Subscribers registered with ``on_auth_change`` are called with the new
session (or ``None`` after sign-out) whenever the signed-in identity changes.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Protocol

import requests

from app.domain.exceptions import AuthenticationError, ValidationError
from app.utils.time import utc_now
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional["Session"]], None]


@dataclass(frozen=True)
class Session:
    """An authenticated identity. ``user_id`` is the plant partition key."""

    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    demo: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "email": self.email,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "demo": self.demo,
        }


class SessionGate(Protocol):
    def get_session(self) -> Optional[Session]: ...

    def on_auth_change(self, callback: AuthListener) -> Callable[[], None]: ...

    def sign_in(self, email: str, password: str) -> Session: ...

    def sign_up(self, email: str, password: str) -> Dict[str, Any]: ...

    def sign_out(self) -> None: ...


class _ListenerMixin:
    """Subscriber bookkeeping shared by both gates."""

    def _init_listeners(self) -> None:
        self._listeners: List[AuthListener] = []
        self._listeners_lock = threading.Lock()

    def on_auth_change(self, callback: AuthListener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, session: Optional[Session]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(session)
            except Exception:
                logger.exception("Auth listener %r failed", listener)


def _require_credentials(email: str, password: str) -> None:
    if not email or not password:
        raise ValidationError("Email and password are required")


class SupabaseSessionGate(_ListenerMixin):
    """Session gate backed by the GoTrue REST API of a Supabase project."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        audit_logger: Optional[AuditLogger] = None,
    ) -> None:
        self._auth_url = base_url.rstrip("/") + "/auth/v1"
        self._api_key = api_key
        self._http = session or requests.Session()
        self._timeout = timeout
        self.audit_logger = audit_logger
        self._session: Optional[Session] = None
        self._lock = threading.Lock()
        self._init_listeners()

    def _post(self, path: str, payload: Optional[dict] = None, *, params=None, token: Optional[str] = None) -> Any:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._api_key}",
            "Content-Type": "application/json",
        }
        url = f"{self._auth_url}/{path}"
        try:
            response = self._http.post(url, json=payload or {}, params=params, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.error("Auth request %s failed: %s", path, exc)
            raise AuthenticationError(f"Authentication service unreachable: {exc}") from exc

        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None
        if not 200 <= response.status_code < 300:
            raise AuthenticationError(_provider_message(body, response), detail={"status": response.status_code})
        return body

    def get_session(self) -> Optional[Session]:
        with self._lock:
            session = self._session
        if session and session.expires_at and session.expires_at <= utc_now():
            logger.info("Session for %s expired", session.user_id)
            with self._lock:
                self._session = None
            self._emit(None)
            return None
        return session

    def sign_in(self, email: str, password: str) -> Session:
        _require_credentials(email, password)
        try:
            body = self._post("token", {"email": email, "password": password}, params={"grant_type": "password"})
        except AuthenticationError as exc:
            logger.warning("Sign-in failed for '%s': %s", email, exc)
            self._audit(email, "sign_in", "denied", error=str(exc))
            raise

        session = _session_from_body(body or {}, fallback_email=email)
        with self._lock:
            self._session = session
        logger.info("User '%s' signed in", session.user_id)
        self._audit(session.user_id, "sign_in", "success")
        self._emit(session)
        return session

    def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        """Register a new account. The user still has to sign in afterwards."""
        _require_credentials(email, password)
        try:
            body = self._post("signup", {"email": email, "password": password})
        except AuthenticationError as exc:
            logger.warning("Sign-up failed for '%s': %s", email, exc)
            self._audit(email, "sign_up", "error", error=str(exc))
            raise

        user = (body or {}).get("user") or body or {}
        logger.info("User '%s' registered", email)
        self._audit(email, "sign_up", "success")
        return {"email": user.get("email", email), "id": user.get("id")}

    def sign_out(self) -> None:
        with self._lock:
            session, self._session = self._session, None
        if session is None:
            return
        try:
            self._post("logout", token=session.access_token)
        except AuthenticationError as exc:
            # the local session is gone either way
            logger.warning("Remote sign-out for '%s' failed: %s", session.user_id, exc)
        logger.info("User '%s' signed out", session.user_id)
        self._audit(session.user_id, "sign_out", "success")
        self._emit(None)

    def _audit(self, actor: str, action: str, outcome: str, **meta: Any) -> None:
        if self.audit_logger:
            self.audit_logger.log_event(actor=actor, action=action, resource="session", outcome=outcome, **meta)


class DemoSessionGate(_ListenerMixin):
    """Always signed in as the demo identity; sign-in operations do nothing."""

    def __init__(self, demo_user_id: str = "demo-user") -> None:
        self._session = Session(user_id=demo_user_id, demo=True)
        self._init_listeners()

    def get_session(self) -> Optional[Session]:
        return self._session

    def sign_in(self, email: str, password: str) -> Session:
        logger.debug("Demo mode: ignoring sign-in for '%s'", email)
        return self._session

    def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        logger.debug("Demo mode: ignoring sign-up for '%s'", email)
        return {"email": email, "id": None}

    def sign_out(self) -> None:
        logger.debug("Demo mode: sign-out is a no-op")


def _session_from_body(body: Dict[str, Any], *, fallback_email: str) -> Session:
    user = body.get("user") or {}
    email = user.get("email") or fallback_email
    expires_at = None
    if body.get("expires_in"):
        expires_at = utc_now() + timedelta(seconds=int(body["expires_in"]))
    if not body.get("access_token"):
        raise AuthenticationError("Authentication service returned no session")
    return Session(
        # plant rows are partitioned by email
        user_id=email,
        email=email,
        access_token=body.get("access_token"),
        refresh_token=body.get("refresh_token"),
        expires_at=expires_at,
    )


def _provider_message(body: Any, response: requests.Response) -> str:
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return str(body[key])
    return (response.text or "").strip() or f"HTTP {response.status_code}"

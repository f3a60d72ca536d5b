"""
Session Endpoints
=================

JSON sign-in, sign-up, sign-out and session query. The gate notifies the
garden of every identity change, so a successful sign-in reloads the
garden and sign-out empties it.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response
from pydantic import ValidationError

from app.blueprints.api._common import fail as _fail, get_container as _container, get_json as _json, success as _success
from app.schemas import CredentialsRequest
from app.utils.http import safe_route

auth_bp = Blueprint("auth", __name__)

logger = logging.getLogger("auth.routes")


def _credentials() -> CredentialsRequest:
    return CredentialsRequest.model_validate(_json())


@auth_bp.get("/session")
@safe_route("Failed to get session")
def get_session() -> Response:
    container = _container()
    session = container.session_gate.get_session()
    return _success(
        {
            "session": session.to_dict() if session else None,
            "mode": container.backend_mode.value,
        }
    )


@auth_bp.post("/sign-in")
@safe_route("Sign-in failed")
def sign_in() -> Response:
    try:
        body = _credentials()
    except ValidationError as ve:
        return _fail("Invalid request", 400, details={"errors": ve.errors(include_url=False, include_context=False)})
    session = _container().session_gate.sign_in(body.email, body.password)
    return _success({"session": session.to_dict()})


@auth_bp.post("/sign-up")
@safe_route("Sign-up failed")
def sign_up() -> Response:
    try:
        body = _credentials()
    except ValidationError as ve:
        return _fail("Invalid request", 400, details={"errors": ve.errors(include_url=False, include_context=False)})
    user = _container().session_gate.sign_up(body.email, body.password)
    return _success({"user": user}, 201, message="Account created successfully! Please sign in.")


@auth_bp.post("/sign-out")
@safe_route("Sign-out failed")
def sign_out() -> Response:
    _container().session_gate.sign_out()
    return _success({"session": None})

from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import g, jsonify, request

from ..core.exceptions import AuthenticationError, ValidationError
from ..core.policy import Requester


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        token = header[len("Bearer ") :].strip()
        return token or None
    return None


def login_required(auth_service):
    """Decorator factory: resolve the bearer token to a Requester on ``g``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                raise AuthenticationError("Not authorized to access this route")
            g.requester = auth_service.resolve(token)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_requester() -> Requester:
    return g.requester


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(data: Any = None, *, status: int = 200, count: Optional[int] = None, pagination: Optional[dict] = None, message: Optional[str] = None):
    payload: dict[str, Any] = {"success": True}
    if message is not None:
        payload["message"] = message
    if count is not None:
        payload["count"] = count
    if pagination is not None:
        payload["pagination"] = pagination
    payload["data"] = data if data is not None else {}
    return jsonify(payload), status


def ok_list(items, **kwargs):
    items = list(items)
    return ok(items, count=len(items), **kwargs)


def ok_page(page):
    return ok(list(page.items), count=len(page.items), pagination=page.meta())


def error_response(message: str, status: int, **extra: Any):
    payload: dict[str, Any] = {"success": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status

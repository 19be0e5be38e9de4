"""Email/password sign-in against the backend's auth API."""

from __future__ import annotations

import logging

import httpx

from summit.config import Settings
from summit.errors import AuthError
from summit.models import UserContext
from summit.rest import build_async_client, error_message

logger = logging.getLogger(__name__)


def _user_from_payload(payload: dict) -> UserContext:
    user = payload.get("user") or payload
    if not isinstance(user, dict) or not user.get("id"):
        raise AuthError("Auth response did not include a user")
    metadata = user.get("user_metadata") or {}
    return UserContext(
        user_id=str(user["id"]),
        email=user.get("email") or "",
        full_name=metadata.get("full_name") or "",
        access_token=payload.get("access_token") or "",
    )


async def _post(
    settings: Settings,
    path: str,
    body: dict,
    params: dict | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    async with build_async_client(settings, transport=transport) as client:
        try:
            response = await client.post(f"/auth/v1/{path}", json=body, params=params)
        except httpx.HTTPError as exc:
            raise AuthError(f"Could not reach auth service: {exc}") from exc
    if not response.is_success:
        raise AuthError(error_message(response))
    try:
        return response.json()
    except ValueError as exc:
        raise AuthError("Auth service returned invalid JSON") from exc


async def sign_in(
    settings: Settings,
    email: str,
    password: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> UserContext:
    """Exchange email and password for a signed-in user."""
    payload = await _post(
        settings,
        "token",
        {"email": email, "password": password},
        params={"grant_type": "password"},
        transport=transport,
    )
    user = _user_from_payload(payload)
    logger.info("Signed in as %s", user.user_id)
    return user


async def sign_up(
    settings: Settings,
    email: str,
    password: str,
    full_name: str = "",
    transport: httpx.AsyncBaseTransport | None = None,
) -> UserContext:
    """Register a new account.

    When the backend requires email confirmation the returned user has no
    access token yet.
    """
    payload = await _post(
        settings,
        "signup",
        {"email": email, "password": password, "data": {"full_name": full_name}},
        transport=transport,
    )
    user = _user_from_payload(payload)
    logger.info("Signed up %s", user.user_id)
    return user

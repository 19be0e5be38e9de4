"""Repository adapter for the managed backend's PostgREST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from summit.config import Settings
from summit.errors import ConfigError, ConflictError, RepositoryError
from summit.models import Attraction, Membership, UserContext

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def build_async_client(
    settings: Settings,
    *,
    access_token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` pointed at the backend with auth headers set.

    Requests are authorized with the user's access token when there is one,
    and with the anon key otherwise.
    """
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ConfigError("SUMMIT_SUPABASE_URL and SUMMIT_SUPABASE_ANON_KEY must be set")
    bearer = access_token or settings.supabase_anon_key
    headers = {
        "apikey": settings.supabase_anon_key,
        "Authorization": f"Bearer {bearer}",
        "Accept": "application/json",
    }
    return httpx.AsyncClient(
        base_url=settings.supabase_url.rstrip("/"),
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers=headers,
        transport=transport,
    )


def error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("msg") or body.get("error_description") or body)
    return str(body)


def _is_conflict(response: httpx.Response) -> bool:
    if response.status_code == 409:
        return True
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("code") == UNIQUE_VIOLATION


class RestRepository:
    """Attraction repository backed by the ``attractions`` and ``user_attractions`` tables."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        user: UserContext | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RestRepository:
        token = user.access_token if user else None
        return cls(build_async_client(settings, access_token=token, transport=transport))

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, f"/rest/v1/{path}", **kwargs)
        except httpx.HTTPError as exc:
            raise RepositoryError(f"{method} {path} failed: {exc}") from exc
        if response.is_success:
            return response
        message = error_message(response)
        if _is_conflict(response):
            raise ConflictError(message, status_code=response.status_code)
        raise RepositoryError(
            f"{method} {path} returned {response.status_code}: {message}",
            status_code=response.status_code,
        )

    async def list_attractions(self) -> list[Attraction]:
        response = await self._request(
            "GET",
            "attractions",
            params={"select": "*", "order": "event_date.asc,start_time.asc"},
        )
        try:
            return [Attraction.from_record(row) for row in response.json()]
        except (ValueError, KeyError, TypeError) as exc:
            raise RepositoryError(f"Malformed attractions payload: {exc}") from exc

    async def list_memberships(self, user_id: str) -> list[Membership]:
        response = await self._request(
            "GET",
            "user_attractions",
            params={
                "select": "attraction_id,added_at",
                "user_id": f"eq.{user_id}",
                "order": "added_at.desc",
            },
        )
        try:
            return [
                Membership(
                    user_id=user_id,
                    attraction_id=str(row["attraction_id"]),
                    added_at=row.get("added_at") or "",
                )
                for row in response.json()
            ]
        except (ValueError, KeyError, TypeError) as exc:
            raise RepositoryError(f"Malformed memberships payload: {exc}") from exc

    async def create_membership(self, user_id: str, attraction_id: str) -> None:
        await self._request(
            "POST",
            "user_attractions",
            json={"user_id": user_id, "attraction_id": attraction_id},
            headers={"Prefer": "return=minimal"},
        )

    async def delete_membership(self, user_id: str, attraction_id: str) -> None:
        # PostgREST answers 204 whether or not a row matched
        await self._request(
            "DELETE",
            "user_attractions",
            params={"user_id": f"eq.{user_id}", "attraction_id": f"eq.{attraction_id}"},
        )

    async def aclose(self) -> None:
        await self.client.aclose()

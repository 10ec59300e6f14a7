"""Client-side favorites state for consumers of the JSON API.

``FavoritesSync`` keeps the set of job ids the signed-in user has favorited,
so result cards can show their heart state without a request per card.
Toggles update the set optimistically; when the server rejects a change the
set is thrown away and reloaded from ``GET /favorites/ids``.

    sync = FavoritesSync(httpx.AsyncClient(base_url=..., cookies=...))
    await sync.sign_in()
    if not sync.is_favorite(job["id"]):
        await sync.toggle(job, True)
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

FAVORITE_FIELDS = ("id", "title", "company", "location", "employmentType", "applyLink", "companyLogo", "description", "salary")


class SignInRequired(Exception):
    """Favoriting was attempted without a signed-in user."""


class FavoritesSyncError(Exception):
    """The server rejected a favorite change; local state was reloaded."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FavoritesSync:
    def __init__(self, client: httpx.AsyncClient, api_prefix: str = "/api/v1"):
        self.client = client
        self.api_prefix = api_prefix.rstrip("/")
        self.authenticated = False
        self.favorite_ids: set[str] = set()
        self.loaded = False

    @property
    def favorites_url(self) -> str:
        return f"{self.api_prefix}/favorites"

    async def sign_in(self) -> None:
        """Mark the session as authenticated and load favorites once."""
        self.authenticated = True
        await self.reload()

    def sign_out(self) -> None:
        self.authenticated = False
        self.invalidate()

    def invalidate(self) -> None:
        self.favorite_ids = set()
        self.loaded = False

    async def reload(self) -> set[str]:
        """Replace the local set with the server's."""
        self.invalidate()
        resp = await self.client.get(f"{self.favorites_url}/ids")
        if resp.status_code == 401:
            self.authenticated = False
            raise SignInRequired("Session is no longer signed in")
        resp.raise_for_status()
        self.favorite_ids = set(resp.json().get("data", []))
        self.loaded = True
        return self.favorite_ids

    def is_favorite(self, job_id: str) -> bool:
        return job_id in self.favorite_ids

    async def toggle(self, job: dict[str, Any], favorite: bool) -> bool:
        """Add or remove ``job`` and return the resulting favorite state.

        Anonymous callers get ``SignInRequired`` before any request is made.
        """
        if not self.authenticated:
            raise SignInRequired("You must be signed in to add jobs to your favorites")

        job_id = job["id"]
        if favorite:
            self.favorite_ids.add(job_id)
            payload = {name: job.get(name) for name in FAVORITE_FIELDS}
            request = self.client.post(self.favorites_url, json=payload)
            settled = (201, 409)
        else:
            self.favorite_ids.discard(job_id)
            request = self.client.delete(self.favorites_url, params={"jobId": job_id})
            settled = (200, 404)

        try:
            resp = await request
        except httpx.HTTPError as e:
            await self._reconcile(job_id)
            raise FavoritesSyncError(f"Failed to update favorites: {e}") from e

        if resp.status_code in settled:
            return favorite

        message = _error_message(resp)
        logger.warning(f"Favorite toggle for {job_id} rejected: {resp.status_code} {message}")
        await self._reconcile(job_id)
        raise FavoritesSyncError(message, status_code=resp.status_code)

    async def _reconcile(self, job_id: str) -> None:
        try:
            await self.reload()
        except (httpx.HTTPError, SignInRequired) as e:
            # Leave the cache invalid; the next reload will retry
            logger.warning(f"Could not reload favorites after failed toggle of {job_id}: {e}")


def _error_message(resp: httpx.Response) -> str:
    try:
        return resp.json().get("message") or "Failed to update favorites"
    except ValueError:
        return "Failed to update favorites"

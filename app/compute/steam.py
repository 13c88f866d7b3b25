"""
Steam Trust Check - Steam Web API Client

Thin async wrapper over the public Steam Web API endpoints we read.
Returns raw decoded JSON. No scoring logic, no field interpretation.

Failure classification happens here, once:
    non-2xx                 → CheckError(classify_status(status))
    2xx with a non-JSON body → UPSTREAM_UNAVAILABLE
    timeout                 → UPSTREAM_UNAVAILABLE
    other transport error   → UPSTREAM_UNEXPECTED

Dependencies: httpx
"""
import asyncio
from typing import Any, Dict, Optional

import httpx
import structlog

from app.errors import CheckError, ErrorKind, classify_status

logger = structlog.get_logger()

STEAM_API_BASE = "https://api.steampowered.com"
_USER_AGENT = "SteamTrustCheck/1.0 (+https://github.com/steam-trust-check)"
_BROWSER_UA = "Mozilla/5.0"


class SteamClient:
    """
    One instance per service. Bounds concurrent upstream calls with a
    semaphore so a single check fans out to at most `max_concurrency` requests.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = STEAM_API_BASE,
        timeout: float = 10.0,
        max_concurrency: int = 5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": _USER_AGENT},
            follow_redirects=True,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
        )

    async def _send(self, endpoint: str, url: str, **kwargs) -> httpx.Response:
        async with self._semaphore:
            try:
                return await asyncio.wait_for(self._client.get(url, **kwargs), timeout=self.timeout)
            except (asyncio.TimeoutError, httpx.TimeoutException):
                logger.warning("steam_timeout", endpoint=endpoint, timeout=self.timeout)
                raise CheckError(
                    ErrorKind.UPSTREAM_UNAVAILABLE,
                    f"{endpoint} timed out after {self.timeout}s.",
                    endpoint=endpoint,
                )
            except httpx.HTTPError as e:
                logger.warning("steam_transport_error", endpoint=endpoint, error=str(e))
                raise CheckError(
                    ErrorKind.UPSTREAM_UNEXPECTED,
                    f"{endpoint} request failed: {type(e).__name__}.",
                    endpoint=endpoint,
                ) from e

    async def _get_json(self, endpoint: str, path: str, params: Dict[str, Any]) -> Any:
        resp = await self._send(
            endpoint,
            f"{self.base_url}/{path}",
            params={"key": self.api_key, **params},
        )
        status = resp.status_code

        if not resp.is_success:
            kind = classify_status(status)
            logger.info("steam_http_error", endpoint=endpoint, status=status, kind=kind.value)
            raise CheckError(kind, f"{endpoint} HTTP {status}.", upstream_status=status, endpoint=endpoint)

        try:
            return resp.json()
        except ValueError:
            logger.warning("steam_non_json", endpoint=endpoint, status=status)
            raise CheckError(
                ErrorKind.UPSTREAM_UNAVAILABLE,
                f"{endpoint} returned non-JSON (HTTP {status}).",
                upstream_status=status,
                endpoint=endpoint,
            )

    # ── Endpoints ─────────────────────────────────

    async def resolve_vanity(self, vanity: str) -> Any:
        return await self._get_json(
            "ResolveVanityURL", "ISteamUser/ResolveVanityURL/v1/", {"vanityurl": vanity},
        )

    async def player_summaries(self, steamid: str) -> Any:
        return await self._get_json(
            "GetPlayerSummaries", "ISteamUser/GetPlayerSummaries/v2/", {"steamids": steamid},
        )

    async def steam_level(self, steamid: str) -> Any:
        return await self._get_json(
            "GetSteamLevel", "IPlayerService/GetSteamLevel/v1/", {"steamid": steamid},
        )

    async def owned_games(self, steamid: str, include_appinfo: bool = False) -> Any:
        params = {"steamid": steamid, "include_played_free_games": 1}
        if include_appinfo:
            params["include_appinfo"] = 1
        return await self._get_json("GetOwnedGames", "IPlayerService/GetOwnedGames/v1/", params)

    async def friend_list(self, steamid: str) -> Any:
        return await self._get_json(
            "GetFriendList", "ISteamUser/GetFriendList/v1/",
            {"steamid": steamid, "relationship": "friend"},
        )

    async def player_bans(self, steamid: str) -> Any:
        return await self._get_json(
            "GetPlayerBans", "ISteamUser/GetPlayerBans/v1/", {"steamids": steamid},
        )

    async def profile_document(self, profile_url: str) -> Optional[str]:
        """
        Public community profile HTML, English locale.
        Returns None on an ordinary non-2xx; raises on 429/5xx.
        """
        sep = "&" if "?" in profile_url else "?"
        resp = await self._send(
            "ProfileHtml",
            f"{profile_url}{sep}l=english",
            headers={"User-Agent": _BROWSER_UA, "Accept-Language": "en-US,en;q=0.9"},
        )
        if not resp.is_success:
            kind = classify_status(resp.status_code)
            if kind in (ErrorKind.RATE_LIMITED, ErrorKind.UPSTREAM_UNAVAILABLE):
                raise CheckError(
                    kind, "Steam profile page fetch failed.",
                    upstream_status=resp.status_code, endpoint="ProfileHtml",
                )
            return None
        return resp.text

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

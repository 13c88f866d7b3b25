"""
Steam Trust Check - Identity Resolution

Accepts anything a person might paste and turns it into a SteamID64:
    76561197960287930                                   → as-is
    https://steamcommunity.com/profiles/76561197960287930 → embedded id
    https://steamcommunity.com/id/gaben                   → vanity "gaben"
    gaben                                                 → vanity "gaben"
Vanity names go through ResolveVanityURL.
"""
import re
from dataclasses import dataclass
from typing import Optional

import structlog

from app.compute.steam import SteamClient
from app.errors import CheckError, ErrorKind

logger = structlog.get_logger()

_STEAMID64 = re.compile(r"^[0-9]{17}$")
_VANITY_URL = re.compile(r"steamcommunity\.com/id/([^/?#\s]+)", re.IGNORECASE)
_PROFILE_URL = re.compile(r"steamcommunity\.com/profiles/([0-9]{17})", re.IGNORECASE)


def is_steamid64(value: str) -> bool:
    return bool(_STEAMID64.match(value))


@dataclass(frozen=True)
class ParsedInput:
    """What the raw string looks like before any network call."""
    steamid: Optional[str] = None
    vanity: Optional[str] = None


def parse_input(raw: Optional[str]) -> ParsedInput:
    """Classify raw input. Raises INVALID_INPUT when there is nothing to look up."""
    value = (raw or "").strip()
    if not value:
        raise CheckError(
            ErrorKind.INVALID_INPUT,
            "Please paste a Steam profile URL, vanity name, or SteamID64.",
        )

    if is_steamid64(value):
        return ParsedInput(steamid=value)

    m = _VANITY_URL.search(value)
    if m:
        return ParsedInput(vanity=m.group(1))

    m = _PROFILE_URL.search(value)
    if m:
        return ParsedInput(steamid=m.group(1))

    return ParsedInput(vanity=value)


async def resolve_steamid(raw: Optional[str], steam: SteamClient) -> str:
    """
    Resolve free-form input to a SteamID64.
    Upstream CheckErrors from ResolveVanityURL propagate unchanged.
    """
    parsed = parse_input(raw)
    if parsed.steamid:
        return parsed.steamid

    payload = await steam.resolve_vanity(parsed.vanity)
    response = payload.get("response") if isinstance(payload, dict) else None
    steamid = response.get("steamid") if isinstance(response, dict) else None
    if not steamid or not is_steamid64(str(steamid)):
        logger.info("vanity_not_resolved", vanity=parsed.vanity[:64])
        raise CheckError(
            ErrorKind.RESOLUTION_FAILED,
            "Could not resolve that input to a Steam profile.",
        )
    return str(steamid)

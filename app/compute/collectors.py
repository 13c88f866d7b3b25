"""
Steam Trust Check - Layer A: Signal Collectors

Every collector returns raw facts about one SteamID64. No scoring logic.

Sources (Steam Web API):
    1. GetPlayerSummaries  - identity summary (fatal-class: any error aborts)
    2. GetSteamLevel       - Steam level
    3. GetOwnedGames       - library size (+ hours for a selected game)
    4. GetFriendList       - friend count (only when the list is public)
    5. GetPlayerBans       - VAC / game / community / economy bans
    6. Profile HTML        - linked Twitch/YouTube/X/Kick accounts (best-effort)

Collectors 2-5 soft-fail: an ordinary upstream error leaves that one signal
absent. Rate limiting (429) and outages (5xx, timeouts, non-JSON bodies) abort
the whole run. The six run concurrently; the profile scrape is chained after
the summary because it needs the profile URL.
"""
import asyncio
import math
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, List, Optional, Tuple

import structlog

from app.compute.social_links import SocialLink, links_from_profile_document
from app.compute.steam import SteamClient
from app.errors import CheckError
from app.trust.engine import ProfileSignals, RestrictionRecord, TitleContext

logger = structlog.get_logger()


@dataclass
class Aggregation:
    signals: ProfileSignals
    social_links: List[SocialLink] = field(default_factory=list)
    sources_responded: List[str] = field(default_factory=list)
    soft_failures: List[str] = field(default_factory=list)
    collection_time_ms: float = 0.0


# ── Payload helpers ───────────────────────────────

def _dig(payload: Any, *path: str) -> Any:
    """Walk nested dicts; any missing or non-dict step yields None."""
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _first(items: Any) -> Optional[Dict[str, Any]]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _timestamp(value: Any) -> Optional[datetime]:
    """Unix seconds -> aware UTC datetime; unrepresentable values are unknown."""
    seconds = _count(value)
    if not seconds:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def minutes_to_hours(minutes: float) -> float:
    """Minutes → hours, one decimal, halves rounded up."""
    return math.floor(minutes / 60 * 10 + 0.5) / 10


# ── 1. Player summary ─────────────────────────────

def parse_summary(payload: Any) -> Dict[str, Any]:
    player = _first(_dig(payload, "response", "players"))
    if player is None:
        return {"is_public": None}

    gameid = player.get("gameid")
    currently_playing = None
    if player.get("gameextrainfo"):
        currently_playing = {
            "name": player["gameextrainfo"],
            "appid": int(gameid) if re.fullmatch(r"[0-9]+", str(gameid or "")) else None,
        }

    return {
        "persona_name": player.get("personaname"),
        "profile_url": player.get("profileurl"),
        "avatar_url": player.get("avatarfull"),
        "is_public": player.get("communityvisibilitystate") == 3,
        "created_at": _timestamp(player.get("timecreated")),
        "country_code": player.get("loccountrycode"),
        "currently_playing": currently_playing,
    }


async def collect_summary(steamid: str, steam: SteamClient) -> Dict[str, Any]:
    return parse_summary(await steam.player_summaries(steamid))


# ── 2. Steam level ────────────────────────────────

async def collect_level(steamid: str, steam: SteamClient) -> Optional[int]:
    return _count(_dig(await steam.steam_level(steamid), "response", "player_level"))


# ── 3. Owned games ────────────────────────────────

def parse_library(payload: Any, appid: Optional[int] = None) -> Tuple[Optional[int], Optional[float]]:
    """(game_count, hours for `appid`). Hours stay None when the game isn't listed."""
    games_count = _count(_dig(payload, "response", "game_count"))
    hours = None

    games = _dig(payload, "response", "games")
    if appid and isinstance(games, list):
        for game in games:
            if not isinstance(game, dict):
                continue
            try:
                matches = int(game.get("appid")) == int(appid)
            except (TypeError, ValueError):
                continue
            if matches:
                minutes = game.get("playtime_forever")
                if _count(minutes) is not None:
                    hours = minutes_to_hours(minutes)
                break

    return games_count, hours


async def collect_library(
    steamid: str, steam: SteamClient, appid: Optional[int] = None,
) -> Tuple[Optional[int], Optional[float]]:
    payload = await steam.owned_games(steamid, include_appinfo=bool(appid))
    return parse_library(payload, appid)


# ── 4. Friends ────────────────────────────────────

async def collect_friends(steamid: str, steam: SteamClient) -> Optional[int]:
    friends = _dig(await steam.friend_list(steamid), "friendslist", "friends")
    return len(friends) if isinstance(friends, list) else None


# ── 5. Bans ───────────────────────────────────────

def parse_bans(payload: Any) -> Optional[RestrictionRecord]:
    row = _first(_dig(payload, "players"))
    if row is None:
        return None
    return RestrictionRecord(
        vac_bans=_count(row.get("NumberOfVACBans")) or 0,
        game_bans=_count(row.get("NumberOfGameBans")) or 0,
        community_banned=bool(row.get("CommunityBanned")),
        economy_ban=row.get("EconomyBan") or "none",
        days_since_last_ban=_count(row.get("DaysSinceLastBan")),
    )


async def collect_bans(steamid: str, steam: SteamClient) -> Optional[RestrictionRecord]:
    return parse_bans(await steam.player_bans(steamid))


# ── 6. Social links ───────────────────────────────

async def collect_social_links(profile_url: Optional[str], steam: SteamClient) -> List[SocialLink]:
    """Never raises for upstream trouble; a failed scrape is just no links."""
    if not profile_url:
        return []
    try:
        document = await steam.profile_document(profile_url)
    except CheckError as e:
        logger.info("social_links_unavailable", kind=e.kind.value, status=e.upstream_status)
        return []
    return links_from_profile_document(document)


# ── Master Collector ──────────────────────────────

async def _soft(name: str, coro: Awaitable[Any], default: Any, agg: Aggregation) -> Any:
    """Run a soft-fail collector: fatal kinds propagate, anything else → default."""
    try:
        result = await coro
    except CheckError as e:
        if e.is_fatal:
            raise
        logger.info("signal_soft_failed", source=name, kind=e.kind.value, status=e.upstream_status)
        agg.soft_failures.append(f"{name}: {e.message[:100]}")
        return default
    agg.sources_responded.append(name)
    return result


async def _gather_or_cancel(*coros: Awaitable[Any]) -> List[Any]:
    """gather(), but the first failure cancels the siblings before propagating."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def collect_profile_signals(
    steamid: str,
    steam: SteamClient,
    title_appid: Optional[int] = None,
    title_name: Optional[str] = None,
) -> Aggregation:
    """
    Run every collector concurrently and assemble ProfileSignals.
    Raises CheckError on any fatal-class failure; never returns partial
    results in that case.
    """
    start = time.time()
    agg = Aggregation(signals=ProfileSignals(steamid=steamid))

    async def summary_then_links() -> Tuple[Dict[str, Any], List[SocialLink]]:
        summary = await collect_summary(steamid, steam)
        agg.sources_responded.append("summary")
        links = await collect_social_links(summary.get("profile_url"), steam)
        return summary, links

    (summary, links), level, (games_count, hours), friends, bans = await _gather_or_cancel(
        summary_then_links(),
        _soft("level", collect_level(steamid, steam), None, agg),
        _soft("library", collect_library(steamid, steam, title_appid), (None, None), agg),
        _soft("friends", collect_friends(steamid, steam), None, agg),
        _soft("bans", collect_bans(steamid, steam), None, agg),
    )

    s = agg.signals
    for key, value in summary.items():
        setattr(s, key, value)
    s.maturity_level = level
    s.library_count = games_count
    s.social_graph_size = friends
    s.restriction_record = bans
    if title_appid:
        s.title_context = TitleContext(appid=int(title_appid), name=title_name, hours=hours)

    agg.social_links = links
    agg.collection_time_ms = round((time.time() - start) * 1000, 2)
    return agg

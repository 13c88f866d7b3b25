"""
Steam Trust Check - Check Pipeline

Every /api/check request flows through this pipeline:

    Request → Resolve → Cache Check → [Collect Signals] → Score → Cache → Response

The pipeline handles:
    - Resolution of free-form input to a SteamID64 (before the cache, so
      every spelling of a profile shares one entry)
    - Cache-first strategy
    - Concurrent signal collection with per-signal soft failure
    - Scoring, openness and region classification
    - Caching only complete payloads; a failed or abandoned run stores nothing

The checker owns its SteamClient and ResultCache. Build one per app
(see app.main_trust) or per test.
"""
import time
from typing import Optional, Dict, Any

import structlog

from app.compute.cache import ResultCache, cache_key
from app.compute.collectors import Aggregation, collect_profile_signals
from app.compute.resolver import resolve_steamid
from app.compute.steam import SteamClient
from app.config import Settings
from app.errors import CheckError, ErrorKind
from app.trust.engine import ScoreResult, compute_score, profile_openness
from app.trust.regions import region_from_country_code
from app.trust.titles import title_name as featured_title_name

logger = structlog.get_logger()

DISCLAIMER = (
    "Trust Score is a quick snapshot using available Steam signals (account age, "
    "ban indicators, game library footprint, friends count, Steam level, and optional "
    "game hours). Not a cheat detector."
)


def build_payload(agg: Aggregation, result: ScoreResult) -> Dict[str, Any]:
    """Flatten signals + score into the response body (without the cache marker)."""
    s = agg.signals
    region = region_from_country_code(s.country_code)
    title = s.title_context

    return {
        "steamid": s.steamid,
        "persona_name": s.persona_name,
        "profile_url": s.profile_url,
        "avatar": s.avatar_url,

        "is_public": s.is_public,
        "openness": profile_openness(s),

        "created_at": s.created_at.isoformat() if s.created_at else None,
        "steam_level": s.maturity_level,
        "games_count": s.library_count,
        "friends_count": s.social_graph_size,
        "bans": s.restriction_record.to_dict() if s.restriction_record else None,

        "region": region.to_dict() if region else None,
        "currently_playing": s.currently_playing,

        "selected_game": {
            "appid": title.appid,
            "name": title.name,
            "hours": title.hours,
            "adjustment": result.game_adjustment,
        } if title else None,

        "social_links": [link.to_dict() for link in agg.social_links],

        "trust_level": result.trust_level,
        "verdict": result.verdict.value,
        "score_summary": result.explanation,
        "signals": result.signals_block(s.social_graph_size),

        "disclaimer": DISCLAIMER,
    }


class ProfileChecker:
    """Resolve → cache → aggregate → score, for one service instance."""

    def __init__(self, steam: SteamClient, cache: ResultCache):
        self.steam = steam
        self.cache = cache

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProfileChecker":
        steam = SteamClient(
            api_key=settings.STEAM_API_KEY,
            base_url=settings.STEAM_API_BASE,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            max_concurrency=settings.UPSTREAM_MAX_CONCURRENCY,
        )
        cache = ResultCache(
            ttl_seconds=settings.CACHE_TTL_SECONDS,
            max_entries=settings.CACHE_MAX_ENTRIES,
        )
        return cls(steam, cache)

    async def check(
        self,
        raw_input: Optional[str],
        title_appid: Optional[int] = None,
        title_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run one check. Returns the response payload with "cache": "hit"|"miss".
        Raises CheckError for every classified failure.
        """
        if not self.steam.api_key:
            raise CheckError(ErrorKind.CONFIGURATION, "Missing STEAM_API_KEY in the environment.")

        start = time.time()
        steamid = await resolve_steamid(raw_input, self.steam)
        title_appid = int(title_appid) if title_appid else None
        key = cache_key(steamid, title_appid)

        cached = self.cache.get(key)
        if cached is not None:
            cached["cache"] = "hit"
            logger.info("check_cache_hit", steamid=steamid, appid=title_appid)
            return cached

        if title_appid and not title_name:
            title_name = featured_title_name(title_appid)

        agg = await collect_profile_signals(steamid, self.steam, title_appid, title_name)
        result = compute_score(agg.signals)
        payload = build_payload(agg, result)

        self.cache.set(key, payload)

        logger.info(
            "check_completed",
            steamid=steamid,
            appid=title_appid,
            trust_level=result.trust_level,
            verdict=result.verdict.value,
            sources_responded=agg.sources_responded,
            soft_failures=agg.soft_failures,
            collection_ms=agg.collection_time_ms,
            pipeline_ms=round((time.time() - start) * 1000, 2),
        )

        payload["cache"] = "miss"
        return payload

    def status(self) -> Dict[str, Any]:
        return {"cache": self.cache.stats(), "steam_configured": bool(self.steam.api_key)}

    async def close(self) -> None:
        await self.steam.close()
        self.cache.close()
        logger.info("checker_shutdown")

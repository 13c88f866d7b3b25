"""Global test configuration - runs before any test module imports."""
import os
import time

import httpx

# Must be set BEFORE any app imports - get_settings() is cached at first use
os.environ["STEAM_API_KEY"] = "test-key"
os.environ.setdefault("CHECK_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "warning")

API = "https://api.steampowered.com"
STEAMID = "76561197960287930"
PROFILE_URL = "https://steamcommunity.com/id/gaben/"

SUMMARY_PATH = f"{API}/ISteamUser/GetPlayerSummaries/v2/"
LEVEL_PATH = f"{API}/IPlayerService/GetSteamLevel/v1/"
GAMES_PATH = f"{API}/IPlayerService/GetOwnedGames/v1/"
FRIENDS_PATH = f"{API}/ISteamUser/GetFriendList/v1/"
BANS_PATH = f"{API}/ISteamUser/GetPlayerBans/v1/"
VANITY_PATH = f"{API}/ISteamUser/ResolveVanityURL/v1/"


def days_ago(days: int) -> int:
    return int(time.time()) - days * 86400


def summary_payload(**overrides):
    player = {
        "steamid": STEAMID,
        "personaname": "Rabscuttle",
        "profileurl": PROFILE_URL,
        "avatarfull": "https://avatars.steamstatic.com/abc_full.jpg",
        "communityvisibilitystate": 3,
        "timecreated": days_ago(4000),
        "loccountrycode": "US",
    }
    player.update(overrides)
    return {"response": {"players": [player]}}


def games_payload(count=250, games=None):
    body = {"game_count": count}
    if games is not None:
        body["games"] = games
    return {"response": body}


def friends_payload(n=80):
    return {"friendslist": {"friends": [
        {"steamid": str(76561197960000000 + i), "relationship": "friend"} for i in range(n)
    ]}}


def bans_payload(vac=0, game=0, community=False, economy="none", days=0):
    return {"players": [{
        "SteamId": STEAMID,
        "CommunityBanned": community,
        "VACBanned": vac > 0,
        "NumberOfVACBans": vac,
        "DaysSinceLastBan": days,
        "NumberOfGameBans": game,
        "EconomyBan": economy,
    }]}


PROFILE_HTML = """
<html><body>
<div class="profile_summary">
  Streaming most nights! <a href="https://steamcommunity.com/linkfilter/?u=x">link</a><br>
  twitch.tv/rabscuttle &amp; https://www.youtube.com/@rabscuttle
</div>
</body></html>
"""


def _as_response(value):
    if isinstance(value, httpx.Response):
        return value
    if isinstance(value, str):
        return httpx.Response(200, text=value)
    return httpx.Response(200, json=value)


def install_steam_routes(
    router,
    summary=None,
    level=None,
    games=None,
    friends=None,
    bans=None,
    profile_html=PROFILE_HTML,
    vanity=None,
):
    """
    Register one route per Steam endpoint on a respx router.
    Values may be dicts (200 JSON), strings (200 text), httpx.Response
    objects, or exceptions (raised as transport errors).
    """
    def add(url, value):
        route = router.get(url)
        if isinstance(value, Exception):
            route.mock(side_effect=value)
        else:
            route.mock(return_value=_as_response(value))
        return route

    return {
        "summary": add(SUMMARY_PATH, summary if summary is not None else summary_payload()),
        "level": add(LEVEL_PATH, level if level is not None else {"response": {"player_level": 30}}),
        "games": add(GAMES_PATH, games if games is not None else games_payload()),
        "friends": add(FRIENDS_PATH, friends if friends is not None else friends_payload()),
        "bans": add(BANS_PATH, bans if bans is not None else bans_payload()),
        "profile": add(PROFILE_URL, profile_html),
        "vanity": add(VANITY_PATH, vanity if vanity is not None else {
            "response": {"steamid": STEAMID, "success": 1},
        }),
    }

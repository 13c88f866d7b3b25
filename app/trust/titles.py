"""Featured competitive titles offered for the per-game hours check."""
from typing import Optional, List, Dict, Any

FEATURED_TITLES: List[Dict[str, Any]] = [
    {"name": "Apex Legends", "appid": 1172470},
    {"name": "ARC Raiders", "appid": 1808500},
    {"name": "Call of Duty®", "appid": 1938090},
    {"name": "Counter-Strike 2", "appid": 730},
    {"name": "Deadlock", "appid": 1422450},
    {"name": "Destiny 2", "appid": 1085660},
    {"name": "Dota 2", "appid": 570},
    {"name": "Overwatch 2", "appid": 2357570},
    {"name": "PUBG: BATTLEGROUNDS", "appid": 578080},
    {"name": "Rust", "appid": 252490},
    {"name": "Team Fortress 2", "appid": 440},
    {"name": "The Finals", "appid": 2073850},
    {"name": "Tom Clancy's Rainbow Six Siege", "appid": 359550},
]

_BY_APPID = {t["appid"]: t["name"] for t in FEATURED_TITLES}


def title_name(appid: Optional[int]) -> Optional[str]:
    if appid is None:
        return None
    return _BY_APPID.get(int(appid))

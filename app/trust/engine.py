"""
Steam Trust Check - Trust Scoring Engine
Additive point model over public Steam signals.

Architecture:
    Layer A - Signal aggregation (app.compute.collectors) fills ProfileSignals
    Layer B - This module: independent point contributors, summed and clamped
    Layer C - Verdict tier + one-sentence explanation

Contributors (points):
    Account age             0 .. 62   dominant anchor
    Steam level             0 .. 9
    Friends                 0 .. 9
    Library footprint       0 .. 10
    Ban penalty           -70 .. 0
    Clean-ban bonus         0 | 14
    Selected-game hours   -10 .. 0
    Veteran bonus           0 | 5
    ─────────────────────────────────
    Clamped to            0 .. 100

Every signal is optional. With no restriction record and no corroborating
signal the engine returns trust_level=None / UNKNOWN instead of a number.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from enum import Enum
from typing import Optional, Dict, Any


# ── Enums ─────────────────────────────────────────

class Verdict(str, Enum):
    CERTIFIED_LEGIT = "CERTIFIED LEGIT"
    LIKELY_LEGIT    = "LIKELY LEGIT"
    PROBABLY_LEGIT  = "PROBABLY LEGIT"
    MIXED_SIGNALS   = "MIXED SIGNALS"
    SUSPECT         = "SUSPECT"
    HIGH_RISK       = "HIGH RISK"
    UNKNOWN         = "UNKNOWN"


# ── Signal Input ──────────────────────────────────

@dataclass(frozen=True)
class RestrictionRecord:
    """One GetPlayerBans row."""
    vac_bans: int = 0
    game_bans: int = 0
    community_banned: bool = False
    economy_ban: str = "none"
    days_since_last_ban: Optional[int] = None

    @property
    def has_any(self) -> bool:
        return (
            self.vac_bans > 0
            or self.game_bans > 0
            or self.community_banned
            or bool(self.economy_ban and self.economy_ban != "none")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vac_bans": self.vac_bans,
            "game_bans": self.game_bans,
            "community_banned": self.community_banned,
            "economy_ban": self.economy_ban,
            "days_since_last_ban": self.days_since_last_ban,
        }


@dataclass(frozen=True)
class TitleContext:
    """The game the caller asked about. hours=None means not found, which is not 0."""
    appid: int
    name: Optional[str] = None
    hours: Optional[float] = None


@dataclass
class ProfileSignals:
    """
    Everything we learned about one account. Populated by the aggregator.
    No scoring logic here. Every field is independently optional.
    """
    steamid: str = ""

    # GetPlayerSummaries
    persona_name: Optional[str] = None
    profile_url: Optional[str] = None
    avatar_url: Optional[str] = None
    is_public: Optional[bool] = None        # None = summary returned no player
    created_at: Optional[datetime] = None
    country_code: Optional[str] = None
    currently_playing: Optional[Dict[str, Any]] = None

    # GetSteamLevel / GetOwnedGames / GetFriendList
    maturity_level: Optional[int] = None
    library_count: Optional[int] = None
    social_graph_size: Optional[int] = None

    # GetPlayerBans
    restriction_record: Optional[RestrictionRecord] = None

    title_context: Optional[TitleContext] = None

    @property
    def title_hours(self) -> Optional[float]:
        return self.title_context.hours if self.title_context else None


# ── Contributors ──────────────────────────────────

_AGE_MAX = 62
_PENALTY_FLOOR = -70
_CLEAN_BANS_BONUS = 14
_VETERAN_BONUS = 5
_VETERAN_DAYS = 3650


def clamp(n: int, low: int, high: int) -> int:
    return max(low, min(high, n))


def age_points(age_days: Optional[int]) -> int:
    if age_days is None:
        return 0
    if age_days >= 3650:
        return _AGE_MAX    # 10+ years
    if age_days >= 1825:
        return 50          # 5-10
    if age_days >= 730:
        return 38          # 2-5
    if age_days >= 180:
        return 22          # 6-24 months
    if age_days >= 90:
        return 12          # 3-6 months
    return 4


def level_points(level: Optional[int]) -> int:
    if level is None:
        return 0
    if level >= 50:
        return 9
    if level >= 25:
        return 7
    if level >= 10:
        return 4
    if level >= 1:
        return 2
    return 0


def friends_points(friends: Optional[int]) -> int:
    if friends is None:
        return 0
    if friends >= 200:
        return 9
    if friends >= 50:
        return 6
    if friends >= 10:
        return 3
    if friends >= 1:
        return 1
    return 0


def library_points(games: Optional[int]) -> int:
    if games is None:
        return 0
    if games >= 200:
        return 10
    if games >= 50:
        return 7
    if games >= 10:
        return 4
    if games >= 4:
        return 2
    return 0


def _recency_base(days: Optional[int], default: int, steps: tuple) -> int:
    """Six-bucket step on days since last ban; more recent is more severe."""
    if days is None:
        return default
    for limit, base in zip((365, 730, 1460, 2555, 3650), steps):
        if days < limit:
            return base
    return steps[-1]


def vac_penalty(count: int, days_since_last_ban: Optional[int]) -> int:
    if count <= 0:
        return 0
    base = _recency_base(days_since_last_ban, -18, (-35, -30, -24, -16, -10, -5))
    extra = min(max(count - 1, 0) * 6, 18)
    return clamp(base - extra, -60, 0)


def game_ban_penalty(count: int, days_since_last_ban: Optional[int]) -> int:
    if count <= 0:
        return 0
    base = _recency_base(days_since_last_ban, -14, (-24, -20, -16, -12, -8, -4))
    extra = min(max(count - 1, 0) * 4, 12)
    return clamp(base - extra, -45, 0)


def ban_penalty(record: Optional[RestrictionRecord]) -> int:
    if record is None:
        return 0
    pen = vac_penalty(record.vac_bans, record.days_since_last_ban)
    pen += game_ban_penalty(record.game_bans, record.days_since_last_ban)
    if record.community_banned:
        pen -= 15
    if record.economy_ban and record.economy_ban != "none":
        pen -= 15
    return clamp(pen, _PENALTY_FLOOR, 0)


def game_hours_adjustment(hours: Optional[float]) -> int:
    if hours is None:
        return 0
    if hours < 5:
        return -10
    if hours < 10:
        return -6
    if hours < 20:
        return -3
    return 0


def verdict_from_score(score: int) -> Verdict:
    if score >= 95:
        return Verdict.CERTIFIED_LEGIT
    if score >= 85:
        return Verdict.LIKELY_LEGIT
    if score >= 70:
        return Verdict.PROBABLY_LEGIT
    if score >= 50:
        return Verdict.MIXED_SIGNALS
    if score >= 30:
        return Verdict.SUSPECT
    return Verdict.HIGH_RISK


def ban_impact_label(penalty: int) -> str:
    if penalty >= 0:
        return "None"
    if penalty <= -30:
        return "Severe impact"
    if penalty <= -20:
        return "High impact"
    if penalty <= -10:
        return "Moderate impact"
    return "Low impact"


# ── Age facts ─────────────────────────────────────

@dataclass(frozen=True)
class AgeFacts:
    days: Optional[int] = None
    years: Optional[int] = None
    text: Optional[str] = None


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'} old"


def account_age(created_at: Optional[datetime], now: datetime) -> AgeFacts:
    if created_at is None:
        return AgeFacts()
    days = (now - created_at).days
    years = days // 365
    if years >= 1:
        text = _plural(years, "year")
    elif days // 30 >= 1:
        text = _plural(days // 30, "month")
    else:
        text = _plural(days, "day")
    return AgeFacts(days=days, years=years, text=text)


# ── Result ────────────────────────────────────────

@dataclass
class ScoreResult:
    """The final output of the model. Every field is API-ready."""
    trust_level: Optional[int]
    verdict: Verdict
    explanation: str
    breakdown: Dict[str, int] = field(default_factory=dict)
    age: AgeFacts = field(default_factory=AgeFacts)
    game_adjustment: int = 0
    ban: Optional[Dict[str, Any]] = None

    def signals_block(self, friends_count: Optional[int]) -> Dict[str, Any]:
        return {
            "age_text": self.age.text,
            "age_years": self.age.years,
            "age_days": self.age.days,
            "friends_count": friends_count,
            "points": dict(self.breakdown),
            "ban": self.ban,
        }


def ban_meta(record: Optional[RestrictionRecord], penalty: int, now: datetime) -> Optional[Dict[str, Any]]:
    """Display block for the ban record, including the approximate last-ban date."""
    if record is None:
        return None
    approx_date = approx_year = None
    if record.days_since_last_ban is not None:
        try:
            when = now - timedelta(days=record.days_since_last_ban)
        except OverflowError:
            when = None
        if when is not None:
            approx_date = when.isoformat()
            approx_year = when.year
    return {
        "has_any": record.has_any,
        "vac": record.vac_bans,
        "game": record.game_bans,
        "community": record.community_banned,
        "economy": record.economy_ban,
        "days_since_last_ban": record.days_since_last_ban,
        "last_ban_approx_date": approx_date,
        "last_ban_approx_year": approx_year,
        "penalty": penalty,
        "impact": ban_impact_label(penalty),
    }


def build_explanation(
    trust_level: Optional[int],
    age_years: Optional[int],
    record: Optional[RestrictionRecord],
    title: Optional[TitleContext],
    games_count: Optional[int],
    friends_count: Optional[int],
) -> str:
    if trust_level is None:
        return "Profile is locked down; not enough public signals to score. Proceed with caution."

    reasons = []

    if age_years is not None:
        if age_years >= 10:
            reasons.append("older account")
        elif age_years >= 5:
            reasons.append("established account age")
        elif age_years >= 2:
            reasons.append("some account history")
        else:
            reasons.append("young account")

    if record is not None:
        reasons.append("ban history present" if record.has_any else "clean ban history")

    if title is not None and title.hours is not None:
        name = title.name or "selected game"
        if title.hours < 10:
            reasons.append(f"very low {name} hours")
        elif title.hours < 20:
            reasons.append(f"low {name} hours")
        elif title.hours >= 100:
            reasons.append(f"strong {name} playtime")
        else:
            reasons.append(f"solid {name} playtime")

    if games_count is not None:
        if games_count >= 100:
            reasons.append("real game library")
        elif games_count <= 3:
            reasons.append("tiny library")
        else:
            reasons.append("some library footprint")

    if friends_count is not None:
        if friends_count >= 50:
            reasons.append("social footprint")
        elif friends_count == 0:
            reasons.append("no visible friends")

    if trust_level >= 70:
        tone, max_reasons = "pos", 3
    elif trust_level >= 50:
        tone, max_reasons = "mid", 2
    else:
        tone, max_reasons = "neg", 2

    picked = reasons[:max_reasons]
    if not picked:
        return "Trust score is based on the available public signals."

    joined = ", ".join(picked)
    if tone == "neg":
        return f"Several risk signals: {joined}."
    if tone == "mid":
        return f"Mixed signals: {joined}."
    return f"Strong signals: {joined}."


def _zero_breakdown() -> Dict[str, int]:
    return {
        "age": 0,
        "ban_penalty": 0,
        "clean_bans_bonus": 0,
        "game_hours_adj": 0,
        "games_owned": 0,
        "friends": 0,
        "level": 0,
        "veteran_bonus": 0,
    }


# ── Main Entry Point ──────────────────────────────

def compute_score(signals: ProfileSignals, now: Optional[datetime] = None) -> ScoreResult:
    """
    The scoring function. Pure and deterministic for a given `now`.
    """
    now = now or datetime.now(timezone.utc)
    record = signals.restriction_record
    title = signals.title_context

    age = account_age(signals.created_at, now)
    penalty = ban_penalty(record)
    game_adj = game_hours_adjustment(title.hours) if title is not None else 0

    # Age alone does not corroborate an account: a bare creation date with no
    # ban record and nothing else visible is the locked-down profile case.
    corroborating = sum(1 for known in (
        signals.maturity_level is not None,
        signals.library_count is not None,
        signals.social_graph_size is not None,
        title is not None and title.hours is not None,
    ) if known)

    if record is None and corroborating == 0:
        return ScoreResult(
            trust_level=None,
            verdict=Verdict.UNKNOWN,
            explanation=build_explanation(None, None, None, None, None, None),
            breakdown=_zero_breakdown(),
            age=age,
            game_adjustment=0,
            ban=None,
        )

    clean_bonus = _CLEAN_BANS_BONUS if record is not None and not record.has_any else 0
    veteran = (
        _VETERAN_BONUS
        if age.days is not None
        and age.days >= _VETERAN_DAYS
        and penalty == 0
        and (
            signals.library_count is not None
            or signals.social_graph_size is not None
            or signals.maturity_level is not None
        )
        else 0
    )

    breakdown = {
        "age": age_points(age.days),
        "ban_penalty": penalty,
        "clean_bans_bonus": clean_bonus,
        "game_hours_adj": game_adj,
        "games_owned": library_points(signals.library_count),
        "friends": friends_points(signals.social_graph_size),
        "level": level_points(signals.maturity_level),
        "veteran_bonus": veteran,
    }
    score = clamp(sum(breakdown.values()), 0, 100)

    return ScoreResult(
        trust_level=score,
        verdict=verdict_from_score(score),
        explanation=build_explanation(
            score, age.years, record, title,
            signals.library_count, signals.social_graph_size,
        ),
        breakdown=breakdown,
        age=age,
        game_adjustment=game_adj,
        ban=ban_meta(record, penalty, now),
    )


def profile_openness(signals: ProfileSignals) -> str:
    """
    Display-only "how much is visible" label, not an input to compute_score.
    Its field set differs from the evidence rule there.
    """
    if signals.is_public is not True:
        return "Private"

    available = [
        signals.created_at is not None,
        signals.restriction_record is not None,
        signals.maturity_level is not None,
        signals.library_count is not None,
        signals.social_graph_size is not None,
    ]
    if signals.title_context is not None:
        available.append(signals.title_context.hours is not None)

    ratio = sum(available) / len(available)
    if ratio >= 0.75:
        return "Open"
    if ratio >= 0.25:
        return "Semi-Open"
    return "Private"

"""
Steam Trust Check - Social Link Extraction

Best-effort scrape of a public Steam profile for linked streaming/social
accounts. Only Twitch, YouTube, X and Kick are recognised. The profile
summary blurb is scanned first; the whole document is the fallback.

Never raises on bad input: anything unparseable yields an empty list.
"""
import html
import re
from dataclasses import dataclass, asdict
from typing import Optional, List, Dict, Any
from urllib.parse import urlsplit, urlunsplit

MAX_LINKS = 4

# host suffix → label
_PLATFORMS = (
    ("twitch.tv", "Twitch"),
    ("youtube.com", "YouTube"),
    ("youtu.be", "YouTube"),
    ("twitter.com", "X"),
    ("x.com", "X"),
    ("kick.com", "Kick"),
)

_ABSOLUTE_URL = re.compile(r"\b(https?://[^\s<>\"']+)\b", re.IGNORECASE)
_BARE_URL = re.compile(
    r"\b((?:twitch\.tv|youtube\.com|youtu\.be|twitter\.com|x\.com|kick\.com)/[^\s<>\"']+)\b",
    re.IGNORECASE,
)
_SUMMARY_BLOCK = re.compile(
    r"<div[^>]+class=\"profile_summary\"[^>]*>(.*?)</div>", re.IGNORECASE | re.DOTALL,
)
_TRAILING_PUNCT = re.compile(r"[),.;]+$")


@dataclass(frozen=True)
class SocialLink:
    label: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_url(candidate: Optional[str]) -> Optional[str]:
    """Add a scheme if missing, drop trailing punctuation, require a host."""
    if not candidate:
        return None
    url = candidate.strip()
    if not re.match(r"^https?://", url, re.IGNORECASE) and "." in url:
        url = "https://" + url
    url = _TRAILING_PUNCT.sub("", url)

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not hostname:
        return None

    netloc = f"{hostname}:{port}" if port else hostname
    return urlunsplit((parts.scheme.lower(), netloc, parts.path or "/", parts.query, parts.fragment))


def label_for_host(hostname: Optional[str]) -> Optional[str]:
    host = (hostname or "").lower()
    for domain, label in _PLATFORMS:
        if host == domain or host.endswith("." + domain):
            return label
    return None


def _unique_by(links: List[SocialLink], attr: str) -> List[SocialLink]:
    seen = set()
    out = []
    for link in links:
        k = getattr(link, attr).lower()
        if k in seen:
            continue
        seen.add(k)
        out.append(link)
    return out


def extract_social_links(text: Optional[str]) -> List[SocialLink]:
    """All allow-listed links in `text`, deduplicated by URL (not yet by platform)."""
    if not text:
        return []

    hits = []
    for pattern in (_ABSOLUTE_URL, _BARE_URL):
        for m in pattern.finditer(text):
            normalized = normalize_url(m.group(1))
            if normalized:
                hits.append(normalized)

    links = []
    for url in hits:
        label = label_for_host(urlsplit(url).hostname)
        if label:
            links.append(SocialLink(label=label, url=url))
    return _unique_by(links, "url")


def profile_summary_text(document: Optional[str]) -> str:
    """Plain text of the profile_summary block, or "" when absent."""
    if not document:
        return ""
    m = _SUMMARY_BLOCK.search(document)
    block = m.group(1) if m else ""

    text = re.sub(r"<br\s*/?>", "\n", block, flags=re.IGNORECASE)
    text = re.sub(r"</p>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    text = html.unescape(text)
    text = re.sub(r"\s+\n", "\n", text)
    text = re.sub(r"\n\s+", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    return text.strip()


def links_from_profile_document(document: Optional[str]) -> List[SocialLink]:
    """Summary blurb first, whole document as fallback; one link per platform, max 4."""
    links = extract_social_links(profile_summary_text(document))
    if not links and document:
        links = extract_social_links(document)
    return _unique_by(links, "label")[:MAX_LINKS]

"""Parsing, merging and trimming of upstream Riot session cookies.

Only ``ssid``, ``clid``, ``csid`` and ``tdid`` are needed for SSID
re-auth. Everything else the upstream sets (and every cookie attribute)
is dropped before a cookie string is persisted, so repeated refreshes
never grow the stored value.
"""
import re
from typing import Dict, Iterable, List, Optional
import httpx
from valorant_dashboard.models.riot import RiotSessionCookies

ESSENTIAL_COOKIE_NAMES = ("ssid", "clid", "csid", "tdid")

# A comma starts a new cookie only when it is followed by ``name=``;
# commas inside ``Expires=Wed, 21 Oct ...`` are left alone.
_SET_COOKIE_SPLIT = re.compile(r",(?=\s*\w+=)")


def _split_pair(pair: str) -> Optional[tuple]:
    pair = pair.strip()
    eq_idx = pair.find("=")
    if eq_idx <= 0:
        return None
    return pair[:eq_idx].strip(), pair[eq_idx + 1:]


def merge_cookies(existing: str, new_set_cookie_headers: Iterable[str]) -> str:
    """Merge a ``name=value; ...`` string with raw Set-Cookie headers. Later names win."""
    cookie_map: Dict[str, str] = {}

    for pair in (existing or "").split(";"):
        parsed = _split_pair(pair)
        if parsed:
            cookie_map[parsed[0]] = parsed[1]

    for header in new_set_cookie_headers:
        parsed = _split_pair(header.split(";", 1)[0])
        if parsed:
            cookie_map[parsed[0]] = parsed[1]

    return "; ".join(f"{name}={value}" for name, value in cookie_map.items())


def extract_named_cookies(cookie_string: str) -> RiotSessionCookies:
    named = {}
    for pair in (cookie_string or "").split(";"):
        parsed = _split_pair(pair)
        if parsed and parsed[0] in ESSENTIAL_COOKIE_NAMES:
            named[parsed[0]] = parsed[1]
    return RiotSessionCookies(raw=cookie_string or "", **named)


def build_essential_cookie_string(named: RiotSessionCookies) -> str:
    parts = []
    for name in ESSENTIAL_COOKIE_NAMES:
        value = getattr(named, name)
        if value:
            parts.append(f"{name}={value}")
    return "; ".join(parts)


def filter_essential_cookies(cookie_string: Optional[str]) -> Optional[str]:
    """Reduce any cookie string to its essential subset, or None when nothing remains."""
    if not cookie_string:
        return None
    return build_essential_cookie_string(extract_named_cookies(cookie_string)) or None


def capture_set_cookies(response: httpx.Response) -> List[str]:
    try:
        return list(response.headers.get_list("set-cookie"))
    except Exception:
        try:
            raw = response.headers.get("set-cookie")
        except Exception:
            return []
        if raw:
            return [part.strip() for part in _SET_COOKIE_SPLIT.split(raw)]
        return []

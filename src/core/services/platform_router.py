"""Platform router: profile link -> `RetrievalRequest`.

Handles the link shapes people actually paste: with or without scheme,
`www.`/`m.`/`mobile.` hosts, `@handles`, trailing slashes and query strings.
Facebook links may carry a numeric ID (`profile.php?id=`, `/people/<name>/<id>`)
instead of a vanity name; the numeric ID wins when present.
"""

from __future__ import annotations

from urllib.parse import parse_qs, unquote, urlparse

from core.domain.errors import UnsupportedProfileUrlError
from core.domain.models import MAX_USERNAME_LENGTH, Platform, RetrievalRequest

_HOSTS: dict[str, Platform] = {
    "facebook.com": Platform.FACEBOOK,
    "fb.com": Platform.FACEBOOK,
    "instagram.com": Platform.INSTAGRAM,
    "twitter.com": Platform.TWITTER,
    "x.com": Platform.TWITTER,
}

_HOST_PREFIXES: tuple[str, ...] = ("www.", "m.", "mobile.", "web.")

_RESERVED: dict[Platform, frozenset[str]] = {
    Platform.FACEBOOK: frozenset(
        {"groups", "pages", "watch", "events", "marketplace", "gaming", "login", "help", "photo", "photo.php", "story.php", "sharer"}
    ),
    Platform.INSTAGRAM: frozenset({"p", "reel", "reels", "explore", "stories", "accounts", "direct", "tv"}),
    Platform.TWITTER: frozenset({"home", "i", "intent", "search", "explore", "settings", "hashtag", "messages", "notifications", "share"}),
}


def is_numeric_facebook_id(value: str) -> bool:
    return value.isdigit()


def _normalize_host(netloc: str) -> str:
    host = netloc.lower().split("@")[-1].split(":")[0]
    for prefix in _HOST_PREFIXES:
        if host.startswith(prefix):
            host = host[len(prefix):]
            break
    return host


def _facebook_username(path: str, segments: list[str], query: dict[str, list[str]]) -> str | None:
    if path.rstrip("/") == "/profile.php":
        return (query.get("id") or [None])[0]
    if segments and segments[0] == "friends":
        return (query.get("profile_id") or [None])[0]
    if segments and segments[0] == "people":
        if len(segments) < 3:
            return None
        candidate = segments[2]
        return candidate if is_numeric_facebook_id(candidate) else segments[1]
    return segments[0] if segments else None


def route_profile_url(raw: str) -> RetrievalRequest:
    """Classify a pasted link and extract the username/ID."""

    text = (raw or "").strip()
    if not text:
        raise UnsupportedProfileUrlError(raw, "empty link")
    if "://" not in text:
        text = f"https://{text}"

    parsed = urlparse(text)
    if parsed.scheme not in ("http", "https"):
        raise UnsupportedProfileUrlError(raw, f"unsupported scheme {parsed.scheme!r}")

    platform = _HOSTS.get(_normalize_host(parsed.netloc))
    if platform is None:
        raise UnsupportedProfileUrlError(raw)

    segments = [unquote(s) for s in parsed.path.split("/") if s]
    query = parse_qs(parsed.query)

    if platform is Platform.FACEBOOK:
        username = _facebook_username(parsed.path, segments, query)
    else:
        username = segments[0] if segments else None

    username = (username or "").strip().lstrip("@")
    if not username:
        raise UnsupportedProfileUrlError(raw, "no username in link")
    if len(username) > MAX_USERNAME_LENGTH:
        raise UnsupportedProfileUrlError(raw, "handle too long")
    if username.lower() in _RESERVED[platform]:
        raise UnsupportedProfileUrlError(raw, f"/{username} is not a profile page")

    return RetrievalRequest(platform=platform, username=username)

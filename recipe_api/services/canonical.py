"""Canonical URL forms used as the deduplication key for imported content.

Each supported platform has a rule that turns any of its content URLs into a
single stable form. Rules are tried in order; the first rule whose host test
matches decides, and when it cannot produce a form the URL simply loses its
query string. A YouTube watch URL without a usable video id is rejected
rather than stripped. Every form produced here maps to itself, so
canonicalizing a canonical URL is a no-op.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence
from urllib.parse import SplitResult, parse_qs, urlsplit, urlunsplit

import httpx
from bs4 import BeautifulSoup

from recipe_api.exceptions import InvalidUrlError
from recipe_api.services.resolver import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})

TIKTOK_VIDEO_PATTERN = re.compile(r"/@([^/]+)/video/(\d+)")
INSTAGRAM_REEL_PATTERN = re.compile(r"/(?:reels?|p)/([A-Za-z0-9_-]+)")
YOUTUBE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
YOUTU_BE_PATH_PATTERN = re.compile(r"^/([A-Za-z0-9_-]+)/?$")

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def parse_url(url: str) -> SplitResult:
    """Parse and validate an untrusted http(s) URL."""
    url = url.strip()
    if not url.isprintable():
        raise InvalidUrlError(f"Invalid URL: {url!r}")
    try:
        parts = urlsplit(url)
        parts.port  # ValueError on a bad port
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL: {url}") from e
    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.hostname:
        raise InvalidUrlError(f"Invalid URL: {url}")
    return parts


def strip_query(parts: SplitResult) -> str:
    return urlunsplit(parts._replace(query=""))


def tiktok_form(path: str) -> Optional[str]:
    match = TIKTOK_VIDEO_PATTERN.search(path)
    if not match:
        return None
    username, video_id = match.groups()
    return f"https://www.tiktok.com/@{username}/video/{video_id}"


class CanonicalRule(Protocol):
    name: str

    def applies_to(self, host: str) -> bool:
        ...

    def match(self, parts: SplitResult) -> Optional[str]:
        """Canonical form derivable from the URL alone, without network access."""
        ...

    async def canonicalize(self, parts: SplitResult) -> Optional[str]:
        ...


@dataclass
class TikTokRule:
    """``/@<user>/video/<id>``, looked up in the page's canonical link if the
    URL itself lacks the user name."""

    http_client: Optional[httpx.AsyncClient] = None
    timeout: float = 10.0
    name: str = "tiktok"

    def applies_to(self, host: str) -> bool:
        return "tiktok.com" in host

    def match(self, parts: SplitResult) -> Optional[str]:
        return tiktok_form(parts.path)

    async def canonicalize(self, parts: SplitResult) -> Optional[str]:
        form = self.match(parts)
        if form:
            return form
        # No user name in the URL; ask the page for its canonical link.
        return await self._canonical_from_html(urlunsplit(parts))

    async def _canonical_from_html(self, page_url: str) -> Optional[str]:
        if self.http_client is None:
            return None
        try:
            response = await self.http_client.get(
                page_url,
                follow_redirects=True,
                timeout=self.timeout,
                headers={"User-Agent": DEFAULT_USER_AGENT, "Accept": HTML_ACCEPT},
            )
            soup = BeautifulSoup(response.text, "html.parser")
            link = soup.find("link", rel="canonical")
            href = link.get("href") if link else None
            if not href:
                return None
            href_parts = urlsplit(href)
            if "tiktok.com" not in (href_parts.hostname or ""):
                return None
            return tiktok_form(href_parts.path)
        except Exception as e:
            # Never fatal: the caller falls back to query stripping.
            logger.warning(
                f"Canonical link lookup failed for {page_url}: {type(e).__name__}: {e}"
            )
            return None


@dataclass
class InstagramRule:
    """Reels and posts both reduce to ``/reel/<shortcode>/``."""

    name: str = "instagram"

    def applies_to(self, host: str) -> bool:
        return "instagram.com" in host

    def match(self, parts: SplitResult) -> Optional[str]:
        match = INSTAGRAM_REEL_PATTERN.search(parts.path)
        if not match:
            return None
        return f"https://www.instagram.com/reel/{match.group(1)}/"

    async def canonicalize(self, parts: SplitResult) -> Optional[str]:
        return self.match(parts)


@dataclass
class YouTubeRule:
    name: str = "youtube"

    def applies_to(self, host: str) -> bool:
        return "youtube.com" in host

    def match(self, parts: SplitResult) -> Optional[str]:
        if parts.path.rstrip("/") != "/watch":
            return None
        video_ids = parse_qs(parts.query).get("v", [])
        if not video_ids or not YOUTUBE_ID_PATTERN.fullmatch(video_ids[0]):
            raise InvalidUrlError(
                f"YouTube watch URL without a valid video id: {urlunsplit(parts)}"
            )
        return f"https://www.youtube.com/watch?v={video_ids[0]}"

    async def canonicalize(self, parts: SplitResult) -> Optional[str]:
        return self.match(parts)


@dataclass
class YouTuBeRule:
    name: str = "youtu.be"

    def applies_to(self, host: str) -> bool:
        return "youtu.be" in host

    def match(self, parts: SplitResult) -> Optional[str]:
        match = YOUTU_BE_PATH_PATTERN.match(parts.path)
        if not match:
            return None
        return f"https://www.youtube.com/watch?v={match.group(1)}"

    async def canonicalize(self, parts: SplitResult) -> Optional[str]:
        return self.match(parts)


def default_rules(
    http_client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0
) -> list[CanonicalRule]:
    return [
        TikTokRule(http_client=http_client, timeout=timeout),
        InstagramRule(),
        YouTubeRule(),
        YouTuBeRule(),
    ]


@dataclass
class Canonicalizer:
    rules: Sequence[CanonicalRule] = field(default_factory=default_rules)

    def _rule_for(self, parts: SplitResult) -> Optional[CanonicalRule]:
        host = (parts.hostname or "").lower()
        for rule in self.rules:
            if rule.applies_to(host):
                return rule
        return None

    def match_offline(self, url: str) -> Optional[str]:
        """Canonical form if a platform pattern matches the URL as given.

        A match means the URL needs no redirect resolution.
        """
        parts = parse_url(url)
        rule = self._rule_for(parts)
        return rule.match(parts) if rule else None

    async def canonicalize(self, url: str) -> str:
        parts = parse_url(url)
        rule = self._rule_for(parts)
        if rule is not None:
            form = await rule.canonicalize(parts)
            if form:
                logger.debug(f"{rule.name} canonical form for {url}: {form}")
                return form
        return strip_query(parts)

import hashlib
from datetime import datetime, timezone
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from mailshort_app.cache.strategies import CacheStrategy
from mailshort_app.models.link import Link
from mailshort_app.queue.models import ClickMessage

IP_HASH_LENGTH = 32


def hash_client_address(address: Optional[str], salt: str) -> Optional[str]:
    """
    One-way, fixed-length digest of a client address.

    SHA-256 over salt + address, truncated to 32 hex characters. The raw
    address must not be kept after this call.
    """
    if not address:
        return None
    digest = hashlib.sha256(f"{salt}{address}".encode("utf-8")).hexdigest()
    return digest[:IP_HASH_LENGTH]


def client_address(headers: Mapping[str, str], peer_host: Optional[str]) -> Optional[str]:
    """First X-Forwarded-For hop if present, else the socket peer"""
    forwarded = headers.get("x-forwarded-for") or ""
    first_hop = forwarded.split(",")[0].strip()
    return first_hop or peer_host or None


def build_click_message(
    code: str,
    headers: Mapping[str, str],
    peer_host: Optional[str],
    salt: str,
    now: Optional[datetime] = None,
) -> ClickMessage:
    """Collect referer, user agent and hashed address for one click"""
    return ClickMessage(
        link_code=code,
        ts=now or datetime.now(timezone.utc),
        referer=headers.get("referer") or None,
        user_agent=headers.get("user-agent") or None,
        ip_hash=hash_client_address(client_address(headers, peer_host), salt),
    )


class RedirectService:
    """
    Resolves short codes to their original URLs.

    Uses the Cache-Aside pattern: links never change after creation, so a
    cached mapping is always valid.
    """

    def __init__(self, db: Session, cache: Optional[CacheStrategy] = None, cache_ttl: int = 3600):
        self.db = db
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def resolve(self, code: str) -> Optional[str]:
        """
        Get the original URL for *code*, or None when the code is unknown.

        Flow:
        1. Check cache
        2. On a miss, query the database
        3. Populate cache for next time
        """
        cache_key = f"link:{code}"

        if self.cache:
            cached_url = await self.cache.get(cache_key)
            if cached_url:
                return cached_url

        link = self.db.get(Link, code)
        if link is None:
            return None

        if self.cache:
            await self.cache.set(cache_key, link.original_url, ttl=self.cache_ttl)

        return link.original_url

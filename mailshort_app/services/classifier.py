"""
URL eligibility rules for shortening.

A URL found in a document is shortened only when it is an absolute http(s)
URL, does not already point at our own redirect endpoint, and carries no
unresolved mail-merge template token. All functions here are pure.
"""

import re

_HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_MUSTACHE_TOKEN_RE = re.compile(r"\{\{[\s\S]*?\}\}")
_UNSUBSCRIBE_TAG_RE = re.compile(r"\{%\s*unsubscribe_link\s*%\}", re.IGNORECASE)


def normalize_short_domain(value: str) -> str:
    """
    Normalize a configured or request-derived short domain.

    Adds https:// when no scheme is given and strips trailing slashes, so
    short URLs are always built as f"{domain}/r/{code}".
    """
    domain = value.strip()
    if not _HTTP_SCHEME_RE.match(domain):
        domain = f"https://{domain}"
    return domain.rstrip("/")


def is_http_url(url: str) -> bool:
    return bool(_HTTP_SCHEME_RE.match(url))


def is_already_short(url: str, short_domain: str) -> bool:
    """True when *url* already points at {short_domain}/r/ (case-insensitive)"""
    return url.lower().startswith(f"{short_domain}/r/".lower())


def has_template_token(url: str) -> bool:
    """True for {{ ... }} tokens and {% unsubscribe_link %} tags"""
    return bool(_MUSTACHE_TOKEN_RE.search(url) or _UNSUBSCRIBE_TAG_RE.search(url))


def should_process(url: str, short_domain: str) -> bool:
    """
    Decide whether *url* should be replaced with a short link.

    Rules, all of which must hold:
    1. scheme is http or https
    2. not already a short link on *short_domain*
    3. no template placeholder that a mail-merge system still has to fill

    Anything that is not a string evaluates to False.
    """
    if not isinstance(url, str):
        return False
    if not is_http_url(url):
        return False
    if is_already_short(url, short_domain):
        return False
    if has_template_token(url):
        return False
    return True

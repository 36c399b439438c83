"""Free-text redaction: IP anonymization, URL, email, token and UUID scrubbing."""

import hashlib
import ipaddress
import re

HASH_LENGTH = 12

URL_PATTERN = re.compile(r"\b[a-zA-Z][a-zA-Z0-9+.\-]*://[^\s<>\"'()\[\]]+")
URL_USERINFO_PATTERN = re.compile(r"\b([a-zA-Z][a-zA-Z0-9+.\-]*://)[^\s/@]+@")
EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")
BEARER_PATTERN = re.compile(r"\bBearer\s+[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)
CREDENTIAL_PATTERN = re.compile(
    r"([\w.\-]*(?:key|secret|token|passw(?:or)?d|credential)[\w.\-]*)"
    r"[\"']?\s*[:=]\s*(?!Bearer\b)(?!\[)"
    r"(?:\"[^\"]*\"|'[^']*'|[^\s,;&\"')]+)",
    re.IGNORECASE,
)
UUID_PATTERN = re.compile(
    r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b"
)
IPV4_PATTERN = re.compile(r"(?<![\w.])(?:\d{1,3}\.){3}\d{1,3}(?!\w)(?!\.\d)")
IPV6_PATTERN = re.compile(r"(?<![\w:])(?:[0-9A-Fa-f]{0,4}:){2,7}[0-9A-Fa-f]{0,4}(?![\w:])")


def _short_hash(value: str) -> str:
    """SHA-256 of *value*, truncated to HASH_LENGTH hex chars."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def classify_ip(value: str) -> str:
    """Return the anonymization bucket for an address string."""
    try:
        addr = ipaddress.ip_address(value.strip())
    except ValueError:
        return "invalid-ip"
    if addr.is_loopback:
        return "localhost"
    if addr.is_private or addr.is_link_local:
        return "private-ip"
    return "public-ip"


def anonymize_ip(value: str) -> str:
    """Replace an address with ``<bucket>-<hash>``; the hash covers the raw input."""
    return f"{classify_ip(value)}-{_short_hash(value)}"


def anonymize_url(url: str) -> str:
    """Replace a whole URL with ``url-<hash>`` of its credential-free form."""
    return f"url-{_short_hash(strip_url_credentials(url))}"


def strip_url_credentials(text: str) -> str:
    """Drop ``user:pass@`` from every URL in *text*; everything else is left intact."""
    return URL_USERINFO_PATTERN.sub(r"\1", text)


def _replace_ipv6(match: re.Match) -> str:
    candidate = match.group(0)
    try:
        ipaddress.IPv6Address(candidate)
    except ValueError:
        # timestamps like 10:00:00 look similar
        return candidate
    return anonymize_ip(candidate)


def scrub_message(text: str) -> str:
    """Redact every sensitive pattern in a free-text log line.

    Applied in order:
        - URLs become ``url-<hash>`` (removes credentials, host, port and path).
        - Email addresses become ``[EMAIL]``.
        - Bearer tokens become ``Bearer [TOKEN]``.
        - Credential key/value pairs become ``<key>: [TOKEN]``.
        - UUIDs become ``[UUID]``.
        - IPv4 and valid IPv6 literals become ``<bucket>-<hash>``.

    Text matching none of these patterns is returned unchanged.
    """
    if not text:
        return text
    text = URL_PATTERN.sub(lambda m: anonymize_url(m.group(0)), text)
    text = EMAIL_PATTERN.sub("[EMAIL]", text)
    text = BEARER_PATTERN.sub("Bearer [TOKEN]", text)
    text = CREDENTIAL_PATTERN.sub(lambda m: f"{m.group(1)}: [TOKEN]", text)
    text = UUID_PATTERN.sub("[UUID]", text)
    text = IPV4_PATTERN.sub(lambda m: anonymize_ip(m.group(0)), text)
    text = IPV6_PATTERN.sub(_replace_ipv6, text)
    return text

"""Redaction of credentials before request details reach the logs."""

from urllib.parse import urlsplit, urlunsplit


SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "proxy-authorization",
        "x-api-key",
    }
)

REDACTED_VALUE = "[REDACTED]"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mask bearer tokens, API keys and cookies in a header mapping.

    Args:
        headers: Request headers.

    Returns:
        Copy with sensitive values replaced by ``[REDACTED]``.
    """
    return {
        key: REDACTED_VALUE if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def redact_url_credentials(url: str) -> str:
    """Drop ``user:password@`` userinfo from a URL.

    Args:
        url: URL that may embed credentials.

    Returns:
        URL safe to log.
    """
    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit(parts._replace(netloc=f"{REDACTED_VALUE}@{host}"))

"""Utility functions and defaults for esfixtures."""

from typing import Optional

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_HOST: str = "localhost:9200"

# Time-to-live of a scroll cursor between two page requests
DEFAULT_SCROLL_TTL: str = "30s"

DEFAULT_TIMEOUT: float = 30.0

# Upper bound of concurrent per-document deletes within one scanned page
DEFAULT_DELETE_WORKERS: int = 8

DEFAULT_LOG_LEVEL: str = "info"


# =============================================================================
# Request helpers
# =============================================================================


def normalize_host(host: Optional[str]) -> str:
    """Turn a host specification into a base URL.

    Args:
        host: Host such as "localhost:9200", "http://es:9200/" or None

    Returns:
        Base URL with scheme and without trailing slash

    Examples:
        >>> normalize_host("localhost:9200")
        'http://localhost:9200'
        >>> normalize_host("https://search.example.com/")
        'https://search.example.com'
    """
    host = (host or DEFAULT_HOST).strip()
    if "://" not in host:
        host = f"http://{host}"
    return host.rstrip("/")


def bool_param(value: bool) -> str:
    """Render a boolean as a query-string value understood by the engine."""
    return "true" if value else "false"


def scope_path(index: Optional[str], doc_type: Optional[str] = None) -> str:
    """Build the "/index[/type]" URL prefix for a scope.

    Returns an empty string when no index is given.
    """
    if not index:
        return ""
    if doc_type:
        return f"/{index}/{doc_type}"
    return f"/{index}"


def parse_version_number(number: str) -> tuple[int, int]:
    """Parse "major.minor[.patch][-suffix]" into (major, minor).

    Raises:
        ValueError: If the major version is not numeric
    """
    parts = number.split("-")[0].split(".")
    major = int(parts[0])
    minor = 0
    if len(parts) > 1 and parts[1].isdigit():
        minor = int(parts[1])
    return major, minor

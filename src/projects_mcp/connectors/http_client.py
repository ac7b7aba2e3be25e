"""Shared async HTTP client for the GitHub REST and GraphQL planes."""

import logging
from typing import Optional

import httpx

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

_http_client: Optional[httpx.AsyncClient] = None


def build_http_client(settings: Optional[Settings] = None, **kwargs) -> httpx.AsyncClient:
    """Create an AsyncClient carrying the GitHub media type, API version and token."""
    settings = settings or get_settings()
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": settings.github_api_version,
        "User-Agent": f"{settings.app_name.replace(' ', '-').lower()}/{settings.app_version}",
    }
    if settings.github_token:
        headers["Authorization"] = f"Bearer {settings.github_token}"
    return httpx.AsyncClient(
        headers=headers,
        timeout=settings.http_timeout,
        **kwargs,
    )


def get_http_client() -> httpx.AsyncClient:
    """Return the process-wide client, creating it on first use."""
    global _http_client
    if _http_client is None or _http_client.is_closed:
        _http_client = build_http_client()
        logger.debug("Created shared HTTP client")
    return _http_client


async def close_http_client():
    """Close the shared client (idempotent)."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None

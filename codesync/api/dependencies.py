"""Shared API dependencies."""

from collections.abc import AsyncGenerator

import httpx

from codesync.core.settings import get_settings


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Provide an outbound HTTP client for proxy routes."""
    async with httpx.AsyncClient(timeout=get_settings().http_timeout) as client:
        yield client


__all__ = ["get_http_client"]

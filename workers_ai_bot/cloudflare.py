"""Shared Cloudflare API client instance.

Workers AI and R2 are both reached through the account-scoped REST API,
so a single httpx client carries the base URL, auth header and timeout.
"""

import logging
from typing import Any

import httpx

from workers_ai_bot.config import Config

LOGGER = logging.getLogger(__name__)


def create_cloudflare_client(
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build an async client scoped to the configured Cloudflare account.

    Args:
        config: Bot configuration
        transport: Optional transport override (used by tests)

    Returns:
        httpx.AsyncClient with base URL and bearer token set
    """
    base_url = f'{config.cloudflare_api_base.rstrip("/")}/accounts/{config.cloudflare_account_id}'
    return httpx.AsyncClient(
        base_url=base_url,
        headers={'Authorization': f'Bearer {config.cloudflare_api_token}'},
        timeout=config.request_timeout,
        transport=transport,
    )


def envelope_errors(body: Any) -> str:
    """Collect error messages from a Cloudflare v4 response envelope."""
    if not isinstance(body, dict):
        return 'unexpected response body'
    errors = body.get('errors') or []
    messages = [
        str(e.get('message', e)) if isinstance(e, dict) else str(e) for e in errors
    ]
    return '; '.join(messages) or 'unknown error'

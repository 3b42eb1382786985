"""Tests for application wiring and its startup/cleanup hooks."""

from aiohttp import test_utils
import httpx
import pytest

from workers_ai_bot.cloudflare import create_cloudflare_client
from workers_ai_bot.config import Config
from workers_ai_bot.main import build_app


class _FakeSession:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class _FakeBot:
    def __init__(self) -> None:
        self.webhooks: list[str] = []
        self.session = _FakeSession()

    async def set_webhook(self, url: str) -> None:
        self.webhooks.append(url)


def make_cloudflare(config: Config) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={'success': True, 'errors': [], 'result': {}})

    return create_cloudflare_client(config, transport=httpx.MockTransport(handler))


async def run_app_lifecycle(config: Config) -> tuple[_FakeBot, httpx.AsyncClient]:
    bot = _FakeBot()
    cloudflare = make_cloudflare(config)
    app = build_app(config, bot=bot, cloudflare=cloudflare)  # type: ignore[arg-type]

    server = test_utils.TestServer(app)
    await server.start_server()
    await server.close()
    return bot, cloudflare


@pytest.mark.asyncio
async def test_webhook_not_registered_when_disabled(config: Config) -> None:
    assert config.register_webhook is False

    bot, _ = await run_app_lifecycle(config)

    assert bot.webhooks == []


@pytest.mark.asyncio
async def test_webhook_registered_on_startup(config: Config) -> None:
    enabled = config.model_copy(update={'register_webhook': True})

    bot, _ = await run_app_lifecycle(enabled)

    assert bot.webhooks == ['https://bot.example.com/webhook']


@pytest.mark.asyncio
async def test_sessions_closed_on_cleanup(config: Config) -> None:
    bot, cloudflare = await run_app_lifecycle(config)

    assert bot.session.closed, 'Bot session should be closed on cleanup'
    assert cloudflare.is_closed, 'Cloudflare client should be closed on cleanup'

import argparse
import logging
import sys

from aiogram import Bot
from aiohttp import web
import httpx

from workers_ai_bot.cloudflare import create_cloudflare_client
from workers_ai_bot.config import Config
from workers_ai_bot.handlers import BotServices
from workers_ai_bot.inference import WorkersAIGateway
from workers_ai_bot.messaging import TelegramMessenger
from workers_ai_bot.storage import R2ArtifactStore
from workers_ai_bot.webhook import create_app

LOGGER = logging.getLogger(__name__)


def build_app(
    config: Config,
    bot: Bot | None = None,
    cloudflare: httpx.AsyncClient | None = None,
) -> web.Application:
    """Wire collaborators into the web application.

    Registers startup and shutdown hooks for the webhook and HTTP sessions.

    Args:
        config: Bot configuration
        bot: Aiogram Bot, created from config.bot_token when omitted
        cloudflare: Cloudflare API client, created from config when omitted
    """
    if bot is None:
        bot = Bot(config.bot_token)
    if cloudflare is None:
        cloudflare = create_cloudflare_client(config)
    services = BotServices(
        config=config,
        messenger=TelegramMessenger(bot),
        gateway=WorkersAIGateway(cloudflare),
        store=R2ArtifactStore(cloudflare, config.r2_bucket_name),
    )
    app = create_app(services)

    async def on_startup(app: web.Application) -> None:
        if not config.register_webhook:
            LOGGER.info('Webhook registration disabled')
            return
        LOGGER.info(f'Registering webhook: {config.webhook_url}')
        await bot.set_webhook(config.webhook_url)

    async def on_cleanup(app: web.Application) -> None:
        await cloudflare.aclose()
        await bot.session.close()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)
    return app


def main() -> None:
    parser = argparse.ArgumentParser(description='Workers AI Telegram bot webhook server.')
    parser.add_argument('--host', help='Override BACKEND_HOST.')
    parser.add_argument('--port', type=int, help='Override BACKEND_PORT.')
    args: argparse.Namespace = parser.parse_args()

    config = Config()
    logging.basicConfig(level=getattr(logging, config.logging_level), stream=sys.stdout)

    app = build_app(config)
    web.run_app(app, host=args.host or config.backend_host, port=args.port or config.backend_port)


if __name__ == '__main__':
    main()

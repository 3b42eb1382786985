"""aiohttp application serving the Telegram webhook.

The webhook response never reflects how an update was handled: it is a
plain 'OK' once the body parses, and a fixed error body otherwise.
"""

import logging

from aiohttp import web

from workers_ai_bot.dispatch import BotDispatcher
from workers_ai_bot.errors import describe_error
from workers_ai_bot.handlers import BotServices, store_generated_image
from workers_ai_bot.inference import require_field
from workers_ai_bot.updates import MalformedBodyError, load_body, parse_update

LOGGER = logging.getLogger(__name__)

SERVICES_KEY = web.AppKey('services', BotServices)
DISPATCHER_KEY = web.AppKey('dispatcher', BotDispatcher)

ACK_TEXT = 'OK'
ERROR_TEXT = 'Error processing request'
IMAGINE_ERROR_TEXT = 'An error occurred'
DEFAULT_IMAGINE_PROMPT = 'a cyberpunk cat'


async def read_body(request: web.Request) -> bytes:
    """Read the raw request body.

    Raises:
        MalformedBodyError: If the body is too large or the connection drops
    """
    try:
        return await request.read()
    except web.HTTPRequestEntityTooLarge as e:
        raise MalformedBodyError(f'Body too large: {e.text}') from e
    except ConnectionError as e:
        raise MalformedBodyError(f'Failed to read body: {e}') from e


async def handle_webhook(request: web.Request) -> web.Response:
    """Receive one Telegram update and dispatch it."""
    try:
        body = load_body(await read_body(request))
    except MalformedBodyError as e:
        LOGGER.error('Rejecting webhook call: %s', e)
        return web.Response(status=500, text=ERROR_TEXT)

    update = parse_update(body)
    if update is not None:
        await request.app[DISPATCHER_KEY].dispatch(update)
    return web.Response(text=ACK_TEXT)


async def handle_imagine(request: web.Request) -> web.Response:
    """Generate an image from the 'prompt' query parameter and return its URL."""
    services = request.app[SERVICES_KEY]
    prompt = request.query.get('prompt') or DEFAULT_IMAGINE_PROMPT
    model = services.config.image_model
    try:
        output = await services.gateway.run(model, {'prompt': prompt})
        url = await store_generated_image(
            services.config, services.store, require_field(model, output, 'image')
        )
    except Exception as e:
        LOGGER.exception('Image generation request failed: %s', describe_error(e))
        return web.Response(status=500, text=IMAGINE_ERROR_TEXT)
    return web.json_response({'url': url})


def create_app(services: BotServices) -> web.Application:
    """Build the web application around a set of services."""
    app = web.Application()
    app[SERVICES_KEY] = services
    app[DISPATCHER_KEY] = BotDispatcher(services)
    app.router.add_post(services.config.webhook_path, handle_webhook)
    app.router.add_get('/imagine', handle_imagine)
    return app

"""Dispatch of classified updates to their handlers."""

import logging
from typing import assert_never

from workers_ai_bot.handlers import BotServices, IntentHandlers
from workers_ai_bot.intents import (
    Chat,
    DescribeImage,
    GenerateImage,
    Intent,
    Start,
    Summarize,
    Transcribe,
    Unsupported,
    classify,
)
from workers_ai_bot.updates import Update

LOGGER = logging.getLogger(__name__)


class BotDispatcher:
    """Routes every update to exactly one intent handler."""

    def __init__(self, services: BotServices) -> None:
        self.handlers = IntentHandlers(services)

    async def dispatch(self, update: Update) -> None:
        """Classify an update and run its handler.

        Never raises: handlers report their own failures to the chat, and
        anything escaping them anyway is only logged.
        """
        intent = classify(update)
        LOGGER.info('Chat %s: %s', update.chat_id, type(intent).__name__)
        try:
            await self.handle(update.chat_id, intent)
        except Exception:
            LOGGER.exception('Handler for %s escaped its failure boundary', intent)

    async def handle(self, chat_id: int | str, intent: Intent) -> None:
        handlers = self.handlers
        match intent:
            case Start():
                await handlers.start(chat_id)
            case GenerateImage(prompt):
                await handlers.generate_image(chat_id, prompt)
            case Transcribe(file_id):
                await handlers.transcribe(chat_id, file_id)
            case DescribeImage(file_id):
                await handlers.describe_image(chat_id, file_id)
            case Summarize(text):
                await handlers.summarize(chat_id, text)
            case Chat(message):
                await handlers.chat(chat_id, message)
            case Unsupported(hint):
                await handlers.unsupported(chat_id, hint)
            case _:
                assert_never(intent)

"""Inbound Telegram update model.

Only the fields the bot acts on are modelled; everything else in the
webhook payload is ignored.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

LOGGER = logging.getLogger(__name__)


class MalformedBodyError(ValueError):
    """Raised when the webhook body is not a JSON object."""

    pass


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')


class Chat(_Frozen):
    id: int | str


class FileReference(_Frozen):
    """Voice, audio or photo size; only the file id is needed."""

    file_id: str


class Update(_Frozen):
    """One inbound message, immutable for the duration of its dispatch."""

    chat: Chat
    text: str | None = None
    voice: FileReference | None = None
    audio: FileReference | None = None
    # Resolution variants, smallest first
    photo: tuple[FileReference, ...] | None = None

    @property
    def chat_id(self) -> int | str:
        return self.chat.id


def load_body(raw: bytes | str) -> dict[str, Any]:
    """Decode the raw webhook body.

    Raises:
        MalformedBodyError: If the body is not valid JSON or not an object
    """
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise MalformedBodyError(f'Invalid JSON body: {e}') from e
    if not isinstance(body, dict):
        raise MalformedBodyError(f'Expected JSON object, got {type(body).__name__}')
    return body


def parse_update(body: dict[str, Any]) -> Update | None:
    """Build an Update from a decoded webhook body.

    Returns None when there is nothing to act on: no 'message' (edited
    messages, callbacks, health checks) or a message without a usable chat.
    A message with a usable chat but malformed content is reduced to a
    content-less update, so the chat still gets a reply.
    """
    message = body.get('message')
    if message is None:
        LOGGER.debug('Webhook body without message, keys=%s', sorted(body))
        return None

    try:
        return Update.model_validate(message)
    except ValidationError as e:
        error = e

    raw_chat = message.get('chat') if isinstance(message, dict) else None
    try:
        chat = Chat.model_validate(raw_chat)
    except ValidationError:
        LOGGER.warning('Ignoring message without usable chat: %s', error)
        return None

    LOGGER.warning('Dropping malformed content for chat %s: %s', chat.id, error)
    return Update(chat=chat)

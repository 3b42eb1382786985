"""Telegram messaging client.

Wraps the aiogram Bot behind the small surface the handlers need: plain
text replies, chat actions, photos by URL and the two-step file download.
Long texts are split at natural boundaries to respect Telegram's limit.
"""

import logging
from typing import BinaryIO, Literal, Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from workers_ai_bot.errors import FileResolutionError

LOGGER = logging.getLogger(__name__)

ChatId = int | str
ChatAction = Literal['typing', 'upload_photo']

# Telegram hard limit is 4096, we use buffer for safety
SAFE_MAX_LENGTH = 4000
MAX_CAPTION_LENGTH = 1024


class MessagingClient(Protocol):
    """Chat platform boundary."""

    async def send_text(self, chat_id: ChatId, text: str) -> None: ...

    async def send_chat_action(self, chat_id: ChatId, action: ChatAction) -> None: ...

    async def send_photo(self, chat_id: ChatId, photo_url: str, caption: str) -> None: ...

    async def get_file_path(self, file_id: str) -> str: ...

    async def fetch_file_bytes(self, file_path: str) -> bytes: ...


def find_split_point(text: str, max_pos: int) -> int:
    """Find optimal split point before max_pos.

    Boundary priority: newline > dot > character

    Args:
        text: Plain text to analyze for split point
        max_pos: Maximum position to split at

    Returns:
        Position to split at (inclusive of boundary character)
    """
    if max_pos >= len(text):
        return len(text)

    # Priority 1: Newline boundary
    split = text.rfind('\n', 0, max_pos)
    if split > max_pos * 0.75:  # Accept if reasonably close (75%+)
        return split + 1  # Include the newline

    # Priority 2: Dot boundary (sentence end)
    split = text.rfind('.', 0, max_pos)
    if split > max_pos * 0.8:  # Accept if reasonably close (80%+)
        return split + 1  # Include the dot

    # Priority 3: Hard split at max_pos
    return max_pos


def utf16_len(text: str) -> int:
    """Calculate length in UTF-16 code units, as Telegram counts it."""
    return len(text.encode('utf-16-le')) // 2


def split_text(text: str, max_length: int = SAFE_MAX_LENGTH) -> list[str]:
    """Split plain text into chunks no longer than max_length.

    Length is measured in UTF-16 code units, so emoji count twice.
    Joining the chunks gives back the original text.
    """
    if utf16_len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    pos = 0
    while pos < len(text):
        max_chunk = min(max_length, len(text) - pos)
        # Shrink until the window fits, each dropped char frees 1 or 2 units
        while (excess := utf16_len(text[pos : pos + max_chunk]) - max_length) > 0:
            max_chunk -= max(1, excess // 2)
        end = pos + find_split_point(text[pos:], max_chunk)
        chunks.append(text[pos:end])
        pos = end
    return chunks


def truncate_caption(caption: str, limit: int = MAX_CAPTION_LENGTH) -> str:
    if utf16_len(caption) <= limit:
        return caption
    cut = limit - 3
    while utf16_len(caption[:cut]) > limit - 3:
        cut -= 1
    return caption[:cut] + '...'


class TelegramMessenger:
    """Messaging client backed by aiogram."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send_text(self, chat_id: ChatId, text: str) -> None:
        for chunk in split_text(text):
            await self.bot.send_message(chat_id, chunk)

    async def send_chat_action(self, chat_id: ChatId, action: ChatAction) -> None:
        await self.bot.send_chat_action(chat_id, action)

    async def send_photo(self, chat_id: ChatId, photo_url: str, caption: str) -> None:
        # Telegram fetches the photo from the URL itself
        await self.bot.send_photo(chat_id, photo_url, caption=truncate_caption(caption))

    async def get_file_path(self, file_id: str) -> str:
        """Resolve a file id to its download path.

        Raises:
            FileResolutionError: If Telegram has no path for the file
        """
        try:
            file = await self.bot.get_file(file_id)
        except TelegramAPIError as e:
            raise FileResolutionError(f'Failed to look up file {file_id}: {e}') from e

        if not file.file_path:
            raise FileResolutionError('Telegram returned empty file_path')
        return file.file_path

    async def fetch_file_bytes(self, file_path: str) -> bytes:
        """Download a file into memory.

        Raises:
            FileResolutionError: If the download fails
        """
        try:
            result: BinaryIO | None = await self.bot.download_file(file_path)
        except TelegramAPIError as e:
            raise FileResolutionError(f'Failed to download {file_path}: {e}') from e

        if result is None:
            raise FileResolutionError('Download returned None')
        return result.read()


async def download_file(messenger: MessagingClient, file_id: str) -> bytes:
    """Resolve a Telegram file id and download its content.

    Args:
        messenger: Messaging client
        file_id: Telegram file id (voice, audio or photo size)

    Returns:
        Raw file bytes
    """
    file_path = await messenger.get_file_path(file_id)
    data = await messenger.fetch_file_bytes(file_path)
    LOGGER.info('Downloaded %s: %d bytes', file_path, len(data))
    return data

"""R2 artifact storage for generated images.

Objects are written through the Cloudflare REST API and served back to
Telegram from the bucket's public address, so the bot never reads back
what it stored.
"""

from dataclasses import dataclass
import logging
import secrets
import string
import time
from typing import Protocol
from urllib.parse import quote

import httpx

from workers_ai_bot.cloudflare import envelope_errors
from workers_ai_bot.errors import StorageError

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSION = '.jpg'
IMAGE_CONTENT_TYPE = 'image/jpeg'

_KEY_ALPHABET = string.digits + string.ascii_lowercase
_KEY_SUFFIX_LENGTH = 13


@dataclass(frozen=True)
class Artifact:
    """Binary output about to be stored."""

    key: str
    data: bytes
    content_type: str


class ArtifactStore(Protocol):
    """Object storage boundary."""

    async def put(self, key: str, data: bytes, content_type: str) -> None: ...


class R2ArtifactStore:
    """Artifact store backed by an R2 bucket."""

    def __init__(self, client: httpx.AsyncClient, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Upload an object, overwriting any existing one with the same key.

        Raises:
            StorageError: If the upload fails
        """
        path = f'/r2/buckets/{self.bucket}/objects/{quote(key, safe="")}'
        try:
            response = await self.client.put(
                path, content=data, headers={'Content-Type': content_type}
            )
        except httpx.HTTPError as e:
            raise StorageError(f'Upload of {key} failed: {e}') from e

        if response.is_error:
            try:
                detail = envelope_errors(response.json())
            except ValueError:
                detail = response.text[:200]
            raise StorageError(
                f'Upload of {key} failed with status {response.status_code}: {detail}'
            )
        LOGGER.info('Stored %s (%d bytes, %s)', key, len(data), content_type)


def generate_artifact_key(extension: str = IMAGE_EXTENSION) -> str:
    """Build a collision-resistant object key.

    Format: '<epoch milliseconds>-<random base36 suffix><extension>'
    """
    suffix = ''.join(secrets.choice(_KEY_ALPHABET) for _ in range(_KEY_SUFFIX_LENGTH))
    return f'{int(time.time() * 1000)}-{suffix}{extension}'


def build_image_artifact(data: bytes) -> Artifact:
    """Wrap generated image bytes into an artifact with a fresh key."""
    return Artifact(key=generate_artifact_key(), data=data, content_type=IMAGE_CONTENT_TYPE)


def public_url(base_url: str, key: str) -> str:
    """Public address of a stored object."""
    return f'{base_url.rstrip("/")}/{key}'

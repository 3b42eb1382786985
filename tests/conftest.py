"""Shared fakes for the messaging, inference and storage boundaries."""

from typing import Any

import pytest

from workers_ai_bot.config import Config
from workers_ai_bot.errors import FileResolutionError
from workers_ai_bot.handlers import BotServices

PUBLIC_BASE_URL = 'https://pub-images.r2.dev'


class FakeMessenger:
    """Records every outbound call; serves files from an in-memory table."""

    def __init__(self, files: dict[str, tuple[str, bytes]] | None = None) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.files = files or {}
        self.fail_on: set[str] = set()

    def _record(self, kind: str, *args: Any) -> None:
        self.calls.append((kind, *args))
        if kind in self.fail_on:
            raise RuntimeError(f'{kind} is down')

    async def send_text(self, chat_id: int | str, text: str) -> None:
        self._record('text', chat_id, text)

    async def send_chat_action(self, chat_id: int | str, action: str) -> None:
        self._record('action', chat_id, action)

    async def send_photo(self, chat_id: int | str, photo_url: str, caption: str) -> None:
        self._record('photo', chat_id, photo_url, caption)

    async def get_file_path(self, file_id: str) -> str:
        self._record('get_file', file_id)
        if file_id not in self.files:
            raise FileResolutionError(f'Unknown file {file_id}')
        return self.files[file_id][0]

    async def fetch_file_bytes(self, file_path: str) -> bytes:
        self._record('fetch', file_path)
        for path, data in self.files.values():
            if path == file_path:
                return data
        raise FileResolutionError(f'Unknown path {file_path}')

    def of_kind(self, kind: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]

    @property
    def texts(self) -> list[str]:
        return [call[2] for call in self.of_kind('text')]


class FakeGateway:
    """Answers each model with a canned output or raises a canned error."""

    def __init__(self, outputs: dict[str, Any] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def run(self, model: str, inputs: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((model, inputs))
        output = self.outputs[model]
        if isinstance(output, Exception):
            raise output
        return output  # type: ignore[no-any-return]


class FakeStore:
    def __init__(self, error: Exception | None = None) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.error = error
        self.put_calls = 0

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        self.put_calls += 1
        if self.error is not None:
            raise self.error
        self.objects[key] = (data, content_type)


@pytest.fixture
def config() -> Config:
    return Config(
        bot_token='123:token',
        webhook_host='bot.example.com',
        webhook_path='/webhook',
        register_webhook=False,
        cloudflare_account_id='acc-id',
        cloudflare_api_token='cf-token',
        r2_bucket_name='images',
        public_base_url=f'{PUBLIC_BASE_URL}/',
    )


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def services(
    config: Config, messenger: FakeMessenger, gateway: FakeGateway, store: FakeStore
) -> BotServices:
    return BotServices(config=config, messenger=messenger, gateway=gateway, store=store)

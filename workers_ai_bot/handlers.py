"""Intent handlers.

Each handler follows the same shape: tell the user work has started, call
a Workers AI model, validate its output, deliver the result. The shape is
captured once in ``run_intent`` which also owns the failure boundary: a
handler never raises, it reports the failure to the chat instead.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
from typing import TypeVar

from workers_ai_bot.codec import bytes_to_inference_input, decode_base64_to_bytes
from workers_ai_bot.config import Config
from workers_ai_bot.errors import describe_error
from workers_ai_bot.inference import InferenceGateway, InferenceOutput, require_field
from workers_ai_bot.messaging import ChatAction, ChatId, MessagingClient, download_file
from workers_ai_bot.storage import ArtifactStore, build_image_artifact, public_url

LOGGER = logging.getLogger(__name__)

T = TypeVar('T')

START_MESSAGE = (
    'Welcome! Here is what I can do:\n\n'
    '/imagine <prompt> - generate an image\n'
    '/summarize <text> - summarize a text\n'
    '/chat <message> - chat with me (or just send any text)\n\n'
    'Send a voice message or an audio file to get a transcription.\n'
    'Send a photo to get a description of it.'
)

CHAT_SYSTEM_PROMPT = 'You are a helpful, friendly assistant. Keep your answers concise.'
CAPTION_PROMPT = 'Describe this image in detail.'


@dataclass(frozen=True)
class BotServices:
    """Collaborators shared by all handlers."""

    config: Config
    messenger: MessagingClient
    gateway: InferenceGateway
    store: ArtifactStore


async def run_intent(
    messenger: MessagingClient,
    chat_id: ChatId,
    *,
    activity: str,
    progress: str | None,
    chat_action: ChatAction,
    call: Callable[[], Awaitable[InferenceOutput]],
    validate: Callable[[InferenceOutput], T],
    deliver: Callable[[T], Awaitable[None]],
) -> None:
    """Run one unit of work with its own failure boundary.

    Args:
        messenger: Messaging client for progress, result and failure messages
        chat_id: Chat to reply to
        activity: What is being done, used in the failure message
            ('generate the image' -> "Sorry, I couldn't generate the image...")
        progress: Text sent before starting, or None to skip it
        chat_action: Chat action shown while working
        call: Model invocation
        validate: Extracts the expected value from the model output
        deliver: Sends the validated value to the user
    """
    try:
        if progress is not None:
            await messenger.send_text(chat_id, progress)
        await messenger.send_chat_action(chat_id, chat_action)
        output = await call()
        await deliver(validate(output))
    except Exception as e:
        LOGGER.exception('Failed to %s for chat %s', activity, chat_id)
        try:
            await messenger.send_text(
                chat_id, f"Sorry, I couldn't {activity}. Error: {describe_error(e)}"
            )
        except Exception:
            LOGGER.exception('Failed to deliver error message to chat %s', chat_id)


async def store_generated_image(config: Config, store: ArtifactStore, image_b64: str) -> str:
    """Decode a generated image, store it and return its public URL."""
    artifact = build_image_artifact(decode_base64_to_bytes(image_b64))
    await store.put(artifact.key, artifact.data, artifact.content_type)
    return public_url(config.public_base_url, artifact.key)


def _reply_with_label(
    messenger: MessagingClient, chat_id: ChatId, label: str
) -> Callable[[str], Awaitable[None]]:
    async def reply(text: str) -> None:
        await messenger.send_text(chat_id, f'{label}{text}')

    return reply


class IntentHandlers:
    """Handlers for every intent, bound to one set of services."""

    def __init__(self, services: BotServices) -> None:
        self.config = services.config
        self.messenger = services.messenger
        self.gateway = services.gateway
        self.store = services.store

    async def start(self, chat_id: ChatId) -> None:
        """Display welcome information."""
        await self._send_plain(chat_id, START_MESSAGE)

    async def unsupported(self, chat_id: ChatId, hint: str) -> None:
        await self._send_plain(chat_id, hint)

    async def generate_image(self, chat_id: ChatId, prompt: str) -> None:
        model = self.config.image_model

        async def deliver(image_b64: str) -> None:
            url = await store_generated_image(self.config, self.store, image_b64)
            LOGGER.info('Image for chat %s stored at %s', chat_id, url)
            await self.messenger.send_photo(
                chat_id, url, caption=f'Generated image for: {prompt}'
            )

        await run_intent(
            self.messenger,
            chat_id,
            activity='generate the image',
            progress=f'Generating image for: {prompt}...',
            chat_action='upload_photo',
            call=lambda: self.gateway.run(model, {'prompt': prompt}),
            validate=lambda output: require_field(model, output, 'image'),
            deliver=deliver,
        )

    async def transcribe(self, chat_id: ChatId, file_id: str) -> None:
        model = self.config.speech_model

        async def call() -> InferenceOutput:
            audio = await download_file(self.messenger, file_id)
            return await self.gateway.run(model, {'audio': bytes_to_inference_input(audio)})

        await run_intent(
            self.messenger,
            chat_id,
            activity='transcribe the audio',
            progress='Transcribing your audio...',
            chat_action='typing',
            call=call,
            validate=lambda output: require_field(model, output, 'text'),
            deliver=_reply_with_label(self.messenger, chat_id, 'Transcription: '),
        )

    async def describe_image(self, chat_id: ChatId, file_id: str) -> None:
        model = self.config.vision_model

        async def call() -> InferenceOutput:
            image = await download_file(self.messenger, file_id)
            return await self.gateway.run(
                model,
                {
                    'image': bytes_to_inference_input(image),
                    'prompt': CAPTION_PROMPT,
                    'max_tokens': self.config.caption_max_tokens,
                },
            )

        await run_intent(
            self.messenger,
            chat_id,
            activity='analyze the image',
            progress='Analyzing your image...',
            chat_action='typing',
            call=call,
            validate=lambda output: require_field(model, output, 'response'),
            deliver=_reply_with_label(self.messenger, chat_id, 'Image description: '),
        )

    async def summarize(self, chat_id: ChatId, text: str) -> None:
        model = self.config.summary_model
        inputs = {'input_text': text, 'max_length': self.config.summary_max_length}

        await run_intent(
            self.messenger,
            chat_id,
            activity='summarize the text',
            progress='Summarizing your text...',
            chat_action='typing',
            call=lambda: self.gateway.run(model, inputs),
            validate=lambda output: require_field(model, output, 'summary'),
            deliver=_reply_with_label(self.messenger, chat_id, 'Summary: '),
        )

    async def chat(self, chat_id: ChatId, message: str) -> None:
        model = self.config.chat_model
        # No history, every message starts a fresh exchange
        messages = [
            {'role': 'system', 'content': CHAT_SYSTEM_PROMPT},
            {'role': 'user', 'content': message},
        ]

        await run_intent(
            self.messenger,
            chat_id,
            activity='process your message',
            progress=None,
            chat_action='typing',
            call=lambda: self.gateway.run(model, {'messages': messages}),
            validate=lambda output: require_field(model, output, 'response'),
            deliver=_reply_with_label(self.messenger, chat_id, ''),
        )

    async def _send_plain(self, chat_id: ChatId, text: str) -> None:
        try:
            await self.messenger.send_text(chat_id, text)
        except Exception:
            LOGGER.exception('Failed to send message to chat %s', chat_id)

"""Intent classification for inbound updates.

Text commands are matched first, then voice/audio, then photos. Free text
that is not a recognized command falls through to chat.
"""

from dataclasses import dataclass

from workers_ai_bot.updates import Update


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class GenerateImage:
    prompt: str


@dataclass(frozen=True)
class Transcribe:
    file_id: str


@dataclass(frozen=True)
class DescribeImage:
    file_id: str


@dataclass(frozen=True)
class Summarize:
    text: str


@dataclass(frozen=True)
class Chat:
    message: str


@dataclass(frozen=True)
class Unsupported:
    hint: str


Intent = Start | GenerateImage | Transcribe | DescribeImage | Summarize | Chat | Unsupported

TRANSCRIBE_HINT = 'Send me a voice message or an audio file and I will transcribe it.'
ANALYZE_HINT = 'Send me a photo and I will describe what I see.'
UNSUPPORTED_HINT = (
    "Sorry, I can't handle this kind of message. Send text, a voice message, "
    'an audio file or a photo. Use /start to see what I can do.'
)

# Prefix commands, checked in order; the remainder is the payload
PREFIX_COMMANDS: tuple[tuple[str, type[GenerateImage | Summarize | Chat]], ...] = (
    ('/imagine ', GenerateImage),
    ('/summarize ', Summarize),
    ('/chat ', Chat),
)

# Bare commands for features triggered by media, answered with a usage hint
HINT_COMMANDS: dict[str, str] = {
    '/transcribe': TRANSCRIBE_HINT,
    '/analyze': ANALYZE_HINT,
}


def classify_text(text: str) -> Intent:
    # Only leading whitespace is dropped before prefix matching so that
    # '/imagine ' still yields an (empty) image prompt
    command = text.lstrip()
    if command.strip() == '/start':
        return Start()

    for prefix, intent_type in PREFIX_COMMANDS:
        if command.startswith(prefix):
            return intent_type(command[len(prefix) :].strip())

    stripped = command.strip()
    if stripped in HINT_COMMANDS:
        return Unsupported(HINT_COMMANDS[stripped])

    return Chat(stripped)


def classify(update: Update) -> Intent:
    """Classify an update into exactly one intent.

    Args:
        update: Parsed inbound message

    Returns:
        Intent with its payload
    """
    if update.text is not None:
        return classify_text(update.text)

    # Voice is preferred when both are attached
    if media := update.voice or update.audio:
        return Transcribe(media.file_id)

    if update.photo:
        # Variants are ordered by size, last is the highest resolution
        return DescribeImage(update.photo[-1].file_id)

    return Unsupported(UNSUPPORTED_HINT)

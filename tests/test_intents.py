"""Tests for update parsing and intent classification."""

from typing import Any

import pytest

from workers_ai_bot.intents import (
    ANALYZE_HINT,
    TRANSCRIBE_HINT,
    UNSUPPORTED_HINT,
    Chat,
    DescribeImage,
    GenerateImage,
    Start,
    Summarize,
    Transcribe,
    Unsupported,
    classify,
)
from workers_ai_bot.updates import MalformedBodyError, Update, load_body, parse_update


def make_update(**fields: Any) -> Update:
    return Update.model_validate({'chat': {'id': 42}, **fields})


# ============================================================================
# TESTS: text commands
# ============================================================================


@pytest.mark.parametrize(
    'text,expected',
    [
        ('/start', Start()),
        ('  /start  ', Start()),
        ('/imagine a cyberpunk cat', GenerateImage('a cyberpunk cat')),
        ('/imagine    spaced   out  ', GenerateImage('spaced   out')),
        ('/imagine ', GenerateImage('')),
        ('/summarize hello world', Summarize('hello world')),
        ('/chat how are you?', Chat('how are you?')),
        ('/transcribe', Unsupported(TRANSCRIBE_HINT)),
        ('/analyze', Unsupported(ANALYZE_HINT)),
        ('  just talking  ', Chat('just talking')),
        ('/imagine', Chat('/imagine')),
        ('/unknown command', Chat('/unknown command')),
    ],
)
def test_classify_text(text: str, expected: object) -> None:
    assert classify(make_update(text=text)) == expected, f'Failed for: {text!r}'


def test_text_takes_priority_over_media() -> None:
    update = make_update(text='hi', voice={'file_id': 'v1'}, photo=[{'file_id': 'p1'}])
    assert classify(update) == Chat('hi')


# ============================================================================
# TESTS: media
# ============================================================================


def test_voice_preferred_over_audio() -> None:
    update = make_update(voice={'file_id': 'voice-1'}, audio={'file_id': 'audio-1'})
    assert classify(update) == Transcribe('voice-1')


def test_audio_only() -> None:
    assert classify(make_update(audio={'file_id': 'audio-1'})) == Transcribe('audio-1')


def test_photo_uses_last_variant() -> None:
    update = make_update(
        photo=[{'file_id': 'small'}, {'file_id': 'medium'}, {'file_id': 'large'}]
    )
    assert classify(update) == DescribeImage('large')


@pytest.mark.parametrize('fields', [{}, {'photo': []}, {'sticker': {'file_id': 's'}}])
def test_unsupported_content(fields: dict[str, Any]) -> None:
    assert classify(make_update(**fields)) == Unsupported(UNSUPPORTED_HINT)


# ============================================================================
# TESTS: body parsing
# ============================================================================


def test_load_body_rejects_invalid_json() -> None:
    with pytest.raises(MalformedBodyError):
        load_body(b'{not json')


def test_load_body_rejects_non_object() -> None:
    with pytest.raises(MalformedBodyError):
        load_body(b'[1, 2, 3]')


def test_parse_update_without_message() -> None:
    assert parse_update({'update_id': 1, 'edited_message': {}}) is None


def test_parse_update_without_chat() -> None:
    assert parse_update({'message': {'text': 'hi'}}) is None


def test_parse_update_ignores_unknown_fields() -> None:
    update = parse_update(
        {
            'update_id': 7,
            'message': {
                'message_id': 1,
                'chat': {'id': 42, 'type': 'private'},
                'from': {'id': 42, 'is_bot': False},
                'text': '/start',
            },
        }
    )
    assert update is not None
    assert update.chat_id == 42
    assert update.text == '/start'


def test_parse_update_keeps_chat_when_content_is_malformed() -> None:
    update = parse_update({'message': {'chat': {'id': 42}, 'voice': {}}})
    assert update is not None, 'Chat should still get a reply'
    assert update.chat_id == 42
    assert update.voice is None
    assert classify(update) == Unsupported(UNSUPPORTED_HINT)


def test_parse_update_non_object_message() -> None:
    assert parse_update({'message': 'hello'}) is None

"""Binary payload conversions between Workers AI and Telegram.

Image models answer with base64 strings, while audio and vision models
take binary input as a JSON array of unsigned byte values.
"""

import base64
import binascii

from workers_ai_bot.errors import CodecError


def decode_base64_to_bytes(payload: str) -> bytes:
    """Decode a base64 string into raw bytes.

    Args:
        payload: Base64-encoded string (standard alphabet, padded)

    Returns:
        Decoded bytes, empty for an empty payload

    Raises:
        CodecError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CodecError(f'Malformed base64 payload: {e}') from e


def encode_bytes_to_base64(data: bytes) -> str:
    """Encode raw bytes to a base64 string (UTF-8)."""
    return base64.standard_b64encode(data).decode('utf-8')


def bytes_to_inference_input(data: bytes) -> list[int]:
    """Convert raw bytes to the numeric array accepted by Workers AI."""
    return list(data)

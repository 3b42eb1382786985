"""Error taxonomy shared by the collaborators and the intent handlers.

Handlers catch everything at their own boundary, so these types exist
mostly to give log lines and user-facing failure messages a useful detail.
"""


class BotError(Exception):
    """Base class for errors raised by bot components."""

    pass


class CodecError(BotError):
    """Raised when a binary payload cannot be decoded."""

    pass


class InferenceError(BotError):
    """Raised when a Workers AI call fails."""

    pass


class InferenceOutputError(InferenceError):
    """Raised when a Workers AI result lacks the expected field."""

    def __init__(self, model: str, field: str) -> None:
        super().__init__(f'{model} returned no {field!r} in its output')
        self.model = model
        self.field = field


class StorageError(BotError):
    """Raised when an artifact cannot be written to the bucket."""

    pass


class FileResolutionError(BotError):
    """Raised when a Telegram file id cannot be turned into bytes."""

    pass


def describe_error(error: BaseException) -> str:
    """Render an exception for a user-facing message.

    Falls back to the class name when the exception carries no message.
    """
    detail = str(error).strip()
    return detail or type(error).__name__

"""Workers AI inference gateway.

Every model is invoked the same way: a model id plus a JSON input object,
answered by a JSON output object. The shape of input and output depends on
the model family; callers validate the field they expect with
``require_field``.
"""

import logging
from typing import Any, Protocol

import httpx

from workers_ai_bot.cloudflare import envelope_errors
from workers_ai_bot.errors import InferenceError, InferenceOutputError

LOGGER = logging.getLogger(__name__)

InferenceInput = dict[str, Any]
InferenceOutput = dict[str, Any]


class InferenceGateway(Protocol):
    """Model invocation boundary."""

    async def run(self, model: str, inputs: InferenceInput) -> InferenceOutput: ...


class WorkersAIGateway:
    """Inference gateway backed by the Workers AI REST endpoint."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the gateway.

        Args:
            client: Account-scoped Cloudflare client (see create_cloudflare_client)
        """
        self.client = client

    async def run(self, model: str, inputs: InferenceInput) -> InferenceOutput:
        """Run a model and return its result object.

        Args:
            model: Workers AI model id, e.g. '@cf/openai/whisper'
            inputs: Model input object

        Returns:
            The 'result' object of the Cloudflare response envelope

        Raises:
            InferenceError: On transport errors, non-2xx responses or
                an unsuccessful envelope
        """
        LOGGER.info('Running model %s with inputs %s', model, sorted(inputs))
        try:
            response = await self.client.post(f'/ai/run/{model}', json=inputs)
        except httpx.HTTPError as e:
            raise InferenceError(f'{model} request failed: {e}') from e

        try:
            body = response.json()
        except ValueError as e:
            raise InferenceError(
                f'{model} returned non-JSON response (status {response.status_code})'
            ) from e

        if response.is_error or not isinstance(body, dict) or not body.get('success'):
            raise InferenceError(
                f'{model} failed with status {response.status_code}: {envelope_errors(body)}'
            )

        result = body.get('result')
        if not isinstance(result, dict):
            raise InferenceError(f'{model} returned no result object')
        return result


def require_field(model: str, output: Any, field: str) -> str:
    """Extract a string field from a model output.

    Args:
        model: Model id, used in the error message
        output: Object returned by the gateway
        field: Expected field name ('image', 'text', 'response', 'summary')

    Returns:
        The field value

    Raises:
        InferenceOutputError: If the field is missing or not a string
    """
    value = output.get(field) if isinstance(output, dict) else None
    if not isinstance(value, str):
        raise InferenceOutputError(model, field)
    return value

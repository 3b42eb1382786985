from pathlib import Path
from typing import Literal, Self

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    if Path('.env').exists():
        model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')
    else:
        model_config = SettingsConfigDict()

    bot_token: str

    webhook_host: str = ''
    webhook_path: str = '/webhook'
    # Set webhook on startup, disable when it is managed outside the bot
    register_webhook: bool = True

    # Webhook listener
    backend_host: str = '0.0.0.0'
    backend_port: int = 80

    # Cloudflare account used for both Workers AI and R2
    cloudflare_account_id: str
    cloudflare_api_token: str
    cloudflare_api_base: str = 'https://api.cloudflare.com/client/v4'
    request_timeout: float = 120.0

    # R2 bucket and its public (r2.dev or custom domain) address
    r2_bucket_name: str
    public_base_url: str

    # Workers AI models
    image_model: str = '@cf/black-forest-labs/flux-1-schnell'
    speech_model: str = '@cf/openai/whisper'
    vision_model: str = '@cf/llava-hf/llava-1.5-7b-hf'
    summary_model: str = '@cf/facebook/bart-large-cnn'
    chat_model: str = '@cf/meta/llama-3.1-8b-instruct'

    summary_max_length: int = 1024
    caption_max_tokens: int = 512

    # Logging level
    logging_level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'] = 'INFO'

    @field_validator('webhook_path', mode='before')
    def normalize_webhook_path(cls, path: str | None) -> str:
        if not path:
            return '/webhook'
        return path if path.startswith('/') else f'/{path}'

    @field_validator('public_base_url', mode='before')
    def strip_trailing_slash(cls, url: str) -> str:
        if not isinstance(url, str) or not url:
            raise ValueError('public_base_url must be a non-empty URL')
        return url.rstrip('/')

    @model_validator(mode='after')
    def require_webhook_host(self) -> Self:
        if self.register_webhook and not self.webhook_host:
            raise ValueError('webhook_host is required when register_webhook is enabled')
        return self

    @property
    def webhook_url(self) -> str:
        return f'https://{self.webhook_host}{self.webhook_path}'

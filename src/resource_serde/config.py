"""
Provider settings, read from ``OPENAI_*`` environment variables (and an optional ``.env``
file) with pydantic-settings.
"""

import typing

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import CredentialContext

DEFAULT_API_URL = "https://api.openai.com/v1"


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    api_key: typing.Optional[str] = Field(
        default=None,
        description="Project API key used for regular operations.",
    )
    admin_key: typing.Optional[str] = Field(
        default=None,
        description="Admin API key used for organization-level operations.",
    )
    organization: typing.Optional[str] = Field(
        default=None,
        description="Organization id sent as the OpenAI-Organization header.",
    )
    api_url: str = Field(
        default=DEFAULT_API_URL,
        min_length=8,
        description="Base URL of the provider, with or without the /v1 segment.",
    )
    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Transport deadline per request, in seconds.",
    )
    user_agent: str = Field(
        default="resource-serde/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )

    def credential_context(
        self, admin: bool = False, override_token: typing.Optional[str] = None
    ) -> CredentialContext:
        """
        Builds the credential context for one family of operations.

        :param bool admin: use the admin key when one is configured.
        :param Optional[str] override_token: a per-call token layered on top.
        """
        token = (self.admin_key if admin else None) or self.api_key or ""
        return CredentialContext(
            base_url=self.api_url,
            token=token,
            organization_id=self.organization or None,
            override_token=override_token or None,
        )

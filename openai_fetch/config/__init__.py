"""Unified configuration layer for the client.

Goals
-----
* Centralize defaults (base URL, user agent, timeouts).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Environment variables (OPENAI_API_KEY, OPENAI_ORG_ID, OPENAI_BASE_URL)
    3. Explicit constructor arguments
* Produce an immutable :class:`ClientConfig` that is never mutated after the
  client is built. Per-call overrides live on derived transports instead.

Public API
----------
* resolve_client_config(api_key=None, organization_id=None, base_url=None) -> ClientConfig
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..base.errors import ConfigurationError
from .defaults import OPENAI_DEFAULT_BASE_URL
from .env import resolve_env_setting

MISSING_API_KEY_MESSAGE = (
    "Missing OpenAI API key. Please provide one in the config or set the "
    "OPENAI_API_KEY environment variable."
)


class ClientConfig(BaseModel):
    """Immutable client-level connection settings.

    Attributes
    ----------
    api_key:
        Bearer token sent on every request.
    organization_id:
        Organization that should be billed; only needed when the key is
        scoped to several organizations.
    base_url:
        The HTTP endpoint for the API. You probably don't want to change this.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., min_length=1)
    organization_id: Optional[str] = None
    base_url: str = OPENAI_DEFAULT_BASE_URL


def resolve_client_config(
    api_key: Optional[str] = None,
    organization_id: Optional[str] = None,
    base_url: Optional[str] = None,
) -> ClientConfig:
    """Merge explicit arguments over environment values over defaults.

    Raises
    ------
    ConfigurationError
        When no API key is supplied and ``OPENAI_API_KEY`` is unset. Raised
        before any network activity.
    """
    key = api_key or resolve_env_setting("api_key")[0]
    if not key:
        raise ConfigurationError(MISSING_API_KEY_MESSAGE)
    org = organization_id or resolve_env_setting("organization_id")[0]
    url = base_url or resolve_env_setting("base_url")[0] or OPENAI_DEFAULT_BASE_URL
    return ClientConfig(api_key=key, organization_id=org or None, base_url=url)


__all__ = ["ClientConfig", "MISSING_API_KEY_MESSAGE", "resolve_client_config"]

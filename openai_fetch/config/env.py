"""openai_fetch.config.env
========================

Environment variable lookup for client settings.

``ENV_MAP`` names the canonical variable for each setting. Settings that also
honour a legacy or alternative spelling list every accepted name in
``ENV_ALIASES``, canonical first, which fixes the precedence when several are
set at once.

Lookups return ``None`` rather than raising; ``resolve_client_config`` decides
which missing values are fatal.
"""

from __future__ import annotations

import os
from typing import Dict, Iterator, Optional, Tuple

ENV_MAP: Dict[str, str] = {
    "api_key": "OPENAI_API_KEY",
    "organization_id": "OPENAI_ORG_ID",
    "base_url": "OPENAI_BASE_URL",
}

ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "organization_id": ("OPENAI_ORG_ID", "OPENAI_ORGANIZATION"),
}


def get_env_var_candidates(setting: str) -> Iterator[str]:
    """Yield the variable names accepted for ``setting``, canonical first."""
    key = (setting or "").lower()
    canonical = ENV_MAP.get(key)
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(key, ()):
        if alias != canonical:
            yield alias


def resolve_env_setting(setting: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, variable_name)`` for the first non-empty candidate.

    ``(None, None)`` when the setting is unknown or nothing is set. Values are
    stripped; a variable holding only whitespace counts as unset.
    """
    for name in get_env_var_candidates(setting):
        value = (os.environ.get(name) or "").strip()
        if value:
            return value, name
    return None, None


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "get_env_var_candidates",
    "resolve_env_setting",
]

"""Connection settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .constants import ENV_PREFIX, HTTP_CLIENT_TIMEOUT_SECONDS, env_value


@dataclass(frozen=True)
class HarnessSettings:
    """Where the backend under test lives and how to reach it.

    Attributes:
        graphql_url (str): Command submission endpoint.
        events_url (str): Read/event store query endpoint.
        auth_token (Optional[str]): Bearer token for the default client. None
            submits commands anonymously.
        http_timeout (float): Per-request timeout in seconds.
    """

    graphql_url: str
    events_url: str
    auth_token: Optional[str] = None
    http_timeout: float = HTTP_CLIENT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.graphql_url:
            raise ValueError(
                "HarnessSettings.graphql_url cannot be empty. "
                f"Set {ENV_PREFIX}GRAPHQL_URL or pass it explicitly."
            )
        if not self.events_url:
            raise ValueError(
                "HarnessSettings.events_url cannot be empty. "
                f"Set {ENV_PREFIX}EVENTS_URL or pass it explicitly."
            )

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "HarnessSettings":
        """Build settings from ``COMMAND_HARNESS_*`` environment variables.

        A ``.env`` file in the working directory is loaded without overriding
        variables that are already set; an explicit ``env_file`` overrides them.
        """
        load_dotenv(find_dotenv(usecwd=True), override=False)
        if env_file:
            load_dotenv(dotenv_path=env_file, override=True)

        return cls(
            graphql_url=os.getenv(f"{ENV_PREFIX}GRAPHQL_URL", ""),
            events_url=os.getenv(f"{ENV_PREFIX}EVENTS_URL", ""),
            auth_token=os.getenv(f"{ENV_PREFIX}AUTH_TOKEN") or None,
            http_timeout=env_value("HTTP_CLIENT_TIMEOUT_SECONDS", HTTP_CLIENT_TIMEOUT_SECONDS, float),
        )

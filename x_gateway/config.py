"""
Configuration management utilities for x_gateway.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping, Sequence

from dotenv import dotenv_values

from x_gateway.exceptions import ConfigurationError
from x_gateway.rate_limit import DEFAULT_THRESHOLD, WINDOW_SECONDS

ENV_VAR_MAP = {
    "api_key": "X_API_KEY",
    "api_secret": "X_API_SECRET",
    "access_token": "X_ACCESS_TOKEN",
    "access_token_secret": "X_ACCESS_TOKEN_SECRET",
    "bearer_token": "X_BEARER_TOKEN",
}

# Names used by earlier deployments of the server; read when the X_* names are unset.
LEGACY_ENV_VAR_MAP = {
    "api_key": "API_KEY",
    "api_secret": "API_SECRET_KEY",
    "access_token": "ACCESS_TOKEN",
    "access_token_secret": "ACCESS_TOKEN_SECRET",
}


@dataclass(slots=True)
class XCredentials:
    """Credential container supporting OAuth 1.0a and OAuth 2.0 tokens."""

    api_key: str | None = None
    api_secret: str | None = None
    access_token: str | None = None
    access_token_secret: str | None = None
    bearer_token: str | None = None

    def is_empty(self) -> bool:
        return all(value in (None, "") for value in asdict(self).values())

    def merge(self, other: "XCredentials") -> "XCredentials":
        """Merge credential sets, preferring non-null values from ``other``."""

        return XCredentials(
            api_key=other.api_key or self.api_key,
            api_secret=other.api_secret or self.api_secret,
            access_token=other.access_token or self.access_token,
            access_token_secret=other.access_token_secret or self.access_token_secret,
            bearer_token=other.bearer_token or self.bearer_token,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            key: value
            for key, value in asdict(self).items()
            if isinstance(value, str) and value
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, str | None]) -> "XCredentials":
        return cls(
            api_key=data.get("api_key"),
            api_secret=data.get("api_secret"),
            access_token=data.get("access_token"),
            access_token_secret=data.get("access_token_secret"),
            bearer_token=data.get("bearer_token"),
        )


@dataclass(slots=True)
class GatewaySettings:
    """Tunable limits for the command gateway."""

    rate_limit_threshold: int = DEFAULT_THRESHOLD
    rate_limit_window: float = WINDOW_SECONDS
    thread_pacing: float = 1.0
    download_timeout: float = 30.0
    log_level: str = "INFO"


SETTINGS_ENV_MAP = {
    "rate_limit_threshold": ("X_GATEWAY_RATE_LIMIT_THRESHOLD", int),
    "rate_limit_window": ("X_GATEWAY_RATE_LIMIT_WINDOW", float),
    "thread_pacing": ("X_GATEWAY_THREAD_PACING", float),
    "download_timeout": ("X_GATEWAY_DOWNLOAD_TIMEOUT", float),
    "log_level": ("X_GATEWAY_LOG_LEVEL", str),
}


class ConfigManager:
    """Loads and persists credentials from the environment, a .env file, or disk."""

    def __init__(
        self,
        credential_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
        dotenv_path: Path | None = None,
    ) -> None:
        self._credential_path = credential_path or Path("credentials/x_config.json")
        self._env = os.environ if env is None else env
        self._dotenv_path = dotenv_path or Path(".env")

    def load_credentials(
        self,
        priority: Sequence[str] = ("env", "dotenv", "file"),
    ) -> XCredentials:
        """
        Load credentials according to the requested priority order.

        Raises:
            ConfigurationError: when no credentials are available.
        """

        for source in priority:
            if source == "env":
                credentials = self._from_env_mapping(self._env)
            elif source == "dotenv":
                credentials = self._load_from_dotenv()
            elif source == "file":
                credentials = self._load_from_file()
            else:
                raise ValueError(f"Unknown credential source '{source}'.")

            if credentials and not credentials.is_empty():
                return credentials

        raise ConfigurationError("X API credentials are not configured.")

    def load_settings(self) -> GatewaySettings:
        """Read gateway settings from ``X_GATEWAY_*`` variables, falling back to defaults."""

        values: dict[str, object] = {}
        dotenv = self._dotenv_values()
        for name, (env_name, cast) in SETTINGS_ENV_MAP.items():
            raw = self._env.get(env_name) or dotenv.get(env_name)
            if raw in (None, ""):
                continue
            try:
                values[name] = cast(raw)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}") from exc
        return GatewaySettings(**values)  # type: ignore[arg-type]

    def save_credentials(self, credentials: XCredentials) -> None:
        """Persist credentials to disk, merging with existing values."""

        existing = self._load_from_file()
        merged = existing.merge(credentials) if existing else credentials

        self._credential_path.parent.mkdir(parents=True, exist_ok=True)
        with self._credential_path.open("w", encoding="utf-8") as fp:
            json.dump(merged.to_dict(), fp, indent=2, sort_keys=True)

        # Set file permissions to owner read/write only for security
        os.chmod(self._credential_path, 0o600)

    def _dotenv_values(self) -> dict[str, str | None]:
        if not self._dotenv_path.exists():
            return {}
        return dict(dotenv_values(self._dotenv_path))

    def _load_from_dotenv(self) -> XCredentials | None:
        return self._from_env_mapping(self._dotenv_values())

    @staticmethod
    def _from_env_mapping(env: Mapping[str, str | None]) -> XCredentials | None:
        values: dict[str, str | None] = {}
        for field_name, env_name in ENV_VAR_MAP.items():
            legacy = LEGACY_ENV_VAR_MAP.get(field_name)
            values[field_name] = env.get(env_name) or (env.get(legacy) if legacy else None)
        credentials = XCredentials.from_mapping(values)
        return credentials if not credentials.is_empty() else None

    def _load_from_file(self) -> XCredentials | None:
        if not self._credential_path.exists():
            return None

        with self._credential_path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Credential file {self._credential_path} did not contain a mapping."
            )

        credentials = XCredentials.from_mapping(data)
        return credentials if not credentials.is_empty() else None

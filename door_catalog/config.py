# COMPONENT: SERVICE CONFIGURATION
# REQUIREMENTS SATISFIED: environment-driven settings, fail-fast credential loading
"""
door_catalog/config.py

Builds explicit configuration objects from the process environment.

Environment variables are loaded from .env (if present) at import time,
the same way the application entry point always has. Two objects are
produced:

    Settings    - store selection, CORS, debug diagnostics, port
    AuthConfig  - upstream OAuth client-credentials endpoint for /token

AuthConfig enumerates its required keys. A partially configured
environment is a startup error (ConfigError naming the missing keys)
rather than a token endpoint that fails on first use.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from door_catalog.errors import ConfigError

load_dotenv()

STORE_BACKENDS = ("memory", "dynamodb")


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    app_env: str = "production"
    door_store: str = "memory"
    doors_table: str = "doors"
    aws_region: Optional[str] = None
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    port: int = 8080

    @property
    def debug(self) -> bool:
        return self.app_env == "development"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        door_store = env.get("DOOR_STORE", "memory").strip().lower()
        if door_store not in STORE_BACKENDS:
            raise ConfigError(
                f"DOOR_STORE must be one of {', '.join(STORE_BACKENDS)}, got {door_store!r}"
            )

        try:
            port = int(env.get("PORT", "8080"))
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {env.get('PORT')!r}")

        return cls(
            app_env=env.get("APP_ENV", "production").strip().lower(),
            door_store=door_store,
            doors_table=env.get("DOORS_TABLE", "doors"),
            aws_region=env.get("AWS_REGION") or None,
            allowed_origins=_split_csv(env.get("ALLOWED_ORIGINS", "*")) or ["*"],
            port=port,
        )


@dataclass(frozen=True)
class AuthConfig:
    auth_url: str
    client_id: str
    client_secret: str
    scope: str
    grant_type: str = "client_credentials"

    # env var -> field name
    REQUIRED_KEYS = {
        "AUTH_URL": "auth_url",
        "AUTH_CLIENT_ID": "client_id",
        "AUTH_CLIENT_SECRET": "client_secret",
        "AUTH_SCOPE": "scope",
    }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuthConfig":
        env = os.environ if environ is None else environ
        missing = [key for key in cls.REQUIRED_KEYS if not env.get(key)]
        if missing:
            raise ConfigError(
                "Token proxy configuration incomplete, missing: " + ", ".join(missing)
            )
        values = {attr: env[key] for key, attr in cls.REQUIRED_KEYS.items()}
        return cls(grant_type=env.get("AUTH_GRANT_TYPE") or "client_credentials", **values)

    @classmethod
    def from_env_optional(cls, environ: Optional[Mapping[str, str]] = None) -> Optional["AuthConfig"]:
        """
        None when no auth key is set at all; otherwise the full config,
        raising ConfigError if only some of the keys are present.
        """
        env = os.environ if environ is None else environ
        if not any(env.get(key) for key in cls.REQUIRED_KEYS):
            return None
        return cls.from_env(env)

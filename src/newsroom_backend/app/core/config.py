# src/newsroom_backend/app/core/config.py
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or default).strip()


def _env_bool(name: str, default: str = "") -> bool:
    return _env(name, default).lower() in ("1", "true", "yes", "on")


class Settings(BaseModel, frozen=True):
    """
    Runtime configuration, read from the environment (.env is loaded by main).
    Call get_settings.cache_clear() after changing env vars (tests).
    """

    # Facebook OAuth client
    facebook_client_id: str = ""
    facebook_client_secret: str = ""
    facebook_redirect_url: str = "http://localhost:8000/oauth/facebook/callback"
    facebook_auth_url: str = "https://www.facebook.com/v2.8/dialog/oauth"
    facebook_token_url: str = "https://graph.facebook.com/v2.8/oauth/access_token"
    facebook_profile_url: str = "https://graph.facebook.com/v2.8/me"
    oauth_state: str = ""

    # App / routing
    app_path: str = "http://localhost:3000"
    site_url: str = "http://localhost:3000"

    # Outbound limits (seconds)
    oauth_http_timeout_sec: float = 10.0
    storage_timeout_sec: float = 5.0

    # Storage
    database_url: str = "sqlite+aiosqlite:///./newsroom.db"
    db_echo: bool = False

    # Session tokens
    jwt_secret: str = "dev_secret_do_not_use_in_prod"
    jwt_iss: str = "newsroom"
    jwt_aud: str = "newsroom-api"
    jwt_access_ttl_sec: int = 86400

    @property
    def login_path(self) -> str:
        return self.app_path.rstrip("/") + "/login"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            facebook_client_id=_env("FACEBOOK_CLIENT_ID"),
            facebook_client_secret=_env("FACEBOOK_CLIENT_SECRET"),
            facebook_redirect_url=_env("FACEBOOK_REDIRECT_URL", cls.model_fields["facebook_redirect_url"].default),
            facebook_auth_url=_env("FACEBOOK_AUTH_URL", cls.model_fields["facebook_auth_url"].default),
            facebook_token_url=_env("FACEBOOK_TOKEN_URL", cls.model_fields["facebook_token_url"].default),
            facebook_profile_url=_env("FACEBOOK_PROFILE_URL", cls.model_fields["facebook_profile_url"].default),
            oauth_state=_env("OAUTH_STATE"),
            app_path=_env("APP_PATH", cls.model_fields["app_path"].default),
            site_url=_env("SITE_URL", cls.model_fields["site_url"].default),
            oauth_http_timeout_sec=float(_env("OAUTH_HTTP_TIMEOUT_SEC", "10")),
            storage_timeout_sec=float(_env("STORAGE_TIMEOUT_SEC", "5")),
            database_url=_env("DATABASE_URL", cls.model_fields["database_url"].default),
            db_echo=_env_bool("DB_ECHO"),
            jwt_secret=_env("JWT_SECRET", cls.model_fields["jwt_secret"].default),
            jwt_iss=_env("JWT_ISS", cls.model_fields["jwt_iss"].default),
            jwt_aud=_env("JWT_AUD", cls.model_fields["jwt_aud"].default),
            jwt_access_ttl_sec=int(_env("JWT_ACCESS_TTL_SEC", "86400")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()

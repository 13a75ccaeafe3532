# src/newsroom_backend/app/auth/oauth.py
"""
OAuth2 authorization-code login against an external identity provider.

Every step returns a StepResult: either a value for the next step or the
error that ends the flow. There is no retry; the caller decides whether
an error becomes a redirect to the login page or a JSON envelope.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar
from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx

from newsroom_backend.app.core.config import Settings
from newsroom_backend.app.core.errors import (
    APIError,
    AuthStateError,
    ProfileFetchError,
    ProfileIncompleteError,
    RegistrationError,
    StorageError,
    TokenExchangeError,
    URLParseError,
)
from newsroom_backend.app.core.trace import auth_trace
from newsroom_backend.app.models.user import FACEBOOK, OAuthAccount, User, gender_code
from newsroom_backend.app.storage.base import UserStorage, bounded

_log = logging.getLogger(__name__)

T = TypeVar("T")

FACEBOOK_SCOPES = ("public_profile", "email")
FACEBOOK_PROFILE_FIELDS = "id,name,email,picture,birthday,first_name,last_name,gender"


# ------------------------
# Per-request client configuration
# ------------------------
@dataclass(frozen=True)
class OAuthClientConfig:
    provider: str
    client_id: str
    client_secret: str
    auth_url: str
    token_url: str
    profile_url: str
    redirect_url: str  # our callback, carrying ?location=...
    scopes: Tuple[str, ...]
    state: str
    timeout: float


def resolve_location(location: Optional[str], settings: Settings) -> str:
    return location or settings.site_url


def build_facebook_config(settings: Settings, location: str) -> OAuthClientConfig:
    """Build a fresh, immutable client config for one request."""
    sep = "&" if "?" in settings.facebook_redirect_url else "?"
    return OAuthClientConfig(
        provider=FACEBOOK,
        client_id=settings.facebook_client_id,
        client_secret=settings.facebook_client_secret,
        auth_url=settings.facebook_auth_url,
        token_url=settings.facebook_token_url,
        profile_url=settings.facebook_profile_url,
        redirect_url=settings.facebook_redirect_url + sep + urlencode({"location": location}),
        scopes=FACEBOOK_SCOPES,
        state=settings.oauth_state,
        timeout=settings.oauth_http_timeout_sec,
    )


def authorization_url(cfg: OAuthClientConfig) -> str:
    params = {
        "client_id": cfg.client_id,
        "scope": " ".join(cfg.scopes),
        "redirect_uri": cfg.redirect_url,
        "response_type": "code",
        "state": cfg.state,
    }
    return f"{cfg.auth_url}?{urlencode(params)}"


# ------------------------
# Step results
# ------------------------
@dataclass(frozen=True)
class StepResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[APIError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: APIError) -> "StepResult[T]":
        return cls(error=error)


def verify_state(cfg: OAuthClientConfig, state: str) -> StepResult[None]:
    if not cfg.state or state != cfg.state:
        _log.warning("invalid oauth state, expected %r, got %r", cfg.state, state)
        return StepResult.failure(
            AuthStateError("Invalid oauth state", where="auth.oauth.verify_state")
        )
    return StepResult.success(None)


async def exchange_code(
    cfg: OAuthClientConfig, code: str, client: Optional[httpx.AsyncClient] = None
) -> StepResult[str]:
    """Trade the authorization code for a provider access token."""
    where = "auth.oauth.exchange_code"
    if not code:
        _log.warning("code exchange skipped: no code in callback")
        return StepResult.failure(TokenExchangeError("missing code", where=where))

    data = {
        "grant_type": "authorization_code",
        "code": code,
        "client_id": cfg.client_id,
        "client_secret": cfg.client_secret,
        "redirect_uri": cfg.redirect_url,
    }
    own = client or httpx.AsyncClient(timeout=cfg.timeout)
    try:
        tr = await own.post(cfg.token_url, data=data, headers={"Accept": "application/json"})
        if tr.status_code != 200:
            _log.warning("code exchange failed with %s: %s", tr.status_code, tr.text[:200])
            return StepResult.failure(
                TokenExchangeError(f"token endpoint returned {tr.status_code}", where=where)
            )
        body = tr.json()
        if not isinstance(body, dict):
            _log.warning("code exchange failed: token response is not an object")
            return StepResult.failure(TokenExchangeError("token response is not an object", where=where))
        access = body.get("access_token")
    except (httpx.HTTPError, ValueError) as ex:
        _log.warning("code exchange failed with '%s'", ex)
        return StepResult.failure(TokenExchangeError(str(ex), where=where))
    finally:
        if client is None:
            await own.aclose()

    if not access:
        _log.warning("code exchange failed: no access_token in token response")
        return StepResult.failure(TokenExchangeError("no access_token in token response", where=where))

    auth_trace("oauth.exchange.ok", provider=cfg.provider)
    return StepResult.success(access)


async def fetch_profile(
    cfg: OAuthClientConfig, access_token: str, client: Optional[httpx.AsyncClient] = None
) -> StepResult[Dict[str, Any]]:
    """GET the user-info endpoint; the response body is released on every path."""
    where = "auth.oauth.fetch_profile"
    params = {"fields": FACEBOOK_PROFILE_FIELDS, "access_token": access_token}
    own = client or httpx.AsyncClient(timeout=cfg.timeout)
    try:
        async with own.stream("GET", cfg.profile_url, params=params) as resp:
            await resp.aread()
        if resp.status_code != 200:
            _log.warning("cannot get user info, provider returned %s", resp.status_code)
            return StepResult.failure(
                ProfileFetchError(f"user info endpoint returned {resp.status_code}", where=where)
            )
        profile = resp.json()
    except httpx.HTTPError as ex:
        _log.warning("cannot get user info using provider API: %s", ex)
        return StepResult.failure(ProfileFetchError(str(ex), where=where))
    except ValueError as ex:
        _log.warning("error parsing provider user data: %s", ex)
        return StepResult.failure(ProfileFetchError(f"error parsing user data: {ex}", where=where))
    finally:
        if client is None:
            await own.aclose()

    if not isinstance(profile, dict):
        return StepResult.failure(ProfileFetchError("user data is not an object", where=where))
    return StepResult.success(profile)


def profile_to_account(provider: str, profile: Dict[str, Any]) -> StepResult[OAuthAccount]:
    """Map a decoded profile into an OAuthAccount. An id is required."""
    def s(key: str) -> Optional[str]:
        val = profile.get(key)
        return str(val) if val not in (None, "") else None

    a_id = s("id")
    if not a_id:
        return StepResult.failure(
            ProfileIncompleteError(
                f"Cannot get user data from {provider}.", where="auth.oauth.profile_to_account"
            )
        )

    picture = None
    pic = profile.get("picture")
    data = pic.get("data") if isinstance(pic, dict) else None
    if isinstance(data, dict) and isinstance(data.get("url"), str):
        picture = data["url"]
    return StepResult.success(OAuthAccount(
        type=provider,
        a_id=a_id,
        email=s("email"),
        name=s("name"),
        first_name=s("first_name"),
        last_name=s("last_name"),
        gender=gender_code(s("gender")),
        picture=picture or None,
    ))


async def reconcile_user(storage: UserStorage, account: OAuthAccount, *, timeout: float) -> StepResult[User]:
    """
    Upsert by external id: insert a new local user on first login,
    otherwise refresh the stored profile fields.
    Lookup and insert failures abort the flow; a failed refresh does not.
    """
    where = "auth.oauth.reconcile_user"
    try:
        existing = await bounded(storage.get_user_data_by_oauth(account), timeout, where)
    except StorageError as ex:
        return StepResult.failure(ex)

    if existing is None:
        _log.info("create oauth user type=%s aid=%s name=%s", account.type, account.a_id, account.name)
        try:
            user = await bounded(storage.insert_user_by_oauth(account), timeout, where)
        except StorageError as ex:
            return StepResult.failure(RegistrationError(f"cannot register user: {ex.detail}", where=where))
        auth_trace("oauth.reconcile.inserted", type=account.type, aid=account.a_id, uid=user.id)
        return StepResult.success(user)

    try:
        user = await bounded(storage.update_oauth_data(account), timeout, where)
    except StorageError as ex:
        _log.warning("oauth profile refresh failed for user %s: %s", existing.id, ex.detail)
        user = existing
    auth_trace("oauth.reconcile.updated", type=account.type, aid=account.a_id, uid=user.id)
    return StepResult.success(user)


def check_location(location: str) -> StepResult[str]:
    """Reject a redirect target that cannot be parsed as a URL."""
    try:
        urlsplit(location)
    except ValueError as ex:
        _log.error("cannot parse location %r: %s", location, ex)
        return StepResult.failure(URLParseError(str(ex), where="auth.oauth.check_location"))
    return StepResult.success(location)


def append_token(location: str, token: str) -> StepResult[str]:
    """
    Add token=<token> to location. Other query parameters are kept verbatim;
    a stale token parameter is replaced.
    """
    try:
        parts = urlsplit(location)
    except ValueError as ex:
        _log.error("cannot parse location %r: %s", location, ex)
        return StepResult.failure(URLParseError(str(ex), where="auth.oauth.append_token"))

    kept = [p for p in parts.query.split("&") if p and p.split("=", 1)[0] != "token"]
    kept.append(urlencode({"token": token}))
    return StepResult.success(urlunsplit(parts._replace(query="&".join(kept))))

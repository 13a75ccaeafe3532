# src/newsroom_backend/app/auth/facebook.py
from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from newsroom_backend.app.auth.internal import issue_session_token
from newsroom_backend.app.auth.oauth import (
    append_token,
    authorization_url,
    build_facebook_config,
    check_location,
    exchange_code,
    fetch_profile,
    profile_to_account,
    reconcile_user,
    resolve_location,
    verify_state,
)
from newsroom_backend.app.core.config import Settings, get_settings
from newsroom_backend.app.core.errors import (
    APIError,
    AuthStateError,
    ProfileFetchError,
    TokenExchangeError,
)
from newsroom_backend.app.core.trace import auth_trace
from newsroom_backend.app.models.user import FACEBOOK
from newsroom_backend.app.storage.base import UserStorage
from newsroom_backend.app.storage.deps import get_user_storage

_log = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# failures before we know who the user is: send the browser back to login
_REDIRECT_TO_LOGIN = (AuthStateError, TokenExchangeError, ProfileFetchError)


def _fail(settings: Settings, err: APIError) -> RedirectResponse:
    """Redirect to login for pre-identity failures; anything else renders as JSON."""
    if isinstance(err, _REDIRECT_TO_LOGIN):
        auth_trace("oauth.facebook.to_login", error=type(err).__name__, where=err.where)
        return RedirectResponse(settings.login_path, status_code=307)
    raise err


# ------------------------
# /oauth/facebook (begin)
# ------------------------
@router.get("/oauth/facebook")
async def begin_auth(location: str = "", settings: Settings = Depends(get_settings)):
    """
    Redirect to the Facebook authorization dialog. `location` is where the
    browser lands after login (defaults to SITE_URL); it rides along in
    the redirect_uri so it survives the round trip.
    """
    loc = resolve_location(location, settings)
    cfg = build_facebook_config(settings, loc)
    auth_trace("oauth.facebook.begin", location=loc, client_id_set=bool(cfg.client_id))
    return RedirectResponse(authorization_url(cfg), status_code=307)


# ------------------------
# /oauth/facebook/callback
# ------------------------
@router.get("/oauth/facebook/callback")
async def authenticate(
    location: str = "",
    state: str = "",
    code: str = "",
    settings: Settings = Depends(get_settings),
    storage: UserStorage = Depends(get_user_storage),
):
    _log.info("oauth callback, type: %s", FACEBOOK)
    loc = resolve_location(location, settings)
    cfg = build_facebook_config(settings, loc)

    checked = verify_state(cfg, state)
    if not checked.ok:
        return _fail(settings, checked.error)

    # a bad redirect target must fail before anything is exchanged or stored
    target = check_location(loc)
    if not target.ok:
        return _fail(settings, target.error)

    async with httpx.AsyncClient(timeout=cfg.timeout) as client:
        tok = await exchange_code(cfg, code, client)
        if not tok.ok:
            return _fail(settings, tok.error)

        prof = await fetch_profile(cfg, tok.value, client)
        if not prof.ok:
            return _fail(settings, prof.error)

    acct = profile_to_account(FACEBOOK, prof.value)
    if not acct.ok:
        return _fail(settings, acct.error)
    account = acct.value
    _log.info("oauth login type=%s aid=%s", account.type, account.a_id)

    rec = await reconcile_user(storage, account, timeout=settings.storage_timeout_sec)
    if not rec.ok:
        return _fail(settings, rec.error)

    token = issue_session_token(rec.value, settings)

    dest = append_token(loc, token)
    if not dest.ok:
        return _fail(settings, dest.error)

    auth_trace("oauth.facebook.done", uid=rec.value.id, location=loc)
    return RedirectResponse(dest.value, status_code=307)

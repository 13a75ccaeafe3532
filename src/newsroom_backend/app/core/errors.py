# src/newsroom_backend/app/core/errors.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

_log = logging.getLogger(__name__)


class APIError(Exception):
    """
    Structured application error.

    message     : short, client-facing summary (rendered as "status")
    where       : dotted location that raised it, for logs only
    detail      : longer description (rendered as "error")
    status_code : HTTP status used when the error is rendered as JSON
    """

    status_code = 500
    message = "Internal server error"

    def __init__(self, detail: str = "", *, where: str = "", message: str | None = None,
                 status_code: int | None = None) -> None:
        self.detail = detail or (message or self.message)
        self.where = where
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)

    def to_envelope(self) -> Dict[str, Any]:
        return {"status": self.message, "error": self.detail}


class ParseError(APIError):
    """Bad query parameters. Never rendered: callers degrade to an empty page."""
    status_code = 400
    message = "Bad request"


class StorageError(APIError):
    status_code = 500
    message = "Internal server error"


class NotFound(APIError):
    status_code = 404
    message = "Record Not Found"

    def __init__(self, detail: str = "Record Not Found", **kw: Any) -> None:
        super().__init__(detail, **kw)


class URLParseError(APIError):
    status_code = 500
    message = "Internal server error"


class RegistrationError(APIError):
    status_code = 500
    message = "Internal server error"


# ---- OAuth flow errors (rendered as a redirect to the login page) ----

class OAuthFlowError(APIError):
    status_code = 401
    message = "unauthorized"


class AuthStateError(OAuthFlowError):
    message = "OAuth state"


class TokenExchangeError(OAuthFlowError):
    message = "Code exchange failed"


class ProfileFetchError(OAuthFlowError):
    message = "Cannot get user info from the identity provider"


class ProfileIncompleteError(OAuthFlowError):
    message = "unauthorized"


async def _api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        _log.error("%s %s: %s", exc.where or "api", exc.message, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, _api_error_handler)

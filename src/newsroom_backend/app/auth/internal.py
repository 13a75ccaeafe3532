from __future__ import annotations

import time
import jwt
from typing import Optional, Dict, Any
from fastapi import Depends, HTTPException, Header, status

from newsroom_backend.app.core.config import Settings, get_settings
from newsroom_backend.app.core.trace import auth_trace
from newsroom_backend.app.models.user import User

# =========================
# Session tokens (HS256)
# =========================
ALGO = "HS256"

def _now() -> int:
    return int(time.time())

# -------------------------
# Issuer
# -------------------------
def issue_session_token(
    user: User,
    settings: Optional[Settings] = None,
    ttl: Optional[int] = None,
) -> str:
    """
    Mint the application session token for a local user.
    Carries the user id (sub), privilege level and name fields.
    """
    s = settings or get_settings()
    now = _now()
    payload: Dict[str, Any] = {
        "iss": s.jwt_iss,
        "aud": s.jwt_aud,
        "sub": str(user.id),
        "privilege": user.privilege,
        "first_name": user.first_name or "",
        "last_name": user.last_name or "",
        "email": user.email or "",
        "iat": now,
        "nbf": now,
        "exp": now + (ttl or s.jwt_access_ttl_sec),
    }

    tok = jwt.encode(payload, s.jwt_secret, algorithm=ALGO)
    auth_trace(
        "internal.issue_session",
        sub=payload["sub"],
        privilege=user.privilege,
        exp=payload["exp"],
        exp_human=time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime(payload["exp"])),
    )
    return tok

# -------------------------
# Verifier (programmatic)
# -------------------------
def verify_access(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    s = settings or get_settings()
    claims = jwt.decode(
        token,
        s.jwt_secret,
        algorithms=[ALGO],
        audience=s.jwt_aud,
        issuer=s.jwt_iss,
        options={"require": ["exp", "iss", "aud", "sub"]},
    )
    auth_trace(
        "internal.verify_access_ok",
        sub=claims.get("sub"),
        privilege=claims.get("privilege"),
        exp=claims.get("exp"),
    )
    return claims

# -------------------------
# FastAPI dependency
# -------------------------
def require_token(min_privilege: int = 0):
    """
    Returns a dependency that accepts only our own session tokens
    (Authorization: Bearer <jwt>) and enforces a minimum privilege level.
    """
    async def dep(
        authorization: Optional[str] = Header(None),
        settings: Settings = Depends(get_settings),
    ) -> Dict[str, Any]:
        if not authorization or not authorization.lower().startswith("bearer "):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
        token = authorization.split(" ", 1)[1].strip()
        if not token:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
        try:
            claims = verify_access(token, settings)
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="invalid token: exp (expired)",
            )
        except jwt.PyJWTError as ex:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"invalid token: {ex}",
            )
        if int(claims.get("privilege") or 0) < min_privilege:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="insufficient_privilege")
        return claims
    return dep

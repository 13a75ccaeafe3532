# src/newsroom_backend/app/main.py
from fastapi import FastAPI, Depends
from dotenv import load_dotenv

# Load .env before settings are first read
load_dotenv()

from newsroom_backend.app.core.logging import setup_logging
setup_logging()

from newsroom_backend.app.core.errors import install_error_handlers
from newsroom_backend.app.auth.internal import require_token
from newsroom_backend.app.auth.facebook import router as facebook_router
from newsroom_backend.app.api.routes.topics import router as topics_router
from newsroom_backend.app.db.session import test_connection

app = FastAPI(title="Newsroom API", version="0.1.0")

install_error_handlers(app)

# 0) Health checks (open)
@app.get("/healthz")
def health():
    return {"status": "ok"}

@app.get("/healthz/db")
async def db_health():
    return {"db": "ok", "value": await test_connection()}

# 1) Who am I - validates a session token minted by the OAuth callback
@app.get("/auth/me", tags=["auth"])
def auth_me(_claims = Depends(require_token())):
    """Return decoded claims of the current session token (Authorization: Bearer <jwt>)."""
    return _claims

# 2) OAuth login
app.include_router(facebook_router)

# 3) Topics
app.include_router(topics_router)

# recipehub/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipehub.config import settings
from recipehub.core.db import init_db, close_db
from recipehub.core.redis_client import build_redis_client
from recipehub.core.revocation import RevocationStore
from recipehub.core.tokens import TokenValidator
from recipehub.realtime.hub import RealtimeHub

from recipehub.api.v1.routers import auth, recipes, firebase
from recipehub.api.v1.routers.ws import router as ws_router

logger = logging.getLogger("uvicorn.error")


def init_state(app: FastAPI, redis=None) -> None:
    """
    Attach the revocation store, token validator and realtime hub to the app.
    Tests call this again with a fake Redis to get fresh instances per test.
    """
    app.state.redis = redis if redis is not None else build_redis_client()
    app.state.revocation = RevocationStore(app.state.redis)
    app.state.validator = TokenValidator(app.state.revocation)
    app.state.realtime = RealtimeHub(app.state.validator, auth_timeout=settings.ws_auth_timeout_seconds)


app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_state(app)


@app.on_event("startup")
async def on_startup():
    await init_db(generate_schemas=settings.env == "dev")
    logger.info("[startup] database ready, realtime gateway listening on /ws")


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()
    await app.state.redis.aclose()


# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(recipes.router, prefix="/api/v1")
app.include_router(firebase.router, prefix="/api/v1")

# WebSocket
app.include_router(ws_router)


@app.get("/healthz")
def healthz():
    return {"ok": True}

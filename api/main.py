import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core import db
from core.http import install_error_handlers, unhandled_exception_handler
from core.logs import configure_logging
from questions import router as questions_router
from tags import router as tags_router

logger = logging.getLogger(__name__)

PORT = 8000

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type"]


def cors_allow_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    configure_logging()
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Browsers may call this API from any origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins(),
    allow_methods=CORS_METHODS,
    allow_headers=CORS_HEADERS,
)


@app.middleware("http")
async def cors_on_every_response(request: Request, call_next):
    # CORSMiddleware only answers requests that send an Origin header; non-browser
    # clients and 500s still get the policy here.
    try:
        response = await call_next(request)
    except Exception as exc:
        response = await unhandled_exception_handler(request, exc)

    origins = cors_allow_origins()
    if "*" in origins:
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
    response.headers.setdefault("Access-Control-Allow-Methods", ", ".join(CORS_METHODS))
    response.headers.setdefault("Access-Control-Allow-Headers", ", ".join(CORS_HEADERS))
    return response


install_error_handlers(app)

app.include_router(tags_router.router, tags=["tags"])
app.include_router(questions_router.router, tags=["questions"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "tag-questions api"}


def run() -> None:
    configure_logging()
    try:
        db.database_url()
    except RuntimeError as exc:
        logger.error("startup_aborted reason=%s", exc)
        raise SystemExit(1) from exc
    uvicorn.run(app, host=os.environ.get("API_HOST", "0.0.0.0").strip() or "0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()

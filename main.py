import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

import models  # noqa: F401  registers every table on Base.metadata
from api.v1.auth.routes import profile_router, router as auth_router
from api.v1.projects.routes import router as projects_router
from api.v1.share.routes import public_router, router as share_router
from api.v1.trash.routes import router as trash_router
from core.config import settings
from core.db.base import Base
from core.db.session import engine
from core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

# Create tables; alembic owns schema changes after the first run
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api"
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(profile_router, prefix=API_PREFIX)
app.include_router(projects_router, prefix=API_PREFIX)
app.include_router(trash_router, prefix=API_PREFIX)
app.include_router(share_router, prefix=API_PREFIX)
app.include_router(public_router, prefix=API_PREFIX)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f} ms)")
    return response


@app.get("/")
def root():
    return {"message": "Service is running"}

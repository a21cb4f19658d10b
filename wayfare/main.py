import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wayfare.core.database import create_tables, engine
from wayfare.core.settings import settings
from wayfare.domains.agencies.routes import router as agencies_router
from wayfare.domains.auth.routes import router as auth_router
from wayfare.domains.invitations.routes import router as invitations_router
from wayfare.domains.members.routes import router as members_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    if settings.AUTO_CREATE_TABLES:
        await create_tables()
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Wayfare API",
    description="Agency membership, invitation and authorization API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(agencies_router, prefix="/api/v1")
app.include_router(members_router, prefix="/api/v1")
app.include_router(invitations_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "Wayfare API is running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}

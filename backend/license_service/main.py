# license_service/main.py
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from license_service.config import settings
from license_service.core.db import init_db, close_db
from license_service.core.registry import ConnectionRegistry

from license_service.api.v1.routers import licenses
from license_service.api.v1.routers.ws_license import router as ws_license_router

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# Open license WebSocket sessions, shared by handle with every session
app.state.connections = ConnectionRegistry()
app.state.heartbeat_interval = settings.heartbeat_interval

# CORS (fixed allow-list of client applications)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def on_startup():
    await init_db()
    logger.info("[startup] heartbeat interval=%.1fs", app.state.heartbeat_interval)

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(licenses.router, prefix="/api")
app.include_router(licenses.router, prefix="/api/v1", include_in_schema=False)

# WebSocket
app.include_router(ws_license_router)

def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("license_service.main:app", host=settings.host, port=settings.port)

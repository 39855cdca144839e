import logging
from contextlib import asynccontextmanager

import socketio
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from codesync.api.restful.assistant import router as assistant_router
from codesync.api.restful.execute import router as execute_router
from codesync.api.ws.session import coordinator, sio
from codesync.core.settings import get_settings

# Get settings instance
settings = get_settings()

# Configure logging
handlers = [logging.StreamHandler()]
if settings.log_file:
    handlers.append(logging.FileHandler(settings.log_file))
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format=settings.log_format,
    handlers=handlers,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("CodeSync server is starting up...")
    yield
    logger.info("CodeSync server is shutting down...")


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Add CORS middleware with configurable settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_credentials,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)

app.include_router(execute_router)
app.include_router(assistant_router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    logger.info("Root endpoint accessed")
    return "Hello from CodeSync server!"


@app.get("/health")
async def health_check():
    logger.info("Health check endpoint accessed")
    return {"status": "healthy", "service": settings.app_name}


@app.get("/settings")
async def get_app_settings():
    """Get current application settings (excluding sensitive information)"""
    logger.info("Settings endpoint accessed")
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "environment": settings.environment,
        "debug": settings.debug,
        "host": settings.host,
        "port": settings.port,
        "log_level": settings.log_level,
        "socketio_path": settings.socketio_path,
        "event_profile": settings.event_profile,
        "judge0_configured": bool(settings.judge0_api_key),
        "gemini_model": settings.gemini_model,
        "gemini_configured": bool(settings.gemini_api_key),
    }


@app.get("/rooms/{room_id}")
async def get_room(room_id: str):
    """Get the current members and stored language of a room."""
    return await coordinator.room_info(room_id)


# Socket.IO sits in front of FastAPI: it answers its own path (polling and
# websocket upgrades) and hands everything else to the FastAPI app.
application = socketio.ASGIApp(
    sio,
    other_asgi_app=app,
    socketio_path=settings.socketio_path,
)


if __name__ == "__main__":
    logger.info("Starting server with Uvicorn...")
    uvicorn.run(
        "codesync.main:application",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )

#!/usr/bin/env python3
"""
Startup script for the CodeSync session hub
"""

import uvicorn
import logging
from codesync.core.settings import get_settings

if __name__ == "__main__":
    # Get settings
    settings = get_settings()

    # Configure logging
    logging.basicConfig(level=getattr(logging, settings.log_level.upper()))
    logger = logging.getLogger(__name__)

    logger.info(f"Starting {settings.app_name} server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Host: {settings.host}:{settings.port}")
    logger.info(f"Socket.IO path: /{settings.socketio_path}")

    # Run the server
    uvicorn.run(
        "codesync.main:application",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
        access_log=True
    )

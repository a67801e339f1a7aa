#!/usr/bin/env python3
"""
Run script for the auth service.
This script builds the FastAPI app from the environment and serves it with uvicorn.
"""
import uvicorn
import sys
import traceback

from auth_service.base_microservice import ServiceConfig
from auth_service.main import create_app

if __name__ == "__main__":
    try:
        config = ServiceConfig.from_env()
        print(f"Auth Service - running on http://localhost:{config.port}")

        uvicorn.run(
            create_app(config),
            host="0.0.0.0",
            port=config.port,
            log_level=config.log_level.lower()
        )
    except Exception as e:
        print(f"Error starting server: {e}")
        traceback.print_exc()
        sys.exit(1)

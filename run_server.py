#!/usr/bin/env python3
"""FastAPI server entry point for the Research API."""

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    import argparse

    from config.config import Settings

    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="RyanClaw Research API server")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    print(f"{settings.service_name} running on port {args.port} ({settings.mode} mode)")

    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )

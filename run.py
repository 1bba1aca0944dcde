#!/usr/bin/env python
"""
Entry point for running the GSD Agents server.

Loads .env, configures logging and serves the FastAPI app with uvicorn.
"""

import os
import sys

try:
    from dotenv import load_dotenv
    import uvicorn
except ImportError as e:
    print(f"""
Error: Missing required dependencies

{e}

Install the project into your virtual environment first:

    pip install -e .

Then try running again:
    python run.py
""")
    sys.exit(1)

# Load environment variables
load_dotenv()

# Configure logging before importing application modules
from gsd.logging_config import configure_logging
configure_logging()

from gsd.config import EngineConfig
from gsd.main import app


def main():
    """Run the GSD Agents server."""
    config = EngineConfig.from_env()
    settings = config.backend_settings

    print("""
GSD Agents v0.1

Configuration:
   - Backend: {}
   - Model: {}
   - Roles: {}
   - Auto mode: {}
    """.format(
        config.backend,
        settings.model or "not-set",
        ", ".join(config.roles),
        config.auto_mode
    ))

    host = os.getenv("GSD_HOST", "127.0.0.1")
    port = int(os.getenv("GSD_PORT", "8000"))

    print(f"Server starting on http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    print(f"Health check: http://{host}:{port}/health\n")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )


if __name__ == "__main__":
    main()

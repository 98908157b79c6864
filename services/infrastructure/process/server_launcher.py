"""
Server launcher for the activity analytics FastAPI application.

Orchestrates the startup sequence:
- Working directory and log directory setup
- Uvicorn server startup
- Port conflict reporting
"""

import os
import sys
import multiprocessing
import logging

import uvicorn

from config.settings import config
from uvicorn_config import LOGGING_CONFIG

logger = logging.getLogger(__name__)


def run_server() -> None:
    """
    Run the application with Uvicorn.

    Workers default to 1 on Windows and min(cpu_count, 4) elsewhere;
    override with UVICORN_WORKERS. DEBUG enables auto-reload (single worker).
    """
    script_dir = os.path.dirname(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    )
    os.chdir(script_dir)

    if config.log_dir:
        os.makedirs(config.log_dir, exist_ok=True)

    host = config.host
    port = config.port
    debug = config.debug
    log_level = config.log_level.lower()

    environment = "development" if debug else "production"
    reload = debug

    default_workers = (
        1 if sys.platform == "win32" else min(multiprocessing.cpu_count(), 4)
    )
    workers_str = os.getenv("UVICORN_WORKERS")
    workers = int(workers_str) if workers_str else default_workers
    worker_count = 1 if reload else workers

    # Print server configuration summary
    print(f"Environment: {environment} (DEBUG={debug})")
    print(f"Host: {host}")
    print(f"Port: {port}")
    print(f"Workers: {worker_count}")
    print(f"Log Level: {log_level.upper()}")
    print(f"Auto-reload: {reload}")
    print("=" * 80)
    print(f"Server ready at: http://localhost:{port}")
    if debug:
        print(f"API Docs: http://localhost:{port}/docs")
    print("=" * 80)
    print("Press Ctrl+C to stop the server")
    print()

    try:
        uvicorn.run(
            "main:app",
            host=host,
            port=port,
            workers=worker_count,
            reload=reload,
            log_level=log_level,
            log_config=LOGGING_CONFIG,
            use_colors=False,
            timeout_keep_alive=30,
            timeout_graceful_shutdown=5,
            access_log=False,
        )
    except OSError as e:
        if e.errno == 98 or "address already in use" in str(e).lower():
            print(f"\n[ERROR] Port {port} is already in use!")
            print(f"        Another process is using port {port}.")
            print("        Stop that process or set PORT in .env to a free port.")
            sys.exit(1)
        raise
    except KeyboardInterrupt:
        logger.info("Server stopped by user")

"""
hang: Application Factory & Entry Point
==========================================

What:  Builds the ASGI application for a Service and runs it.
How:   create_app() returns a FastAPI instance whose only endpoint is a
       catch-all route handing every request to the Service's Dispatcher.
       run() serves that app with uvicorn and arms the Shutdown Listener.
Who:   A microservice's own entry point calls run(service); uvicorn can also
       import `hang.main:app` directly for a bare service (livecheck only).

Application Architecture:
    ┌────────────────────────────────────────────────┐
    │                  FastAPI App                   │
    │                                                │
    │  Middleware:  [Request ID] → [Logging]         │
    │                                                │
    │  Routes:      /{path:path} → Dispatcher        │
    │                   │                            │
    │                   ▼                            │
    │               RouteRegistry                    │
    │     default │ livecheck │ <service routes>     │
    │                                                │
    └────────────────────────────────────────────────┘

Process Lifecycle (run):
    1. Configure logging from settings
    2. Build the app; serve it with uvicorn on a daemon thread
    3. Bridge SIGINT/SIGTERM to the Shutdown Listener (main thread)
    4. On signal: log "<process>: stopped by the user", exit 0 immediately
"""

import sys
import threading
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI

from hang import __version__
from hang.config import Settings, settings
from hang.logger import setup_logging
from hang.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from hang.service import Service
from hang.shutdown import ShutdownListener, install_signal_handlers

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(service: Optional[Service] = None) -> FastAPI:
    """
    Create the ASGI application for `service`.

    Every path and method reaches the Dispatcher; OpenAPI/Swagger pages are
    disabled so that paths such as /docs stay routable like any other.
    """
    if service is None:
        service = Service(process_name=settings.process_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        service.log.info("%s: started", service.process_name)
        yield
        service.log.info("%s: server stopped", service.process_name)

    app = FastAPI(
        title=service.process_name,
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.service = service

    # Last added = first to execute: RequestID wraps Logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_route(
        "/{path:path}",
        service.dispatcher.handle,
        methods=HTTP_METHODS,
        name="dispatch",
        include_in_schema=False,
    )

    return app


# ══════════════════════════════════════════════════════════════════════════
# Entry Point
# ══════════════════════════════════════════════════════════════════════════

def run(service: Optional[Service] = None, config: Optional[Settings] = None) -> None:
    """
    Serve `service` until the process is stopped by a signal.

    uvicorn runs on a daemon thread so that the main thread owns signal
    handling; the Shutdown Listener ends the process with exit code 0 and
    does not wait for in-flight requests.
    """
    config = config or settings
    setup_logging(config.log_level)

    if service is None:
        service = Service(process_name=config.process_name)

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(service),
            host=config.host,
            port=config.port,
            log_config=None,
        )
    )

    listener = ShutdownListener(lambda: service.process_name, service.log)
    install_signal_handlers(listener)

    serving = threading.Thread(target=server.run, name="hang-server", daemon=True)
    serving.start()

    while serving.is_alive():
        listener.wait(timeout=0.5)

    service.log.error("%s: server exited unexpectedly", service.process_name)
    sys.exit(1)


# Module-level instance for `uvicorn hang.main:app`
app = create_app()

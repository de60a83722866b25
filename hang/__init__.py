"""
hang: Microservice Scaffolding
=================================

What: Route registry with a fallback handler, a liveness probe, request-body
      helpers, a stop-signal listener and a logger adapter, on top of
      FastAPI/Starlette and uvicorn.

Layout:
    ┌─────────────────────────────────────┐
    │     main (app factory, run)         │  ← ASGI app, uvicorn, signals
    ├─────────────────────────────────────┤
    │   service → dispatcher → registry   │  ← routing
    ├─────────────────────────────────────┤
    │   body │ shutdown │ logger          │  ← helpers used by handlers
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"

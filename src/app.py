"""Storefront FastAPI application.

Web server that processes order commands synchronously via HTTP. Every
request runs inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from storefront/domain.toml:
#   - default      → in-memory database, sync command and event processing
#   - "production" → SQLite through SQLAlchemy
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.domain import storefront  # noqa: E402
from storefront.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()
storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Orders, carts and inventory reconciliation",
)

# ---------------------------------------------------------------------------
# Routers and error envelopes
# ---------------------------------------------------------------------------
from storefront.api import order_router, register_exception_handlers  # noqa: E402

register_exception_handlers(app)
app.include_router(order_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and tag log lines with the caller."""
    bind_request_context(
        path=request.url.path,
        user_id=request.headers.get("x-user-id"),
        role=request.headers.get("x-user-role"),
    )
    try:
        with storefront.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})

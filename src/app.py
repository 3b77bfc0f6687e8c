"""Sanatzar HTTP service.

Serves the identity and marketplace APIs from one process. Each request is
routed to a Protean domain by its path prefix and handled inside that
domain's context, with the domain, method and path bound to its log lines.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from protean.integrations.fastapi import register_exception_handlers

from identity.api import router as identity_router
from identity.domain import identity
from marketplace.api import routers as marketplace_routers
from marketplace.domain import marketplace
from marketplace.utils.logging import add_context, clear_context, configure_logging, get_environment

API_PREFIX = "/api"
USERS_PREFIX = "/users"

DOMAIN_PREFIXES = (
    (USERS_PREFIX, identity),
    (API_PREFIX, marketplace),
)


def domain_for_path(path: str):
    """The domain serving ``path``, or None for docs and health checks."""
    for prefix, domain in DOMAIN_PREFIXES:
        if path == prefix or path.startswith(f"{prefix}/"):
            return domain
    return None


def create_app() -> FastAPI:
    configure_logging()

    # PROTEAN_ENV picks the domain.toml overlay: "test" runs projectors inside
    # the unit of work, "production" leaves them to the async engine.
    identity.init()
    marketplace.init()

    application = FastAPI(
        title="Sanatzar API",
        description="Artisan-goods marketplace: identity and marketplace domains",
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)

    @application.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        domain = domain_for_path(request.url.path)
        if domain is None:
            return await call_next(request)

        add_context(domain=domain.name, method=request.method, path=request.url.path)
        try:
            with domain.domain_context():
                return await call_next(request)
        finally:
            clear_context()

    application.include_router(identity_router)
    for router in marketplace_routers:
        application.include_router(router, prefix=API_PREFIX)

    @application.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "environment": get_environment(),
            "domains": [identity.name, marketplace.name],
        }

    return application


app = create_app()

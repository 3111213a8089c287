import logging

from fastapi import FastAPI

from saas_core.api.errors import register_error_handlers
from saas_core.api.middleware import request_context_middleware
from saas_core.api.routes.permissions import router as permissions_router
from saas_core.api.routes.roles import router as roles_router
from saas_core.api.routes.subscriptions import router as subscriptions_router
from saas_core.api.routes.tiers import router as tiers_router
from saas_core.api.routes.usage import router as usage_router
from saas_core.core.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="SaaS Access Core",
    docs_url=None if settings.is_production() else "/docs",
    redoc_url=None if settings.is_production() else "/redoc",
)
app.middleware("http")(request_context_middleware)
register_error_handlers(app)
app.include_router(roles_router, prefix="/api/v1")
app.include_router(permissions_router, prefix="/api/v1")
app.include_router(tiers_router, prefix="/api/v1")
app.include_router(subscriptions_router, prefix="/api/v1")
app.include_router(usage_router, prefix="/api/v1")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    return {"status": "ok"}

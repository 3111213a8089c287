from saas_core.api.routes.permissions import router as permissions_router
from saas_core.api.routes.roles import router as roles_router
from saas_core.api.routes.subscriptions import router as subscriptions_router
from saas_core.api.routes.tiers import router as tiers_router
from saas_core.api.routes.usage import router as usage_router

__all__ = [
    "permissions_router",
    "roles_router",
    "subscriptions_router",
    "tiers_router",
    "usage_router",
]

"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Guards are applied at the include_router level using FastAPI's
dependencies parameter, from the ROUTES table below. Each entry names a
router and the guards every route in it runs, in order. The role guard
must come after the access guard: it reads the identity the access
guard attaches to the request.
"""

from fastapi import APIRouter, Depends

from notekeeper.api.auth import router as auth_router
from notekeeper.api.health import router as health_router
from notekeeper.api.notes import router as notes_router
from notekeeper.api.users import router as users_router
from notekeeper.auth.dependencies import get_current_identity
from notekeeper.auth.roles import UserRole, require_role

OPEN: list = []
AUTHENTICATED = [Depends(get_current_identity)]
ADMIN_ONLY = [Depends(get_current_identity), Depends(require_role(UserRole.ADMIN))]

# (router, tags, guards)
ROUTES = [
    (health_router, ["health"], OPEN),
    # Mixed: login routes are open, /profile and /validate guard themselves
    (auth_router, ["auth"], OPEN),
    (notes_router, ["notes"], AUTHENTICATED),
    (users_router, ["users"], ADMIN_ONLY),
]


def build_api_router(prefix: str = "/api") -> APIRouter:
    api_router = APIRouter(prefix=prefix)
    for router, tags, guards in ROUTES:
        api_router.include_router(router, tags=tags, dependencies=guards)
    return api_router

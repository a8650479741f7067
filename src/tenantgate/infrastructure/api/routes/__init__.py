"""API routes for TenantGate."""

from .menus_router import router as menus_router
from .roles_router import router as roles_router
from .users_router import router as users_router

__all__ = [
    "menus_router",
    "roles_router",
    "users_router",
]

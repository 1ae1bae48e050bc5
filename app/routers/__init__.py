"""API routers."""

from app.routers.auth import router as auth_router
from app.routers.trans_categories import router as trans_categories_router
from app.routers.transactions import router as transactions_router
from app.routers.users import router as users_router

__all__ = ["auth_router", "users_router", "trans_categories_router", "transactions_router"]

from fastapi import APIRouter

from recipe_api.api.v1 import account, imports

api_router = APIRouter(prefix="/api")
api_router.include_router(imports.router)
api_router.include_router(account.router)

__all__ = ["api_router"]

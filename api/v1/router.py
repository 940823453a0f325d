# api/v1/router.py
from fastapi import APIRouter

from . import dashboard, health, plans, users

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(users.router, tags=["Auth"])
api_router.include_router(plans.router, tags=["Plans"])
api_router.include_router(dashboard.router, tags=["Dashboard"])

from fastapi import APIRouter

from app.api.admin import admin_router
from app.api.auth import auth_router
from app.api.conversions import conversions_router
from app.api.dashboard import dashboard_router
from app.api.github import github_router
from app.api.goals import goals_router
from app.api.time_records import time_records_router
from app.api.users import settings_router, users_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(time_records_router)
api_router.include_router(goals_router)
api_router.include_router(conversions_router)
api_router.include_router(dashboard_router)
api_router.include_router(users_router)
api_router.include_router(settings_router)
api_router.include_router(admin_router)
api_router.include_router(github_router)

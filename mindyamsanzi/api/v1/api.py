from fastapi import APIRouter

from mindyamsanzi.api.v1.endpoints import admin, chat, directory, interventions, performance, profiles

api_router = APIRouter()

# Edge-function compatible routes
api_router.include_router(chat.router, tags=["chat"])
api_router.include_router(interventions.router, tags=["interventions"])

# Student data
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
api_router.include_router(performance.router, prefix="/performance", tags=["performance"])
api_router.include_router(directory.router, tags=["directory"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])

from fastapi import APIRouter
from fyp_repository.api.v1.endpoints import projects, admin

api_router = APIRouter()

api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

"""
Admin endpoints: login, moderation queue, approve/reject/edit/delete, stats

Everything except /login requires a bearer token.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fyp_repository.core.database import get_db
from fyp_repository.models.project import ProjectStatus
from fyp_repository.modules.auth.dependencies import get_current_admin
from fyp_repository.schemas.admin import AdminIdentity, AdminLogin, AdminResponse, LoginResponse
from fyp_repository.schemas.project import ProjectDetail, ProjectStats, ProjectUpdate, TopProject
from fyp_repository.services.auth_service import authenticate_admin
from fyp_repository.services.project_service import ProjectService
from fyp_repository.api.v1.endpoints.projects import to_list_response
from fyp_repository.utils.responses import success_response

router = APIRouter()


@router.post("/login")
async def login(
    request: Request,
    credentials: AdminLogin,
    db: AsyncSession = Depends(get_db)
):
    """Exchange admin credentials for an access token"""
    client_ip = request.client.host if request.client else "unknown"
    admin, token = await authenticate_admin(db, credentials.email, credentials.password, client_ip=client_ip)

    return success_response(
        "Login successful",
        LoginResponse(token=token, admin=AdminResponse.model_validate(admin)),
    )


@router.get("/pending")
async def list_pending_projects(
    page: int = Query(1),
    current_admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await ProjectService(db).list_projects(ProjectStatus.PENDING, page=page)
    return success_response("Pending projects retrieved", to_list_response(result))


@router.get("/stats")
async def get_stats(
    current_admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    stats = await ProjectService(db).get_stats()
    stats["top_projects"] = [TopProject.model_validate(p) for p in stats["top_projects"]]
    return success_response("Stats retrieved successfully", ProjectStats(**stats))


@router.patch("/{project_id}/approve")
async def approve_project(
    project_id: str,
    current_admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    project = await ProjectService(db).approve_project(project_id)
    return success_response("Project approved successfully", ProjectDetail.model_validate(project))


@router.patch("/{project_id}/reject")
async def reject_project(
    project_id: str,
    current_admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Reject and remove the stored PDF"""
    project = await ProjectService(db).reject_project(project_id)
    return success_response("Project rejected", ProjectDetail.model_validate(project))


@router.patch("/{project_id}")
async def edit_project(
    project_id: str,
    changes: ProjectUpdate,
    current_admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update title, abstract or supervisor"""
    project = await ProjectService(db).edit_project(project_id, changes)
    return success_response("Project updated successfully", ProjectDetail.model_validate(project))


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    current_admin: AdminIdentity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Hard delete the project, its ratings, comments and PDF"""
    await ProjectService(db).delete_project(project_id)
    return success_response("Project deleted successfully")

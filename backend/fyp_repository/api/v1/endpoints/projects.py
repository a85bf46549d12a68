"""
Public project endpoints: upload, browse, search, download, comment, rate
"""
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from fyp_repository.core.database import get_db
from fyp_repository.models.project import ProjectStatus
from fyp_repository.schemas.project import (
    CommentCreate,
    CommentResponse,
    ProjectDetail,
    ProjectListResponse,
    ProjectSummary,
    ProjectUploadResponse,
    RatingCreate,
    RatingSummary,
)
from fyp_repository.services.project_service import ProjectService
from fyp_repository.utils.responses import success_response

router = APIRouter()


def to_list_response(page: dict) -> ProjectListResponse:
    return ProjectListResponse(
        items=[ProjectSummary.model_validate(p) for p in page["items"]],
        pagination=page["pagination"],
    )


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_project(
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    abstract: Optional[str] = Form(None),
    supervisor: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db)
):
    """Upload a PDF report with its metadata. The project starts pending."""
    service = ProjectService(db)
    project = await service.upload_project(
        file,
        {
            "title": title,
            "author": author,
            "department": department,
            "year": year,
            "abstract": abstract,
            "supervisor": supervisor,
        },
    )

    return success_response(
        "Project uploaded successfully. Awaiting admin approval.",
        ProjectUploadResponse.model_validate(project),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/approved")
async def list_approved_projects(
    page: int = Query(1),
    db: AsyncSession = Depends(get_db)
):
    """Approved projects, newest first"""
    result = await ProjectService(db).list_projects(ProjectStatus.APPROVED, page=page)
    return success_response("Projects retrieved successfully", to_list_response(result))


@router.get("/search")
async def search_projects(
    query: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    department: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    page: int = Query(1),
    db: AsyncSession = Depends(get_db)
):
    """Search approved projects by free text, year, department and author"""
    result = await ProjectService(db).search_projects(
        query=query,
        year=year,
        department=department,
        author=author,
        page=page,
    )
    return success_response("Search results retrieved", to_list_response(result))


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Approved project by id or projectId. Counts a view."""
    project = await ProjectService(db).get_public_project(project_id)
    return success_response("Project retrieved successfully", ProjectDetail.model_validate(project))


@router.post("/{project_id}/download")
async def download_project(
    project_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Stream the PDF of an approved project. Counts a download."""
    project = await ProjectService(db).prepare_download(project_id)
    return FileResponse(
        path=project.file_path,
        media_type="application/pdf",
        filename=project.file_name,
    )


@router.post("/{project_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    project_id: str,
    comment: CommentCreate,
    db: AsyncSession = Depends(get_db)
):
    new_comment = await ProjectService(db).add_comment(project_id, comment)
    return success_response(
        "Comment added successfully",
        CommentResponse.model_validate(new_comment),
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/{project_id}/ratings", status_code=status.HTTP_201_CREATED)
async def add_rating(
    project_id: str,
    rating: RatingCreate,
    db: AsyncSession = Depends(get_db)
):
    average, total = await ProjectService(db).add_rating(project_id, rating.rating)
    return success_response(
        "Rating added successfully",
        RatingSummary(average_rating=average, total_ratings=total),
        status_code=status.HTTP_201_CREATED,
    )

"""
Project Service - lifecycle of uploaded final-year projects

Upload, moderation (approve/reject/edit/delete), public browsing and the
engagement counters. Every mutation commits explicitly; counters are single
UPDATE ... SET n = n + 1 statements so concurrent requests never lose updates.
"""

from typing import Any, Dict, Optional, Tuple

from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy import select, update, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from fyp_repository.core.exceptions import (
    ValidationFailedError,
    InvalidFileTypeError,
    ProjectNotFoundError,
    ProjectFileMissingError,
)
from fyp_repository.core.logging_config import logger, set_project_id
from fyp_repository.core.types import is_uuid
from fyp_repository.models.project import Project, ProjectRating, ProjectComment, ProjectStatus
from fyp_repository.schemas.common import first_error_message
from fyp_repository.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    CommentCreate,
    validate_rating,
)
from fyp_repository.services.storage_service import StorageService, storage_service
from fyp_repository.utils.helpers import (
    generate_project_id,
    sanitize_input,
    sanitize_fields,
    is_pdf_file,
    average_from_totals,
    escape_like,
)
from fyp_repository.utils.pagination import paginate
from fyp_repository.core.config import settings


UPLOAD_FIELDS = ("title", "author", "department", "year", "abstract", "supervisor")


class ProjectService:
    """Project queries and mutations bound to one database session"""

    def __init__(self, db: AsyncSession, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or storage_service

    # ========== Lookup ==========

    async def find_project(self, ident: str, status: Optional[ProjectStatus] = None) -> Optional[Project]:
        """Resolve either the primary key or the public projectId"""
        if not ident:
            return None
        query = select(Project).where(or_(Project.id == ident, Project.project_id == ident))
        if status is not None:
            query = query.where(Project.status == status)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def resolve_project(self, ident: str, status: Optional[ProjectStatus] = None) -> Project:
        project = await self.find_project(ident, status)
        if not project:
            raise ProjectNotFoundError(ident)
        set_project_id(project.project_id)
        return project

    async def get_by_pk(self, pk: str) -> Project:
        """Admin lookup: primary key only"""
        if not is_uuid(pk):
            raise ProjectNotFoundError(pk)
        result = await self.db.execute(
            select(Project)
            .where(Project.id == pk)
            .execution_options(populate_existing=True)
        )
        project = result.scalar_one_or_none()
        if not project:
            raise ProjectNotFoundError(pk)
        set_project_id(project.project_id)
        return project

    async def _reload(self, pk: str) -> Project:
        # populate_existing refreshes counters and selectin collections in place
        result = await self.db.execute(
            select(Project)
            .where(Project.id == pk)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # ========== Upload ==========

    async def upload_project(self, upload: Optional[UploadFile], fields: Dict[str, Any]) -> Project:
        """
        Store the PDF and create a pending project.

        The file is written first; any later failure (type, metadata,
        database) removes it again before the error propagates.
        """
        if upload is None or not upload.filename:
            raise ValidationFailedError("No PDF file uploaded", field="file")

        stored = await self.storage.save_upload(upload, max_size=settings.MAX_FILE_SIZE)

        try:
            if not is_pdf_file(stored.original_name, stored.content_type):
                raise InvalidFileTypeError(stored.original_name, stored.content_type)

            raw = {name: fields.get(name) for name in UPLOAD_FIELDS}
            try:
                data = ProjectCreate(**sanitize_fields(raw))
            except ValidationError as e:
                raise ValidationFailedError(first_error_message(e.errors()))

            project = Project(
                project_id=generate_project_id(),
                **data.model_dump(),
                file_path=stored.path,
                file_name=stored.original_name,
                file_size=stored.size,
                status=ProjectStatus.PENDING,
                ratings=[],
                comments=[],
            )
            self.db.add(project)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await self.storage.delete_file(stored.path)
            raise

        set_project_id(project.project_id)
        logger.log_project_event(
            "uploaded",
            project.project_id,
            title=project.title,
            file_size=project.file_size,
        )
        return project

    # ========== Listing & search ==========

    async def list_projects(self, status: ProjectStatus, page: int = 1, limit: Optional[int] = None) -> dict:
        """Paged projects in one status, newest upload first"""
        query = (
            select(Project)
            .where(Project.status == status)
            .order_by(Project.uploaded_at.desc(), Project.id)
        )
        return await paginate(self.db, query, page=page, limit=limit)

    async def search_projects(
        self,
        query: Optional[str] = None,
        year: Optional[int] = None,
        department: Optional[str] = None,
        author: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> dict:
        """
        Search approved projects.

        Any whitespace-separated term of ``query`` matching title, abstract or
        author (case-insensitive) selects a project; year and department are
        exact, author is a case-insensitive partial match.
        """
        conditions = [Project.status == ProjectStatus.APPROVED]

        terms = (query or "").split()
        if terms:
            term_matches = []
            for term in terms:
                pattern = f"%{escape_like(term)}%"
                term_matches.append(or_(
                    Project.title.ilike(pattern, escape="\\"),
                    Project.abstract.ilike(pattern, escape="\\"),
                    Project.author.ilike(pattern, escape="\\"),
                ))
            conditions.append(or_(*term_matches))

        if year is not None:
            conditions.append(Project.year == year)
        if department and department.strip():
            conditions.append(Project.department == department.strip())
        if author and author.strip():
            conditions.append(Project.author.ilike(f"%{escape_like(author.strip())}%", escape="\\"))

        stmt = (
            select(Project)
            .where(and_(*conditions))
            .order_by(Project.uploaded_at.desc(), Project.id)
        )
        return await paginate(self.db, stmt, page=page, limit=limit)

    # ========== Public reads ==========

    async def get_public_project(self, ident: str) -> Project:
        """Fetch an approved project and count the view"""
        project = await self.resolve_project(ident, ProjectStatus.APPROVED)
        await self.db.execute(
            update(Project)
            .where(Project.id == project.id)
            .values(views=Project.views + 1)
        )
        await self.db.commit()
        return await self._reload(project.id)

    async def prepare_download(self, ident: str) -> Project:
        """Resolve an approved project whose file exists and count the download"""
        project = await self.resolve_project(ident, ProjectStatus.APPROVED)
        if not await self.storage.file_exists(project.file_path):
            logger.warning(f"[ProjectService] File missing for {project.project_id}: {project.file_path}")
            raise ProjectFileMissingError(ident)

        await self.db.execute(
            update(Project)
            .where(Project.id == project.id)
            .values(downloads=Project.downloads + 1)
        )
        await self.db.commit()
        return await self._reload(project.id)

    # ========== Engagement ==========

    async def add_comment(self, ident: str, comment: CommentCreate) -> ProjectComment:
        """Append a comment. Accepted regardless of project status."""
        project = await self.resolve_project(ident)

        name = sanitize_input(comment.name)
        text = sanitize_input(comment.text)
        if not name:
            raise ValidationFailedError("Name is required", field="name")
        if not text:
            raise ValidationFailedError("Text is required", field="text")

        new_comment = ProjectComment(
            project_id=project.id,
            name=name,
            email=str(comment.email).strip().lower(),
            text=text,
        )
        self.db.add(new_comment)
        await self.db.commit()

        logger.info(f"[ProjectService] Comment added to {project.project_id}")
        return new_comment

    async def add_rating(self, ident: str, value: Any) -> Tuple[float, int]:
        """
        Append a 1-5 rating. Accepted regardless of project status.

        Returns (average rounded half-up to one decimal, total ratings).
        """
        try:
            value = validate_rating(value)
        except ValueError as e:
            raise ValidationFailedError(str(e), field="rating")

        project = await self.resolve_project(ident)
        self.db.add(ProjectRating(project_id=project.id, value=value))
        await self.db.commit()

        result = await self.db.execute(
            select(func.coalesce(func.sum(ProjectRating.value), 0), func.count(ProjectRating.id))
            .where(ProjectRating.project_id == project.id)
        )
        total, count = result.one()
        return average_from_totals(int(total), int(count)), int(count)

    # ========== Moderation ==========

    async def approve_project(self, pk: str) -> Project:
        project = await self.get_by_pk(pk)
        project.status = ProjectStatus.APPROVED
        await self.db.commit()
        logger.log_project_event("approved", project.project_id)
        return await self._reload(project.id)

    async def reject_project(self, pk: str) -> Project:
        """Mark rejected, then remove the PDF best-effort"""
        project = await self.get_by_pk(pk)
        project.status = ProjectStatus.REJECTED
        await self.db.commit()
        logger.log_project_event("rejected", project.project_id)

        await self.storage.delete_file(project.file_path)
        return await self._reload(project.id)

    async def delete_project(self, pk: str) -> None:
        """Remove the record (ratings and comments cascade), then the PDF best-effort"""
        project = await self.get_by_pk(pk)
        file_path = project.file_path
        public_id = project.project_id

        await self.db.delete(project)
        await self.db.commit()
        logger.log_project_event("deleted", public_id)

        await self.storage.delete_file(file_path)

    async def edit_project(self, pk: str, changes: ProjectUpdate) -> Project:
        """Partial update of title, abstract and supervisor"""
        project = await self.get_by_pk(pk)

        try:
            cleaned = ProjectUpdate(**sanitize_fields(changes.changes()))
        except ValidationError as e:
            raise ValidationFailedError(first_error_message(e.errors()))

        updates = cleaned.changes()
        for field, value in updates.items():
            setattr(project, field, value)

        if updates:
            await self.db.commit()
            logger.log_project_event("edited", project.project_id, fields=sorted(updates))
        return await self._reload(project.id)

    # ========== Stats ==========

    async def get_stats(self, top_limit: Optional[int] = None) -> dict:
        """Status counts, engagement totals and the most downloaded approved projects"""
        top_limit = top_limit or settings.TOP_PROJECTS_LIMIT

        counts = {status: 0 for status in ProjectStatus}
        result = await self.db.execute(
            select(Project.status, func.count(Project.id)).group_by(Project.status)
        )
        for status, count in result.all():
            counts[ProjectStatus(status)] = count

        totals = await self.db.execute(
            select(
                func.coalesce(func.sum(Project.views), 0),
                func.coalesce(func.sum(Project.downloads), 0),
            )
        )
        total_views, total_downloads = totals.one()

        top = await self.db.execute(
            select(Project)
            .where(Project.status == ProjectStatus.APPROVED)
            .order_by(Project.downloads.desc(), Project.views.desc(), Project.uploaded_at.desc())
            .limit(top_limit)
        )

        return {
            "total": sum(counts.values()),
            "approved": counts[ProjectStatus.APPROVED],
            "pending": counts[ProjectStatus.PENDING],
            "rejected": counts[ProjectStatus.REJECTED],
            "total_views": int(total_views),
            "total_downloads": int(total_downloads),
            "top_projects": list(top.scalars().all()),
        }

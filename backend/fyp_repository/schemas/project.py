from pydantic import EmailStr, field_validator, ValidationInfo
from typing import Any, List, Optional
from datetime import datetime

from fyp_repository.models.project import Department, ProjectStatus
from fyp_repository.schemas.common import CamelModel
from fyp_repository.utils.pagination import PaginationMeta

MIN_YEAR = 2000

# field -> (label, min length, max length)
TEXT_LIMITS = {
    "title": ("Title", 5, 200),
    "author": ("Author name", 3, 100),
    "abstract": ("Abstract", 50, 5000),
    "supervisor": ("Supervisor name", 3, 100),
}

DEPARTMENTS = [d.value for d in Department]


def _check_length(field: str, value: str) -> str:
    label, min_len, max_len = TEXT_LIMITS[field]
    if len(value) < min_len:
        raise ValueError(f"{label} must be at least {min_len} characters")
    if len(value) > max_len:
        raise ValueError(f"{label} cannot exceed {max_len} characters")
    return value


def _label(field: str) -> str:
    return TEXT_LIMITS.get(field, (field.capitalize(),))[0]


# ==================== Requests ====================

class ProjectCreate(CamelModel):
    """Metadata submitted with an upload"""
    title: str
    author: str
    department: str
    year: int
    abstract: str
    supervisor: str

    @field_validator("title", "author", "department", "abstract", "supervisor", mode="before")
    @classmethod
    def required_text(cls, v: Any, info: ValidationInfo) -> str:
        if v is None or not str(v).strip():
            raise ValueError(f"{_label(info.field_name)} is required")
        return str(v).strip()

    @field_validator("title", "author", "abstract", "supervisor")
    @classmethod
    def text_length(cls, v: str, info: ValidationInfo) -> str:
        return _check_length(info.field_name, v)

    @field_validator("department")
    @classmethod
    def known_department(cls, v: str) -> str:
        if v not in DEPARTMENTS:
            raise ValueError(f"Department must be one of: {', '.join(DEPARTMENTS)}")
        return v

    @field_validator("year", mode="before")
    @classmethod
    def parse_year(cls, v: Any) -> int:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Year is required")
        if isinstance(v, bool):
            raise ValueError("Year must be a valid number")
        try:
            return int(str(v).strip())
        except ValueError:
            raise ValueError("Year must be a valid number")

    @field_validator("year")
    @classmethod
    def year_range(cls, v: int) -> int:
        if v < MIN_YEAR:
            raise ValueError(f"Year must be {MIN_YEAR} or later")
        if v > datetime.utcnow().year:
            raise ValueError("Year cannot be in the future")
        return v


class ProjectUpdate(CamelModel):
    """Admin edit. Only these three fields are editable; blanks are ignored."""
    title: Optional[str] = None
    abstract: Optional[str] = None
    supervisor: Optional[str] = None

    @field_validator("title", "abstract", "supervisor", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("title", "abstract", "supervisor")
    @classmethod
    def text_length(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None:
            return v
        return _check_length(info.field_name, v)

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True, by_alias=False)


class CommentCreate(CamelModel):
    name: str
    email: EmailStr
    text: str

    @field_validator("name", "text", mode="before")
    @classmethod
    def required_text(cls, v: Any, info: ValidationInfo) -> str:
        if v is None or not str(v).strip():
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return str(v).strip()

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        if len(v) > 100:
            raise ValueError("Name cannot exceed 100 characters")
        return v

    @field_validator("text")
    @classmethod
    def text_length(cls, v: str) -> str:
        if len(v) > 2000:
            raise ValueError("Comment cannot exceed 2000 characters")
        return v


RATING_ERROR = "Rating must be an integer between 1 and 5"


def validate_rating(value: Any) -> int:
    """Integers 1..5 only; bools and fractional numbers are rejected"""
    if isinstance(value, bool):
        raise ValueError(RATING_ERROR)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(RATING_ERROR)
        value = int(value)
    if not isinstance(value, int) or not 1 <= value <= 5:
        raise ValueError(RATING_ERROR)
    return value


class RatingCreate(CamelModel):
    rating: int

    @field_validator("rating", mode="before")
    @classmethod
    def rating_range(cls, v: Any) -> int:
        return validate_rating(v)


# ==================== Responses ====================

class CommentResponse(CamelModel):
    id: str
    name: str
    email: str
    text: str
    created_at: datetime


class ProjectUploadResponse(CamelModel):
    project_id: str
    id: str
    title: str
    author: str
    status: ProjectStatus


class ProjectSummary(CamelModel):
    """List item. The stored file path is never exposed."""
    id: str
    project_id: str
    title: str
    author: str
    department: str
    year: int
    abstract: str
    supervisor: str
    file_name: str
    file_size: int
    status: ProjectStatus
    views: int
    downloads: int
    average_rating: float
    total_ratings: int
    uploaded_at: datetime


class ProjectDetail(ProjectSummary):
    ratings: List[int] = []
    comments: List[CommentResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("ratings", mode="before")
    @classmethod
    def rating_values(cls, v: Any) -> List[int]:
        return [getattr(r, "value", r) for r in (v or [])]


class ProjectListResponse(CamelModel):
    items: List[ProjectSummary]
    pagination: PaginationMeta


class RatingSummary(CamelModel):
    average_rating: float
    total_ratings: int


class TopProject(CamelModel):
    id: str
    project_id: str
    title: str
    author: str
    downloads: int
    views: int


class ProjectStats(CamelModel):
    total: int
    approved: int
    pending: int
    rejected: int
    total_views: int
    total_downloads: int
    top_projects: List[TopProject]

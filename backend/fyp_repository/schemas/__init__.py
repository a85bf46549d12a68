from fyp_repository.schemas.common import CamelModel, first_error_message
from fyp_repository.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    CommentCreate,
    RatingCreate,
    CommentResponse,
    ProjectUploadResponse,
    ProjectSummary,
    ProjectDetail,
    ProjectListResponse,
    RatingSummary,
    TopProject,
    ProjectStats,
)
from fyp_repository.schemas.admin import AdminLogin, AdminResponse, LoginResponse, AdminIdentity

from fyp_repository.models.project import Project, ProjectRating, ProjectComment, ProjectStatus, Department
from fyp_repository.models.admin import Admin, AdminRole

__all__ = [
    "Project",
    "ProjectRating",
    "ProjectComment",
    "ProjectStatus",
    "Department",
    "Admin",
    "AdminRole",
]

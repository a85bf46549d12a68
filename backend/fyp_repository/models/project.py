from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from fyp_repository.core.database import Base
from fyp_repository.core.types import GUID, generate_uuid
from fyp_repository.utils.helpers import calculate_average_rating


class ProjectStatus(str, enum.Enum):
    """Project lifecycle status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Department(str, enum.Enum):
    """Departments a project can be filed under"""
    SURVEYING_AND_GEOINFORMATICS = "Surveying & Geoinformatics"
    GEOINFORMATICS = "Geoinformatics"
    SURVEYING = "Surveying"
    CADASTRAL_SURVEY = "Cadastral Survey"
    OTHER = "Other"


class Project(Base):
    """Uploaded final-year project report and its metadata"""
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_year_status', 'year', 'status'),
        Index('ix_projects_department_status', 'department', 'status'),
        Index('ix_projects_status_uploaded_at', 'status', 'uploaded_at'),
        CheckConstraint('views >= 0', name='ck_projects_views_non_negative'),
        CheckConstraint('downloads >= 0', name='ck_projects_downloads_non_negative'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(String(40), unique=True, index=True, nullable=False)

    title = Column(String(200), nullable=False)
    author = Column(String(100), nullable=False, index=True)
    department = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    abstract = Column(Text, nullable=False)
    supervisor = Column(String(100), nullable=False)

    # Stored PDF (lives in UPLOAD_DIR, never in the row)
    file_path = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)

    status = Column(SQLEnum(ProjectStatus), default=ProjectStatus.PENDING, nullable=False, index=True)

    views = Column(Integer, default=0, nullable=False)
    downloads = Column(Integer, default=0, nullable=False)

    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Eager (selectin) so async code never triggers a lazy load
    ratings = relationship(
        "ProjectRating",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectRating.id",
        lazy="selectin",
    )
    comments = relationship(
        "ProjectComment",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectComment.created_at",
        lazy="selectin",
    )

    @property
    def rating_values(self):
        return [r.value for r in self.ratings]

    @property
    def average_rating(self) -> float:
        return calculate_average_rating(self.rating_values)

    @property
    def total_ratings(self) -> int:
        return len(self.ratings)

    def __repr__(self):
        return f"<Project {self.project_id} {self.status}>"


class ProjectRating(Base):
    """A single 1-5 star rating. Append-only."""
    __tablename__ = "project_ratings"

    __table_args__ = (
        CheckConstraint('value >= 1 AND value <= 5', name='ck_project_ratings_value_range'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="ratings")


class ProjectComment(Base):
    """Public comment on a project. Append-only."""
    __tablename__ = "project_comments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="comments")

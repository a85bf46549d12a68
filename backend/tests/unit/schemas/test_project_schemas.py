"""
Unit Tests for Project Schemas
Tests for: upload metadata, admin edits, comments, ratings, responses
"""
import pytest
from pydantic import ValidationError
from datetime import datetime

from fyp_repository.schemas.common import first_error_message
from fyp_repository.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    CommentCreate,
    RatingCreate,
    ProjectDetail,
    validate_rating,
)


def valid_metadata(**overrides) -> dict:
    data = {
        "title": "Cadastral Mapping With Drones",
        "author": "Kofi Mensah",
        "department": "Cadastral Survey",
        "year": "2023",
        "abstract": "x" * 50,
        "supervisor": "Dr. Asante",
    }
    data.update(overrides)
    return data


def message_for(**overrides) -> str:
    with pytest.raises(ValidationError) as exc_info:
        ProjectCreate(**valid_metadata(**overrides))
    return first_error_message(exc_info.value.errors())


class TestProjectCreate:
    """Test ProjectCreate schema"""

    def test_valid_project_create(self):
        project = ProjectCreate(**valid_metadata())

        assert project.title == "Cadastral Mapping With Drones"
        assert project.year == 2023

    def test_strings_are_trimmed(self):
        project = ProjectCreate(**valid_metadata(title="   Cadastral Mapping   ", author="  Ama  "))

        assert project.title == "Cadastral Mapping"
        assert project.author == "Ama"

    def test_abstract_minimum_length(self):
        assert message_for(abstract="x" * 49) == "Abstract must be at least 50 characters"
        assert ProjectCreate(**valid_metadata(abstract="x" * 50)).abstract == "x" * 50

    def test_abstract_maximum_length(self):
        assert message_for(abstract="x" * 5001) == "Abstract cannot exceed 5000 characters"

    def test_title_length_limits(self):
        assert message_for(title="abcd") == "Title must be at least 5 characters"
        assert message_for(title="t" * 201) == "Title cannot exceed 200 characters"

    def test_author_and_supervisor_length(self):
        assert message_for(author="Al") == "Author name must be at least 3 characters"
        assert message_for(supervisor="x" * 101) == "Supervisor name cannot exceed 100 characters"

    @pytest.mark.parametrize("field,label", [
        ("title", "Title"),
        ("author", "Author name"),
        ("abstract", "Abstract"),
        ("supervisor", "Supervisor name"),
        ("year", "Year"),
    ])
    def test_missing_fields(self, field, label):
        assert message_for(**{field: None}) == f"{label} is required"

    def test_blank_string_counts_as_missing(self):
        assert message_for(title="    ") == "Title is required"

    def test_all_departments_accepted(self):
        for department in [
            "Surveying & Geoinformatics",
            "Geoinformatics",
            "Surveying",
            "Cadastral Survey",
            "Other",
        ]:
            assert ProjectCreate(**valid_metadata(department=department)).department == department

    def test_unknown_department_rejected(self):
        assert message_for(department="Physics").startswith("Department must be one of")

    def test_year_bounds(self):
        current = datetime.utcnow().year

        assert ProjectCreate(**valid_metadata(year=2000)).year == 2000
        assert ProjectCreate(**valid_metadata(year=current)).year == current
        assert message_for(year=1999) == "Year must be 2000 or later"
        assert message_for(year=current + 1) == "Year cannot be in the future"

    def test_year_must_be_numeric(self):
        assert message_for(year="twenty") == "Year must be a valid number"


class TestProjectUpdate:
    """Test ProjectUpdate schema"""

    def test_partial_update(self):
        update = ProjectUpdate(title="A Brand New Title")

        assert update.changes() == {"title": "A Brand New Title"}

    def test_blank_values_ignored(self):
        update = ProjectUpdate(title="", abstract="   ", supervisor=None)

        assert update.changes() == {}

    def test_same_constraints_as_upload(self):
        with pytest.raises(ValidationError) as exc_info:
            ProjectUpdate(abstract="too short")

        assert first_error_message(exc_info.value.errors()) == "Abstract must be at least 50 characters"

    def test_other_fields_not_editable(self):
        update = ProjectUpdate(title="A Brand New Title", author="Someone Else")

        assert "author" not in update.changes()


class TestCommentCreate:

    def test_valid_comment(self):
        comment = CommentCreate(name=" Ama ", email="ama@university.edu", text=" Great work ")

        assert comment.name == "Ama"
        assert comment.text == "Great work"

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            CommentCreate(name="Ama", email="not-an-email", text="Great work")

    def test_text_limit(self):
        CommentCreate(name="Ama", email="ama@university.edu", text="x" * 2000)

        with pytest.raises(ValidationError):
            CommentCreate(name="Ama", email="ama@university.edu", text="x" * 2001)

    def test_name_required(self):
        with pytest.raises(ValidationError) as exc_info:
            CommentCreate(name="", email="ama@university.edu", text="Great work")

        assert first_error_message(exc_info.value.errors()) == "Name is required"


class TestRating:

    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5, 3.0])
    def test_valid_ratings(self, value):
        assert RatingCreate(rating=value).rating == int(value)

    @pytest.mark.parametrize("value", [0, 6, -1, 4.5, "4", True, None])
    def test_invalid_ratings(self, value):
        with pytest.raises(ValidationError) as exc_info:
            RatingCreate(rating=value)

        assert first_error_message(exc_info.value.errors()) == "Rating must be an integer between 1 and 5"

    def test_validate_rating_raises_value_error(self):
        with pytest.raises(ValueError):
            validate_rating(6)


class TestProjectDetail:

    def test_camel_case_output_without_file_path(self):
        detail = ProjectDetail(
            id="5f0c7d8e-0000-4000-8000-000000000000",
            project_id="PROJ_ABC_123456",
            title="Cadastral Mapping",
            author="Kofi Mensah",
            department="Surveying",
            year=2023,
            abstract="x" * 50,
            supervisor="Dr. Asante",
            file_name="report.pdf",
            file_size=1024,
            status="approved",
            views=3,
            downloads=1,
            average_rating=4.5,
            total_ratings=2,
            uploaded_at=datetime.utcnow(),
            ratings=[4, 5],
        )

        dumped = detail.model_dump(by_alias=True, mode="json")

        assert dumped["projectId"] == "PROJ_ABC_123456"
        assert dumped["averageRating"] == 4.5
        assert dumped["status"] == "approved"
        assert dumped["ratings"] == [4, 5]
        assert "filePath" not in dumped
        assert "file_path" not in dumped


def test_first_error_message_for_missing_field():
    errors = [{"type": "missing", "loc": ("body", "rating"), "msg": "Field required"}]

    assert first_error_message(errors) == "rating is required"


def test_first_error_message_strips_value_error_prefix():
    errors = [{"type": "value_error", "loc": ("body", "x"), "msg": "Value error, Title is required"}]

    assert first_error_message(errors) == "Title is required"

from pathlib import Path

import pytest
from httpx import AsyncClient

from fyp_repository.models.project import ProjectStatus

ADMIN = "/api/v1/admin"
PUBLIC = "/api/v1/projects"


@pytest.mark.asyncio
async def test_pending_list(client: AsyncClient, admin_auth_headers, create_project):
    pending = await create_project(status=ProjectStatus.PENDING)
    await create_project()

    response = await client.get(f"{ADMIN}/pending", headers=admin_auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Pending projects retrieved"
    assert [i["id"] for i in body["data"]["items"]] == [pending.id]
    assert body["data"]["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_approve_makes_project_public(client: AsyncClient, admin_auth_headers, create_project):
    project = await create_project(status=ProjectStatus.PENDING)

    response = await client.patch(f"{ADMIN}/{project.id}/approve", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Project approved successfully"
    assert response.json()["data"]["status"] == "approved"

    public = await client.get(f"{PUBLIC}/{project.project_id}")
    assert public.status_code == 200


@pytest.mark.asyncio
async def test_reject_hides_project_and_removes_file(client: AsyncClient, admin_auth_headers, create_project):
    project = await create_project(status=ProjectStatus.PENDING)

    response = await client.patch(f"{ADMIN}/{project.id}/reject", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Project rejected"
    assert response.json()["data"]["status"] == "rejected"
    assert not Path(project.file_path).exists()

    public = await client.get(f"{PUBLIC}/{project.project_id}")
    assert public.status_code == 404


@pytest.mark.asyncio
async def test_upload_then_approve_flow(client: AsyncClient, admin_auth_headers, project_form, pdf_bytes):
    """Uploaded projects appear publicly only after approval"""
    upload = await client.post(
        f"{PUBLIC}/upload",
        data=project_form,
        files={"file": ("thesis.pdf", pdf_bytes, "application/pdf")},
    )
    pk = upload.json()["data"]["id"]

    pending = await client.get(f"{ADMIN}/pending", headers=admin_auth_headers)
    assert [i["id"] for i in pending.json()["data"]["items"]] == [pk]

    await client.patch(f"{ADMIN}/{pk}/approve", headers=admin_auth_headers)

    listing = await client.get(f"{PUBLIC}/approved")
    assert [i["id"] for i in listing.json()["data"]["items"]] == [pk]

    download = await client.post(f"{PUBLIC}/{pk}/download")
    assert download.status_code == 200
    assert download.content == pdf_bytes


@pytest.mark.asyncio
async def test_edit_partial(client: AsyncClient, admin_auth_headers, create_project):
    project = await create_project(supervisor="Prof. Mensah")
    original_abstract = project.abstract

    response = await client.patch(
        f"{ADMIN}/{project.id}",
        headers=admin_auth_headers,
        json={"title": "Revised Cadastral Survey Title"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Revised Cadastral Survey Title"
    assert data["supervisor"] == "Prof. Mensah"
    assert data["abstract"] == original_abstract


@pytest.mark.asyncio
async def test_edit_validation(client: AsyncClient, admin_auth_headers, create_project):
    project = await create_project()

    response = await client.patch(
        f"{ADMIN}/{project.id}",
        headers=admin_auth_headers,
        json={"abstract": "too short"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Abstract must be at least 50 characters"


@pytest.mark.asyncio
async def test_delete_project(client: AsyncClient, admin_auth_headers, create_project):
    project = await create_project()
    pk, file_path = project.id, project.file_path
    await client.post(f"{PUBLIC}/{pk}/ratings", json={"rating": 5})

    response = await client.delete(f"{ADMIN}/{pk}", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Project deleted successfully"
    assert not Path(file_path).exists()

    again = await client.delete(f"{ADMIN}/{pk}", headers=admin_auth_headers)
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_admin_lookup_by_public_id_not_found(client: AsyncClient, admin_auth_headers, create_project):
    project = await create_project(status=ProjectStatus.PENDING)

    response = await client.patch(f"{ADMIN}/{project.project_id}/approve", headers=admin_auth_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Project not found"


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, admin_auth_headers, create_project):
    top = await create_project(downloads=7, views=20)
    await create_project(downloads=1, views=3)
    await create_project(status=ProjectStatus.PENDING)

    response = await client.get(f"{ADMIN}/stats", headers=admin_auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Stats retrieved successfully"
    data = body["data"]
    assert data["total"] == 3
    assert data["approved"] == 2
    assert data["pending"] == 1
    assert data["rejected"] == 0
    assert data["totalViews"] == 23
    assert data["totalDownloads"] == 8
    assert data["topProjects"][0]["id"] == top.id
    assert data["topProjects"][0]["downloads"] == 7


@pytest.mark.asyncio
async def test_pending_page_zero_served_as_first(client: AsyncClient, admin_auth_headers, create_project):
    pending = await create_project(status=ProjectStatus.PENDING)

    response = await client.get(f"{ADMIN}/pending", params={"page": 0}, headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["pagination"]["page"] == 1
    assert [i["id"] for i in response.json()["data"]["items"]] == [pending.id]

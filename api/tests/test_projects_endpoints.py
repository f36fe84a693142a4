"""
Tests for project, color and canvas endpoints.
"""
import pytest


@pytest.fixture
async def project_id(client):
    response = await client.post("/api/projects", json={"name": "Bedroom set", "description": "Walnut frame"})
    return response.json()["id"]


class TestProjectCrud:
    @pytest.mark.asyncio
    async def test_create_returns_camel_case_row(self, client):
        response = await client.post(
            "/api/projects", json={"name": "Bedroom set", "previewImageUrl": "/uploads/p.png"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Bedroom set"
        assert data["previewImageUrl"] == "/uploads/p.png"
        assert "createdAt" in data and "updatedAt" in data

    @pytest.mark.asyncio
    async def test_empty_name_is_rejected(self, client):
        response = await client.post("/api/projects", json={"name": ""})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"

    @pytest.mark.asyncio
    async def test_list(self, client, project_id):
        response = await client.get("/api/projects")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [project_id]

    @pytest.mark.asyncio
    async def test_detail_of_empty_project(self, client, project_id):
        response = await client.get(f"/api/projects/{project_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["project"]["description"] == "Walnut frame"
        assert data["images"] == []
        assert data["colorApplications"] == []

    @pytest.mark.asyncio
    async def test_partial_update(self, client, project_id):
        response = await client.put(f"/api/projects/{project_id}", json={"name": "Guest bedroom"})

        assert response.status_code == 200
        assert response.json()["name"] == "Guest bedroom"
        assert response.json()["description"] == "Walnut frame"

    @pytest.mark.asyncio
    async def test_null_name_is_rejected_and_name_kept(self, client, project_id):
        response = await client.put(f"/api/projects/{project_id}", json={"name": None})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"

        detail = (await client.get(f"/api/projects/{project_id}")).json()
        assert detail["project"]["name"] == "Bedroom set"

    @pytest.mark.asyncio
    async def test_clearing_description_is_allowed(self, client, project_id):
        response = await client.put(f"/api/projects/{project_id}", json={"description": None})

        assert response.status_code == 200
        assert response.json()["description"] is None

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, client, project_id):
        response = await client.delete(f"/api/projects/{project_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Project deleted successfully"}

        response = await client.get(f"/api/projects/{project_id}")
        assert response.status_code == 404
        assert response.json() == {"message": "Project not found"}

    @pytest.mark.asyncio
    async def test_add_image_with_dimensions(self, client, project_id):
        response = await client.post(
            f"/api/projects/{project_id}/images",
            json={"originalImagePath": "/uploads/a.png", "mimeType": "image/png", "width": 640, "height": 480},
        )

        assert response.status_code == 201
        assert response.json()["projectId"] == project_id

    @pytest.mark.asyncio
    async def test_add_image_rejects_zero_width(self, client, project_id):
        response = await client.post(
            f"/api/projects/{project_id}/images",
            json={"originalImagePath": "/uploads/a.png", "mimeType": "image/png", "width": 0, "height": 480},
        )

        assert response.status_code == 400


class TestColors:
    @pytest.mark.asyncio
    async def test_color_application_needs_existing_mask(self, client, project_id):
        response = await client.post(
            "/api/colors", json={"projectId": project_id, "maskId": "missing", "fillHex": "#FF0000"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_color_application_rejects_bad_hex(self, client, project_id):
        response = await client.post("/api/colors", json={"projectId": project_id, "maskId": "m", "fillHex": "red"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_recent_colors_round_trip(self, client, project_id):
        for hex_value in ("#FF0000", "#00FF00"):
            response = await client.post(
                "/api/recent-colors", json={"projectId": project_id, "hex": hex_value, "colorName": "swatch"}
            )
            assert response.status_code == 201

        response = await client.get("/api/recent-colors", params={"projectId": project_id})

        assert response.status_code == 200
        assert {c["hex"] for c in response.json()} == {"#FF0000", "#00FF00"}


class TestCanvas:
    @pytest.mark.asyncio
    async def test_save_and_load(self, client, project_id):
        response = await client.put(
            f"/api/projects/{project_id}/canvas", json={"canvasJson": {"objects": []}, "zoom": 1.5}
        )
        assert response.status_code == 200

        response = await client.get(f"/api/projects/{project_id}/canvas")

        assert response.json()["canvasJson"] == {"objects": []}
        assert response.json()["zoom"] == 1.5

    @pytest.mark.asyncio
    async def test_no_canvas_saved_yet(self, client, project_id):
        response = await client.get(f"/api/projects/{project_id}/canvas")

        assert response.status_code == 404


class TestServiceEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        response = await client.get("/health")

        assert "X-Request-ID" in response.headers

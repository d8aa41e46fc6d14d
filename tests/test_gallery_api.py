from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from tests.helpers import auth_headers, register_and_login, upload_image


class TestGalleryAPI:
    def test_create_gallery(self, authenticated_client: TestClient):
        response = authenticated_client.post("/api/galleries", json={"name": "Ink Studies", "description": "Brush work", "isPublic": False})
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Ink Studies"
        assert data["slug"] == "ink-studies"
        assert data["description"] == "Brush work"
        assert data["isPublic"] is False
        assert data["viewCount"] == 0

    def test_same_name_gets_suffix(self, authenticated_client: TestClient):
        first = authenticated_client.post("/api/galleries", json={"name": "Ink Studies"}).json()
        second = authenticated_client.post("/api/galleries", json={"name": "Ink Studies"}).json()
        assert first["slug"] == "ink-studies"
        assert second["slug"] == "ink-studies-1"

    @pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "   "}, {"name": "x" * 201}])
    def test_create_gallery_validation(self, authenticated_client: TestClient, payload):
        response = authenticated_client.post("/api/galleries", json=payload)
        assert response.status_code == 422

    def test_list_galleries_newest_first(self, authenticated_client: TestClient):
        authenticated_client.post("/api/galleries", json={"name": "First"})
        authenticated_client.post("/api/galleries", json={"name": "Second"})

        response = authenticated_client.get("/api/galleries")
        assert response.status_code == 200
        assert [g["name"] for g in response.json()] == ["Second", "First"]

    def test_list_only_own_galleries(self, authenticated_client: TestClient, gallery_id_fixture: str):
        token = register_and_login(authenticated_client, "other@example.com")
        response = authenticated_client.get("/api/galleries", headers=auth_headers(token))
        assert response.json() == []

    def test_get_gallery_detail(self, authenticated_client: TestClient):
        gallery = upload_image(authenticated_client, galleryName="Detail").json()["gallery"]

        response = authenticated_client.get(f"/api/galleries/{gallery['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["slug"] == "detail"
        assert len(data["items"]) == 1

    def test_get_gallery_not_found(self, authenticated_client: TestClient):
        response = authenticated_client.get(f"/api/galleries/{uuid4()}")
        assert response.status_code == 404

    def test_other_owner_gets_404(self, authenticated_client: TestClient, gallery_id_fixture: str):
        token = register_and_login(authenticated_client, "other@example.com")
        headers = auth_headers(token)
        assert authenticated_client.get(f"/api/galleries/{gallery_id_fixture}", headers=headers).status_code == 404
        assert authenticated_client.patch(f"/api/galleries/{gallery_id_fixture}", json={"name": "Mine"}, headers=headers).status_code == 404
        assert authenticated_client.delete(f"/api/galleries/{gallery_id_fixture}", headers=headers).status_code == 404

    def test_update_gallery(self, authenticated_client: TestClient, gallery_id_fixture: str):
        response = authenticated_client.patch(f"/api/galleries/{gallery_id_fixture}", json={"name": " Renamed ", "isPublic": False, "description": "New"})
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Renamed"
        assert data["isPublic"] is False
        assert data["description"] == "New"
        # Renaming does not move the public URL
        assert data["slug"] == "ink-studies"

    @pytest.mark.parametrize("payload", [{}, {"name": ""}, {"isPublic": None}])
    def test_update_gallery_validation(self, authenticated_client: TestClient, gallery_id_fixture: str, payload):
        response = authenticated_client.patch(f"/api/galleries/{gallery_id_fixture}", json=payload)
        assert response.status_code == 422

    def test_featured_item_must_belong_to_gallery(self, authenticated_client: TestClient):
        first = upload_image(authenticated_client, galleryName="One").json()
        second = upload_image(authenticated_client, galleryName="Two").json()
        gallery_id = first["gallery"]["id"]

        rejected = authenticated_client.patch(f"/api/galleries/{gallery_id}", json={"featuredItemId": second["item"]["id"]})
        assert rejected.status_code == 400

        accepted = authenticated_client.patch(f"/api/galleries/{gallery_id}", json={"featuredItemId": first["item"]["id"]})
        assert accepted.status_code == 200
        assert accepted.json()["featuredItemId"] == first["item"]["id"]

        cleared = authenticated_client.patch(f"/api/galleries/{gallery_id}", json={"featuredItemId": None})
        assert cleared.json()["featuredItemId"] is None

    def test_delete_gallery_removes_stored_objects(self, authenticated_client: TestClient, s3_client):
        body = upload_image(authenticated_client, galleryName="Doomed").json()
        (key,) = s3_client.objects

        response = authenticated_client.delete(f"/api/galleries/{body['gallery']['id']}")
        assert response.status_code == 204
        assert s3_client.deleted == [key]
        assert authenticated_client.get(f"/api/galleries/{body['gallery']['id']}").status_code == 404

    def test_delete_gallery_survives_storage_errors(self, authenticated_client: TestClient, s3_client, monkeypatch):
        body = upload_image(authenticated_client, galleryName="Doomed").json()

        async def broken_delete(keys):
            raise RuntimeError("storage unavailable")

        monkeypatch.setattr(s3_client, "delete_files", broken_delete)
        response = authenticated_client.delete(f"/api/galleries/{body['gallery']['id']}")
        assert response.status_code == 204

    def test_requires_authentication(self, client: TestClient, invalid_auth_headers, expired_auth_headers):
        assert client.get("/api/galleries").status_code == 401
        assert client.get("/api/galleries", headers=invalid_auth_headers).status_code == 401
        response = client.get("/api/galleries", headers=expired_auth_headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "Token expired"

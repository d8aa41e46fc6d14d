from uuid import uuid4

from fastapi.testclient import TestClient

from tests.helpers import auth_headers, register_and_login, upload_image

EXTERNAL_ITEM = {"title": "Borrowed", "imageUrl": "https://images.example.com/borrowed.png"}


class TestGalleryItemsAPI:
    def test_add_external_item(self, authenticated_client: TestClient, gallery_id_fixture: str):
        payload = {**EXTERNAL_ITEM, "tags": "ink, portrait", "altText": "alt", "isOriginalWork": False, "artistName": "Someone"}
        response = authenticated_client.post(f"/api/galleries/{gallery_id_fixture}/items", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Borrowed"
        assert data["tags"] == ["ink", "portrait"]
        assert data["isOriginalWork"] is False
        assert data["artistName"] == "Someone"

    def test_add_item_requires_title_and_url(self, authenticated_client: TestClient, gallery_id_fixture: str):
        assert authenticated_client.post(f"/api/galleries/{gallery_id_fixture}/items", json={"title": "x"}).status_code == 422
        assert authenticated_client.post(f"/api/galleries/{gallery_id_fixture}/items", json={"title": " ", "imageUrl": "u"}).status_code == 422

    def test_attribution_slug_must_exist(self, authenticated_client: TestClient, gallery_id_fixture: str):
        url = f"/api/galleries/{gallery_id_fixture}/items"
        missing = authenticated_client.post(url, json={**EXTERNAL_ITEM, "artistPortfolioSlug": "nobody-here"})
        assert missing.status_code == 400

        existing = authenticated_client.post(url, json={**EXTERNAL_ITEM, "artistPortfolioSlug": "jane-doe"})
        assert existing.status_code == 201

    def test_list_items(self, authenticated_client: TestClient, gallery_id_fixture: str):
        authenticated_client.post(f"/api/galleries/{gallery_id_fixture}/items", json=EXTERNAL_ITEM)
        response = authenticated_client.get(f"/api/galleries/{gallery_id_fixture}/items")
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_items_of_missing_gallery(self, authenticated_client: TestClient):
        assert authenticated_client.get(f"/api/galleries/{uuid4()}/items").status_code == 404

    def test_reorder(self, authenticated_client: TestClient, gallery_id_fixture: str):
        url = f"/api/galleries/{gallery_id_fixture}/items"
        ids = [authenticated_client.post(url, json={**EXTERNAL_ITEM, "title": title}).json()["id"] for title in ("a", "b", "c")]

        response = authenticated_client.patch(f"{url}/reorder", json={"order": [ids[2], str(uuid4()), ids[0], ids[1]]})
        assert response.status_code == 200
        assert response.json() == {"ok": True, "updated": 3}

        items = authenticated_client.get(url).json()
        assert [(item["title"], item["position"]) for item in items] == [("c", 1), ("a", 2), ("b", 3)]

    def test_reorder_empty_order(self, authenticated_client: TestClient, gallery_id_fixture: str):
        response = authenticated_client.patch(f"/api/galleries/{gallery_id_fixture}/items/reorder", json={"order": []})
        assert response.status_code == 400

    def test_update_item(self, authenticated_client: TestClient):
        item = upload_image(authenticated_client, title="Before").json()["item"]

        response = authenticated_client.patch(f"/api/gallery-items/{item['id']}", json={"title": "After", "tags": ["x", " y "], "position": 4})
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "After"
        assert data["tags"] == ["x", "y"]
        assert data["position"] == 4

    def test_update_item_rejects_null_title(self, authenticated_client: TestClient):
        item = upload_image(authenticated_client).json()["item"]
        assert authenticated_client.patch(f"/api/gallery-items/{item['id']}", json={"title": None}).status_code == 422

    def test_delete_item_removes_object(self, authenticated_client: TestClient, s3_client):
        item = upload_image(authenticated_client).json()["item"]
        (key,) = s3_client.objects

        response = authenticated_client.delete(f"/api/gallery-items/{item['id']}")
        assert response.status_code == 204
        assert s3_client.deleted == [key]

    def test_delete_external_item_leaves_storage_alone(self, authenticated_client: TestClient, gallery_id_fixture: str, s3_client):
        item = authenticated_client.post(f"/api/galleries/{gallery_id_fixture}/items", json=EXTERNAL_ITEM).json()
        assert authenticated_client.delete(f"/api/gallery-items/{item['id']}").status_code == 204
        assert s3_client.deleted == []

    def test_items_are_owner_only(self, authenticated_client: TestClient):
        item = upload_image(authenticated_client).json()["item"]
        headers = auth_headers(register_and_login(authenticated_client, "other@example.com"))

        assert authenticated_client.patch(f"/api/gallery-items/{item['id']}", json={"title": "Stolen"}, headers=headers).status_code == 404
        assert authenticated_client.delete(f"/api/gallery-items/{item['id']}", headers=headers).status_code == 404

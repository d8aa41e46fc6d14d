from fastapi.testclient import TestClient

from tests.helpers import upload_image


class TestPublicAPI:
    def test_public_gallery_listing(self, authenticated_client: TestClient):
        upload_image(authenticated_client, galleryName="Open")
        upload_image(authenticated_client, galleryName="Closed", isPublic="false")

        response = authenticated_client.get("/api/public/galleries")
        assert response.status_code == 200
        galleries = response.json()
        assert [g["slug"] for g in galleries] == ["open"]
        assert galleries[0]["artist"]["slug"] == "jane-doe"
        assert galleries[0]["artist"]["displayName"] == "Jane Doe"

    def test_public_gallery_detail_counts_views(self, authenticated_client: TestClient):
        first = upload_image(authenticated_client, title="First", galleryName="Open").json()
        upload_image(authenticated_client, title="Second", galleryName="Open")

        url = "/api/public/artists/jane-doe/galleries/open"
        response = authenticated_client.get(url)
        assert response.status_code == 200
        data = response.json()
        assert data["gallery"]["name"] == "Open"
        assert [item["title"] for item in data["items"]] == ["Second", "First"]

        authenticated_client.get(url)
        detail = authenticated_client.get(f"/api/galleries/{first['gallery']['id']}").json()
        assert detail["viewCount"] == 2

    def test_private_gallery_is_hidden(self, authenticated_client: TestClient):
        upload_image(authenticated_client, galleryName="Closed", isPublic="false")
        assert authenticated_client.get("/api/public/artists/jane-doe/galleries/closed").status_code == 404

    def test_unknown_artist_or_gallery(self, client: TestClient):
        assert client.get("/api/public/artists/nobody/galleries/anything").status_code == 404

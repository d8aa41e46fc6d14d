import io
from typing import cast

from fastapi.testclient import TestClient
from PIL import Image

from artfolio.email_service import EmailClient, EmailResult, EmailSettings


def register_and_login(client: TestClient, email: str, password: str = "Password123", display_name: str | None = None) -> str:
    """Register a user and return their access token."""
    payload = {"email": email, "password": password}
    if display_name:
        payload["displayName"] = display_name
    reg_response = client.post("/api/auth/register", json=payload)
    assert reg_response.status_code == 201

    login_response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert login_response.status_code == 200
    return cast(str, login_response.json()["tokens"]["accessToken"])


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def png_bytes(size: tuple[int, int] = (4, 4), color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def upload_image(
    client: TestClient,
    filename: str = "cat.png",
    content: bytes | None = None,
    content_type: str = "image/png",
    headers: dict[str, str] | None = None,
    **form: str,
):
    """POST one file to the gallery upload endpoint; ``form`` holds the camelCase fields."""
    data = png_bytes() if content is None else content
    return client.post("/api/galleries/upload", files={"file": (filename, data, content_type)}, data=form, headers=headers)


class FakeS3Client:
    """In-memory stand-in for AsyncS3Client."""

    def __init__(self, base_url: str = "https://cdn.example.com/artworks"):
        self.base_url = base_url
        self.objects: dict[str, tuple[bytes, str | None]] = {}
        self.deleted: list[str] = []
        self.fail_uploads = False

    async def upload_fileobj(self, file_obj, key: str, content_type: str | None = None, overwrite: bool = False) -> str:
        if self.fail_uploads:
            raise RuntimeError("storage unavailable")
        if key in self.objects and not overwrite:
            raise RuntimeError(f"Object {key} already exists")
        data = file_obj if isinstance(file_obj, bytes) else file_obj.read()
        self.objects[key] = (data, content_type)
        return key

    def get_public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def delete_file(self, key: str) -> None:
        self.objects.pop(key, None)
        self.deleted.append(key)

    async def delete_files(self, keys: list[str]) -> int:
        for key in keys:
            await self.delete_file(key)
        return len(keys)

    async def close(self) -> None:
        pass


class RecordingEmailClient(EmailClient):
    """EmailClient that keeps outgoing messages instead of calling Resend."""

    def __init__(self, settings: EmailSettings | None = None):
        super().__init__(settings=settings or EmailSettings())
        self.sent: list[dict[str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str, from_addr: str | None = None, log_prefix: str = "EMAIL TO SEND") -> EmailResult:
        if self.fail:
            return EmailResult(success=False, detail="email provider down")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return EmailResult(success=True, message_id=f"msg-{len(self.sent)}")

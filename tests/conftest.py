import os
from collections.abc import Generator
from datetime import UTC, datetime, timedelta

# Settings are read at import time, so the environment has to be ready first
os.environ.update(
    {
        "JWT_SECRET_KEY": "supersecretkey",
        "SUPERADMIN_EMAIL": "admin@example.com",
        "POSTGRES_DB": "artfolio",
        "POSTGRES_USER": "artfolio",
        "POSTGRES_PASSWORD": "artfolio",
        "POSTGRES_HOST": "localhost",
        "S3_PUBLIC_BASE_URL": "https://cdn.example.com",
        "APP_BASE_URL": "https://art.example.com",
    }
)
os.environ.pop("RESEND_API_KEY", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.engine.base import Engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.orm.session import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tests.helpers import FakeS3Client, RecordingEmailClient, register_and_login  # noqa: E402

SUPERADMIN_EMAIL = "admin@example.com"


@pytest.fixture(scope="function")
def engine() -> Generator[Engine]:
    """One in-memory SQLite database per test."""
    from artfolio.db import Base
    from artfolio.models import ArtistInvitation, Gallery, GalleryItem, User  # noqa: F401

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    # pysqlite needs these two hooks for SAVEPOINT to work and for FKs to be enforced
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine: Engine) -> Generator[Session]:
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture(scope="function")
def email_client() -> RecordingEmailClient:
    return RecordingEmailClient()


@pytest.fixture(scope="function")
def client(db_session: Session, s3_client: FakeS3Client, email_client: RecordingEmailClient) -> Generator[TestClient]:
    from artfolio.db import get_db
    from artfolio.dependencies import get_email_client, get_s3_client
    from artfolio.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_s3_client] = lambda: s3_client
    app.dependency_overrides[get_email_client] = lambda: email_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_user_data() -> dict[str, str]:
    return {"email": "jane@example.com", "password": "Password123", "displayName": "Jane Doe"}


@pytest.fixture(scope="function")
def authenticated_client(client: TestClient, test_user_data: dict[str, str]) -> Generator[TestClient]:
    """Client logged in as an artist whose public slug is ``jane-doe``."""
    token = register_and_login(client, test_user_data["email"], test_user_data["password"], test_user_data["displayName"])
    client.headers.update({"Authorization": f"Bearer {token}"})
    response = client.put("/api/me", json={"slug": "jane-doe"})
    assert response.status_code == 200
    yield client
    client.headers.clear()


@pytest.fixture(scope="function")
def superadmin_client(client: TestClient) -> Generator[TestClient]:
    token = register_and_login(client, SUPERADMIN_EMAIL, "Password123", "Site Admin")
    client.headers.update({"Authorization": f"Bearer {token}"})
    yield client
    client.headers.clear()


@pytest.fixture(scope="function")
def gallery_id_fixture(authenticated_client: TestClient) -> str:
    response = authenticated_client.post("/api/galleries", json={"name": "Ink Studies"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture(scope="function")
def invalid_auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer invalid_token"}


@pytest.fixture(scope="function")
def expired_auth_headers() -> dict[str, str]:
    import uuid

    import jwt

    from artfolio.auth_utils import authsettings

    payload = {"sub": str(uuid.uuid4()), "exp": datetime.now(UTC) - timedelta(days=1), "type": "access"}
    token = jwt.encode(payload, authsettings.jwt_secret_key, algorithm=authsettings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic_settings import BaseSettings, SettingsConfigDict

from artfolio.admin import setup_admin
from artfolio.api.admin import router as admin_router
from artfolio.api.analytics import router as analytics_router
from artfolio.api.auth import router as auth_router
from artfolio.api.gallery import router as gallery_router
from artfolio.api.gallery_items import router as gallery_items_router
from artfolio.api.public import router as public_router
from artfolio.api.signup import router as signup_router
from artfolio.api.uploads import router as uploads_router
from artfolio.api.user import router as user_router
from artfolio.auth_utils import authsettings
from artfolio.db import get_engine
from artfolio.email_service import EmailClient
from artfolio.image_codecs import register_optional_image_codecs
from artfolio.logging_config import configure_logging
from artfolio.metrics import setup_metrics
from artfolio.s3_service import AsyncS3Client

logger = logging.getLogger(__name__)


class AppSettings(BaseSettings):
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = "INFO"
    log_colors: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


appsettings = AppSettings()
configure_logging(level=appsettings.log_level, colors=appsettings.log_colors)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the storage and email clients on startup, close them on shutdown."""
    logger.info("Starting up application...")
    register_optional_image_codecs()
    app.state.s3_client = AsyncS3Client()
    app.state.email_client = EmailClient()
    if not app.state.email_client.enabled:
        logger.warning("RESEND_API_KEY not set, outgoing email will only be logged")

    yield

    logger.info("Shutting down application...")
    await app.state.s3_client.close()
    await app.state.email_client.close()


app = FastAPI(title="artfolio", redoc_url=None, redirect_slashes=False, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=appsettings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(signup_router)
app.include_router(user_router)
app.include_router(uploads_router)
app.include_router(gallery_router)
app.include_router(gallery_items_router)
app.include_router(public_router)
app.include_router(admin_router)
app.include_router(analytics_router)

setup_metrics(app)
setup_admin(app, get_engine(), secret_key=authsettings.jwt_secret_key)


@app.get("/")
def read_root():
    return {"message": "Hello from artfolio!"}

"""
Transactional email

``EmailClient`` talks to the Resend HTTP API through one shared
``httpx.AsyncClient``. It is constructed during application startup and
injected into handlers; sending never raises, every call returns an
``EmailResult`` so callers can treat notifications as non-fatal side effects.
Without an API key the message is written to the log instead.
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_templates_dir = os.path.join(os.path.dirname(__file__), "templates")
_jinja_env = Environment(
    loader=FileSystemLoader(_templates_dir),
    autoescape=select_autoescape(["html", "xml"]),
)


class EmailSettings(BaseSettings):
    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "The Arcade Art Gallery <noreply@artpop.vercel.app>"
    superadmin_email: str = "admin@artfolio.local"
    app_name: str = "The Arcade Art Gallery"
    app_base_url: str = "http://localhost:3000"
    timeout_seconds: float = 10.0
    # Send the superadmin a record copy of every new invitation
    invitation_copy_to_superadmin: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@dataclass(frozen=True)
class EmailResult:
    success: bool
    detail: str | None = None
    message_id: str | None = None


def render_email(template_name: str, settings: EmailSettings, **context) -> str:
    base = {"app_name": settings.app_name, "app_base_url": settings.app_base_url.rstrip("/")}
    base.update(context)
    return _jinja_env.get_template(template_name).render(**base)


class EmailClient:
    def __init__(self, settings: EmailSettings | None = None, http_client: httpx.AsyncClient | None = None):
        self.settings = settings or EmailSettings()
        self._http = http_client or httpx.AsyncClient(timeout=self.settings.timeout_seconds)

    @property
    def enabled(self) -> bool:
        return bool(self.settings.resend_api_key)

    async def send(self, to: str, subject: str, html: str, from_addr: str | None = None, log_prefix: str = "EMAIL TO SEND") -> EmailResult:
        sender = from_addr or self.settings.email_from

        if not self.enabled:
            logger.info("RESEND_API_KEY not set, logging email instead: %s from=%s to=%s subject=%s", log_prefix, sender, to, subject)
            logger.debug("%s html=%s", log_prefix, html)
            return EmailResult(success=True, detail="Email logged (no API key)")

        try:
            response = await self._http.post(
                self.settings.resend_api_url,
                headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
                json={"from": sender, "to": [to], "subject": subject, "html": html},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error("Email sending error (%s to %s): %s", log_prefix, to, e)
            return EmailResult(success=False, detail=str(e))
        except ValueError:
            # Accepted by the provider, but the body is not JSON
            logger.warning("Email sent to %s (%s) without a JSON response body", to, subject)
            return EmailResult(success=True)

        message_id = body.get("id") if isinstance(body, dict) else None
        logger.info("Email sent to %s (%s), id=%s", to, subject, message_id)
        return EmailResult(success=True, message_id=message_id)

    async def close(self) -> None:
        await self._http.aclose()


async def send_upload_failure_alert(
    client: EmailClient,
    *,
    route: str,
    reason: str,
    status: int | None = None,
    request_id: str | None = None,
    user_email: str | None = None,
    user_id: str | None = None,
    file_name: str | None = None,
    mime: str | None = None,
    size: int | None = None,
) -> EmailResult:
    """Tell the operator an upload failed. Best effort: never raises."""
    subject = f"Upload failed on {route} ({status or 'error'})"
    if request_id:
        subject += f" [{request_id}]"

    try:
        html = render_email(
            "upload_failure.html",
            client.settings,
            route=route,
            reason=reason,
            status=status,
            request_id=request_id,
            user_email=user_email,
            user_id=user_id,
            file_name=file_name,
            mime=mime,
            size=size,
        )
    except Exception as e:
        logger.error("Failed to render upload failure alert: %s", e)
        return EmailResult(success=False, detail=str(e))

    return await client.send(client.settings.superadmin_email, subject, html, log_prefix="[UPLOAD FAILURE ALERT]")


def invitation_link(settings: EmailSettings, token: str) -> str:
    return f"{settings.app_base_url.rstrip('/')}/signup?token={token}"


async def send_invitation_email(client: EmailClient, *, email: str, token: str, custom_message: str | None = None, is_resend: bool = False) -> EmailResult:
    settings = client.settings
    subject = f"{'Reminder: ' if is_resend else ''}You're invited to join {settings.app_name}"
    html = render_email(
        "invitation.html",
        settings,
        invite_link=invitation_link(settings, token),
        custom_message=custom_message,
        is_resend=is_resend,
    )
    return await client.send(email, subject, html, log_prefix="[ARTIST INVITATION]")


async def send_invitation_copy(client: EmailClient, *, email: str, token: str, custom_message: str | None = None) -> EmailResult | None:
    """Record copy of a new invitation for the superadmin; None when disabled."""
    settings = client.settings
    if not settings.invitation_copy_to_superadmin:
        return None
    html = render_email(
        "invitation_copy.html",
        settings,
        recipient=email,
        invite_link=invitation_link(settings, token),
        custom_message=custom_message,
    )
    return await client.send(settings.superadmin_email, f"[COPY] Artist Invitation Sent to {email}", html, log_prefix="[SUPERUSER COPY]")


def password_reset_link(settings: EmailSettings, token: str, email: str) -> str:
    query = urlencode({"token": token, "email": email})
    return f"{settings.app_base_url.rstrip('/')}/auth/reset-password?{query}"


async def send_password_reset_email(client: EmailClient, *, email: str, token: str, expire_minutes: int) -> EmailResult:
    settings = client.settings
    html = render_email(
        "password_reset.html",
        settings,
        reset_link=password_reset_link(settings, token, email),
        expire_minutes=expire_minutes,
    )
    return await client.send(email, f"Reset Your Password - {settings.app_name}", html, log_prefix="[PASSWORD RESET]")

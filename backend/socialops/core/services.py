from dataclasses import dataclass

from fastapi import Request

from socialops.billing.stripe_client import StripeClient
from socialops.core.config import Settings
from socialops.integrations.google_drive import GoogleDriveOAuth
from socialops.integrations.linkedin import LinkedInOAuth


@dataclass
class Services:
    """Outbound clients shared by all requests, built once at startup."""

    google_drive: GoogleDriveOAuth
    linkedin: LinkedInOAuth
    stripe: StripeClient | None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        timeout = settings.OUTBOUND_HTTP_TIMEOUT
        base = settings.APP_BASE_URL
        stripe = None
        if settings.STRIPE_SECRET_KEY:
            stripe = StripeClient(
                settings.STRIPE_SECRET_KEY,
                api_version=settings.STRIPE_API_VERSION,
                timeout=timeout,
            )
        return cls(
            google_drive=GoogleDriveOAuth(
                client_id=settings.GOOGLE_DRIVE_CLIENT_ID,
                client_secret=settings.GOOGLE_DRIVE_CLIENT_SECRET,
                redirect_uri=f"{base}/api/integrations/google-drive/callback",
                timeout=timeout,
            ),
            linkedin=LinkedInOAuth(
                client_id=settings.LINKEDIN_CLIENT_ID,
                client_secret=settings.LINKEDIN_CLIENT_SECRET,
                redirect_uri=f"{base}/api/integrations/linkedin/callback",
                timeout=timeout,
            ),
            stripe=stripe,
        )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.settings

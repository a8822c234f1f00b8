import logging
from dataclasses import dataclass

from socialops.core.http import request_json
from socialops.integrations.oauth import OAuthProvider

logger = logging.getLogger(__name__)

USERINFO_URL = "https://api.linkedin.com/v2/userinfo"
ORGANIZATION_ACLS_URL = (
    "https://api.linkedin.com/v2/organizationalEntityAcls"
    "?q=roleAssignee&projection=(elements*(organizationalTarget~(localizedName,vanityName)))"
)
API_VERSION = "202401"
ADMINISTRATOR = "ADMINISTRATOR"


@dataclass(frozen=True)
class LinkedInProfile:
    id: str
    first_name: str
    last_name: str
    vanity_name: str = ""
    picture: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class LinkedInOrganization:
    """A company page the member holds a role on."""

    id: str
    name: str
    urn: str
    role: str = ""


class LinkedInOAuth(OAuthProvider):
    name = "LinkedIn"
    authorize_endpoint = "https://www.linkedin.com/oauth/v2/authorization"
    token_endpoint = "https://www.linkedin.com/oauth/v2/accessToken"
    scopes = ("r_liteprofile", "w_member_social")
    default_expires_in = 60 * 24 * 60 * 60

    def fetch_profile(self, access_token: str) -> LinkedInProfile:
        data = request_json(
            USERINFO_URL,
            provider=self.name,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=self.timeout,
        )
        full_name = (data.get("name") or "").split(" ")
        return LinkedInProfile(
            id=str(data.get("sub") or ""),
            first_name=data.get("given_name") or full_name[0],
            last_name=data.get("family_name") or " ".join(full_name[1:]),
            vanity_name=data.get("vanityName") or "",
            picture=data.get("picture"),
        )

    def fetch_organizations(self, access_token: str) -> list[LinkedInOrganization]:
        data = request_json(
            ORGANIZATION_ACLS_URL,
            provider=self.name,
            headers={
                "Authorization": f"Bearer {access_token}",
                "LinkedIn-Version": API_VERSION,
            },
            timeout=self.timeout,
        )
        organizations = []
        for element in data.get("elements") or []:
            target = element.get("organizationalTarget~") or {}
            org_id = target.get("id")
            if not org_id:
                continue
            role = element.get("role") or ""
            if role != ADMINISTRATOR:
                # posting on behalf of the page may still fail
                logger.warning("LinkedIn organization %s has role=%s", org_id, role or "unknown")
            organizations.append(
                LinkedInOrganization(
                    id=str(org_id),
                    name=target.get("localizedName") or "",
                    urn=element.get("organizationalTarget") or f"urn:li:organization:{org_id}",
                    role=role,
                )
            )
        return organizations

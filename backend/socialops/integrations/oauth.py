from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import urlencode

from socialops.core.errors import Misconfigured, UpstreamFailure
from socialops.core.http import request_json


@dataclass(frozen=True)
class OAuthTokens:
    access_token: str
    refresh_token: str | None
    expires_at: datetime


class OAuthProvider:
    """Authorization-code flow shared by the Google Drive and LinkedIn connectors."""

    name = "OAuth"
    authorize_endpoint = ""
    token_endpoint = ""
    scopes: tuple[str, ...] = ()
    extra_auth_params: dict[str, str] = {}
    default_expires_in = 3600

    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str,
        timeout: int = 10,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _require_config(self) -> None:
        if not self.configured:
            raise Misconfigured(f"{self.name} client credentials not configured")

    def authorization_url(self, state: str) -> str:
        self._require_config()
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.scopes),
            "state": state,
            **self.extra_auth_params,
        }
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    def exchange_code(self, code: str) -> OAuthTokens:
        return self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            }
        )

    def refresh(self, refresh_token: str) -> OAuthTokens:
        tokens = self._token_request({"grant_type": "refresh_token", "refresh_token": refresh_token})
        if tokens.refresh_token is None:
            # providers may omit it when the old one stays valid
            return OAuthTokens(tokens.access_token, refresh_token, tokens.expires_at)
        return tokens

    def _token_request(self, form: dict[str, str]) -> OAuthTokens:
        self._require_config()
        payload = request_json(
            self.token_endpoint,
            provider=self.name,
            method="POST",
            form={**form, "client_id": self.client_id, "client_secret": self.client_secret},
            timeout=self.timeout,
        )
        access_token = payload.get("access_token")
        if not access_token:
            raise UpstreamFailure(f"{self.name} did not return an access token")
        expires_in = int(payload.get("expires_in") or self.default_expires_in)
        return OAuthTokens(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or None,
            expires_at=datetime.utcnow() + timedelta(seconds=expires_in),
        )

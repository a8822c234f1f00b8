from dataclasses import dataclass

from socialops.core.http import request_json

STRIPE_API_BASE = "https://api.stripe.com/v1"


@dataclass(frozen=True)
class StripeAccount:
    id: str
    email: str | None
    country: str | None


class StripeClient:
    def __init__(self, secret_key: str, *, api_version: str, timeout: int = 10):
        self.secret_key = secret_key
        self.api_version = api_version
        self.timeout = timeout

    @property
    def test_mode(self) -> bool:
        return self.secret_key.startswith("sk_test_")

    def _get(self, path: str) -> dict:
        return request_json(
            f"{STRIPE_API_BASE}{path}",
            provider="Stripe",
            headers={
                "Authorization": f"Bearer {self.secret_key}",
                "Stripe-Version": self.api_version,
            },
            timeout=self.timeout,
        )

    def retrieve_account(self) -> StripeAccount:
        data = self._get("/account")
        return StripeAccount(id=data.get("id", ""), email=data.get("email"), country=data.get("country"))

from pydantic import BaseModel, Field, field_validator

from socialops.billing.plans import SUBSCRIPTION_PLANS


class PlanLimits(BaseModel):
    posts: int = Field(ge=1)
    users: int = Field(ge=1)
    aiCredits: int = Field(ge=1)


class PricingPlanUpsertRequest(BaseModel):
    planId: str
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: int = Field(ge=0)
    priceDisplay: str = Field(min_length=1, max_length=64)
    limits: PlanLimits
    features: list[str] = Field(min_length=1)
    isActive: bool = True
    isPopular: bool = False

    @field_validator("planId")
    @classmethod
    def _known_plan(cls, value: str) -> str:
        value = (value or "").strip().upper()
        if value not in SUBSCRIPTION_PLANS:
            raise ValueError(f"Unknown plan: {value}")
        return value

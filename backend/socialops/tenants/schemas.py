from pydantic import BaseModel, Field, field_validator


def _clean_domain(value: str | None) -> str | None:
    if value is None:
        return value
    value = value.strip().lower()
    return value or None


class TenantCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    domain: str | None = Field(default=None, max_length=255)
    website: str | None = Field(default=None, max_length=1024)
    industry: str | None = Field(default=None, max_length=255)
    description: str | None = None
    logo: str | None = Field(default=None, max_length=1024)

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Tenant name is required")
        return value

    @field_validator("domain")
    @classmethod
    def _domain(cls, value: str | None) -> str | None:
        return _clean_domain(value)


class TenantUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    domain: str | None = Field(default=None, max_length=255)
    website: str | None = Field(default=None, max_length=1024)
    industry: str | None = Field(default=None, max_length=255)
    description: str | None = None
    logo: str | None = Field(default=None, max_length=1024)

    @field_validator("domain")
    @classmethod
    def _domain(cls, value: str | None) -> str | None:
        return _clean_domain(value)

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        # name is NOT NULL; null means "leave as is"
        if data.get("name") is None:
            data.pop("name", None)
        return data

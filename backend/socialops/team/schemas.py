from pydantic import BaseModel, EmailStr, Field


class InviteRequest(BaseModel):
    email: EmailStr
    role: str = Field(min_length=1, max_length=32)


class AcceptInvitationRequest(BaseModel):
    token: str = Field(min_length=16, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    # bcrypt hard limit = 72 bytes
    password: str = Field(min_length=8, max_length=72)

from datetime import datetime

from pydantic import BaseModel, Field


class SignInRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    expires_at: datetime


class CredentialStatusResponse(BaseModel):
    provider: str
    model: str
    ambient_configured: bool
    override_supplied: bool
    ready: bool

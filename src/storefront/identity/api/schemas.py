"""Pydantic request/response schemas for the auth endpoints."""

from pydantic import BaseModel, Field


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str
    name: str | None = Field(default=None, max_length=255)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"email": "jane@example.com", "password": "s3cret-pass", "name": "Jane"},
            ]
        }
    }


class SignInRequest(BaseModel):
    email: str
    password: str


class PrincipalResponse(BaseModel):
    id: str
    email: str
    name: str | None = None
    is_admin: bool = False


class SessionResponse(BaseModel):
    token: str
    user: PrincipalResponse


class SignOutResponse(BaseModel):
    signed_out: bool
    carts_cleared: int = 0

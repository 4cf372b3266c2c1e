# user models: oauth login and session responses

from typing import Optional, Literal
from pydantic import BaseModel, Field

Provider = Literal["google", "naver"]


class OAuthLogin(BaseModel):
    """provider access token (or google id token) handed over by the client"""
    access_token: str = Field("", alias="accessToken")

    model_config = {"populate_by_name": True}


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    avatar: Optional[str] = None
    provider: Provider
    created_at: Optional[str] = Field(None, alias="createdAt")
    last_login_at: Optional[str] = Field(None, alias="lastLoginAt")

    model_config = {"populate_by_name": True}


class LoginResponse(BaseModel):
    success: bool = True
    user: UserResponse
    message: str
    access_token: str = Field(..., alias="accessToken")
    token_type: str = "bearer"

    model_config = {"populate_by_name": True}


class SessionResponse(BaseModel):
    success: bool = True
    user: UserResponse
    message: str = ""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from muweb.enums import NewsStatus


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Request models
class RegisterRequest(RequestModel):
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")


class LoginRequest(RequestModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordRequest(RequestModel):
    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


class UpdateProfileRequest(RequestModel):
    email: Optional[str] = None


class AdminLoginRequest(RequestModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AccountUpdateRequest(RequestModel):
    blocked: Optional[bool] = None
    activated: Optional[bool] = None
    web_admin: Optional[int] = None
    gm_level: Optional[int] = None


class NewsRequest(RequestModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    status: Optional[NewsStatus] = None
    featured: bool = False
    image_url: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class BroadcastRequest(RequestModel):
    message: Optional[str] = None
    type: Optional[str] = "notice"

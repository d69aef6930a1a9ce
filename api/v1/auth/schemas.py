from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# -----------------------------
#  Provider tokens
# -----------------------------

class StoreTokenRequest(BaseModel):
    user_id: str
    provider_token: str = Field(..., min_length=1)
    provider_refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(None, gt=0, description="Access token lifetime in seconds")


class DriveStatus(BaseModel):
    connected: bool
    email: Optional[str] = None
    name: Optional[str] = None
    reason: Optional[str] = None
    message: Optional[str] = None

# -----------------------------
#  Profile
# -----------------------------

class SyncProfileRequest(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = None
    school_name: Optional[str] = None
    specialization: Optional[str] = None
    job_title: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    school_name: Optional[str] = None
    specialization: Optional[str] = None
    job_title: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime
    updated_at: datetime

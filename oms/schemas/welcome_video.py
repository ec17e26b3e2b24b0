from datetime import datetime

from pydantic import AnyUrl, BaseModel, Field


class WelcomeVideoIn(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    youtube_url: AnyUrl
    is_active: bool = True


class WelcomeVideoOut(BaseModel):
    id: str
    title: str
    description: str | None
    youtube_url: str
    is_active: bool
    created_by_email: str | None
    created_at: datetime
    updated_at: datetime

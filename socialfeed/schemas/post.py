from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class PostCreated(BaseModel):
    message: str
    post_id: int

class PostOut(BaseModel):
    id: int
    user_id: int
    content: str
    image_url: Optional[str] = None
    created_at: datetime
    username: str
    full_name: Optional[str] = None
    profile_picture: Optional[str] = None
    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False

class LikeToggled(BaseModel):
    message: str
    liked: bool
    likes_count: int

from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class CommentCreate(BaseModel):
    content: Optional[str] = None

class CommentCreated(BaseModel):
    message: str
    comment_id: int

class CommentOut(BaseModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime
    username: str
    full_name: Optional[str] = None
    profile_picture: Optional[str] = None

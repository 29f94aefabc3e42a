from datetime import datetime
from pydantic import BaseModel, EmailStr
from typing import Optional

class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str
    full_name: Optional[str] = None

class UserLogin(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: int
    username: str
    email: EmailStr
    full_name: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None

    class Config:
        from_attributes = True

class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut


# Card shown in followers/following lists, search results and suggestions
class UserSummary(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    profile_picture: Optional[str] = None
    is_following: bool = False

class ProfileOut(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: datetime
    posts_count: int
    followers_count: int
    following_count: int
    is_following: bool

class ProfileUpdated(BaseModel):
    message: str
    user: UserOut

class FollowToggled(BaseModel):
    message: str
    following: bool

from pydantic import BaseModel
from typing import Optional

class TokenData(BaseModel):
    user_id: int
    username: Optional[str] = None

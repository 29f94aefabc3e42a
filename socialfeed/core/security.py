from passlib.context import CryptContext
from jose import jwt, JWTError
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from socialfeed.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_DAYS
from socialfeed.core.errors import AuthError
from socialfeed.schemas.token import TokenData
from socialfeed.db.session import get_db
from socialfeed.db.models.user import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_user_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "username": user.username})


def verify_token(token: str) -> TokenData:
    """Check signature and expiry only; the store is never consulted here."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthError()

    subject = payload.get("sub")
    if subject is None:
        raise AuthError()
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthError()
    return TokenData(user_id=user_id, username=payload.get("username"))


def get_current_user_id(token: str = Depends(oauth2_scheme)) -> int:
    return verify_token(token).user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        # token outlived its account
        raise AuthError("User not found")
    return user

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.crud import user as crud
from socialfeed.core.errors import AuthError, ConflictError, InputValidationError, StoreError
from socialfeed.core.security import hash_password, verify_password, create_user_token
from socialfeed.db.session import get_db
from socialfeed.schemas.user import AuthResponse, UserCreate, UserLogin, UserOut


router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    username = user_in.username.strip()
    if not username or not user_in.password:
        raise InputValidationError("All fields are required")

    email = str(user_in.email)
    if crud.is_taken(db, username, email):
        raise ConflictError()

    try:
        new_user = crud.create_user(
            db,
            username=username,
            email=email,
            password_hash=hash_password(user_in.password),
            full_name=user_in.full_name,
        )
    except IntegrityError:
        # lost a race with a registration for the same username or email
        raise ConflictError()
    except SQLAlchemyError as e:
        logging.error(f"Database error: {str(e)}")
        raise StoreError("Registration failed")

    logging.info(f"New user registered: {new_user.username} (id={new_user.id})")
    return AuthResponse(
        message="User registered successfully",
        token=create_user_token(new_user),
        user=UserOut.model_validate(new_user),
    )


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    username = credentials.username.strip()
    if not username or not credentials.password:
        raise InputValidationError("Username and password are required")

    user = crud.get_user_by_username(db, username)
    # same answer for unknown users and wrong passwords
    if not user or not verify_password(credentials.password, user.password):
        raise AuthError("Invalid credentials")

    return AuthResponse(
        message="Login successful",
        token=create_user_token(user),
        user=UserOut.model_validate(user),
    )

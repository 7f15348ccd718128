from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.auth.schemas import Credentials, LoginResponse, UserResponse
from api.security import get_current_user_id
from logger import console_logger as logger
from tryon.auth import create_access_token, hash_password, verify_password
from tryon.db import get_db
from tryon.models import User

auth_router = APIRouter()

INVALID_CREDENTIAL = "Invalid Credential"


@auth_router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup(credentials: Credentials, db: Session = Depends(get_db)):
    email = credentials.email.strip().lower()
    logger.info(f"Received signup request for {email}")

    user = User(email=email, password_hash=hash_password(credentials.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Signup rejected, email already registered: {email}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    db.refresh(user)
    return user


@auth_router.post("/login", response_model=LoginResponse)
def login(credentials: Credentials, db: Session = Depends(get_db)):
    email = credentials.email.strip().lower()
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login attempt for {email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIAL)

    logger.info(f"User {user.id} logged in")
    return LoginResponse(token=create_access_token(user.id), user=UserResponse.model_validate(user))


@auth_router.get("/me", response_model=UserResponse)
def current_user(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = db.get(User, int(user_id)) if user_id.isdigit() else None
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user

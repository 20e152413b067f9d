import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from tasktracker.schemas.user import UserCreate, UserOut
from tasktracker.models.user import User
from tasktracker.utils.auth import hash_password, verify_password, create_token
from tasktracker.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=UserOut)
def register(user: UserCreate, db: Session = Depends(get_db)):
    exists = db.query(User).filter(User.email == user.email).first()
    if exists:
        raise HTTPException(status_code=400, detail="Email already exists")

    try:
        hashed = hash_password(user.password)
    except ValueError as e:
        # map hashing/validation errors to a 400 so client gets a clear message
        raise HTTPException(status_code=400, detail=str(e))

    new_user = User(email=user.email, password=hashed)
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("User registered. User ID: %s", new_user.id)
    return new_user

@router.post("/login")
def login(user: UserCreate, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email).first()
    if not db_user or not verify_password(user.password, db_user.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_token(db_user.id, db_user.email)
    return {"token": token}

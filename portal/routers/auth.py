from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.config import ACCESS_TOKEN_EXPIRE, ADMIN_SECRET
from portal.core.current_user import get_current_user
from portal.core.deps import get_db
from portal.core.errors import AuthenticationError, Conflict
from portal.core.principal import ROLE_ADMIN, ROLE_STUDENT
from portal.core.security import create_access_token, hash_password, verify_password
from portal.models.user import User
from portal.schemas.auth import LoginRequest, Token
from portal.schemas.user import AdminCreate, UserCreate, UserRead

router = APIRouter()


def _create_user(db: Session, payload: UserCreate, role: str) -> User:
    existing_user = db.query(User).filter(User.email == payload.email).first()
    if existing_user:
        raise Conflict("Email already registered")

    user = User(
        email=payload.email,
        full_name=payload.full_name,
        hashed_password=hash_password(payload.password),
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email already registered")
    db.refresh(user)
    return user


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"description": "Email already registered"},
    },
)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    return _create_user(db, payload, ROLE_STUDENT)


@router.post(
    "/register-admin",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Invalid admin secret"},
        409: {"description": "Email already registered"},
    },
)
def register_admin(payload: AdminCreate, db: Session = Depends(get_db)):
    if payload.admin_secret != ADMIN_SECRET:
        raise AuthenticationError("Invalid admin secret")
    return _create_user(db, payload, ROLE_ADMIN)


@router.post(
    "/login",
    response_model=Token,
    responses={
        401: {"description": "Invalid email or password"},
    },
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role},
        expires_delta=ACCESS_TOKEN_EXPIRE,
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
    }


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user

# app/modules/auth/routes.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.auth import models, schemas, services

router = APIRouter()


@router.post("/signup", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def signup(user: schemas.UserCreate, db: Session = Depends(get_db)):
    if services.get_user_by_email(db, user.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    return services.create_user(db, user)


@router.post("/login", response_model=schemas.LoginResponse)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = services.authenticate_user(db, credentials.email, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return schemas.LoginResponse(
        access_token=services.create_access_token(user),
        user=schemas.UserResponse.model_validate(user)
    )


@router.get("/me", response_model=schemas.UserResponse)
def read_me(current_user: models.User = Depends(services.get_current_user)):
    return current_user


@router.patch("/users/{user_id}/subscription", response_model=schemas.UserResponse)
def update_subscription(
    user_id: int,
    update: schemas.SubscriptionUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(services.get_current_admin_user)
):
    """
    Set a user's subscription tier and status.
    Only accessible to account managers; there is no payment provider integration.
    """
    user = services.set_subscription(db, user_id, update)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User with ID {user_id} not found")
    return user

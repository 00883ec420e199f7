# app/modules/auth/services.py

import datetime
import logging
from typing import Optional

import jwt as pyjwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.modules.auth import models, schemas

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__ident="2b")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()

def create_user(db: Session, user: schemas.UserCreate) -> models.User:
    """
    Register a client account. New accounts start on the free tier
    with no subscription status, so they are never pro.
    """
    db_user = models.User(
        email=user.email,
        password_hash=get_password_hash(user.password),
        full_name=user.full_name,
        role=models.UserRole.CLIENT.value,
        subscription_tier=models.SubscriptionTier.FREE.value
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Registered user {db_user.email} on the free tier")
    return db_user

def authenticate_user(db: Session, email: str, password: str) -> Optional[models.User]:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user

def create_access_token(user: models.User, expires_minutes: Optional[int] = None) -> str:
    """
    Sign a bearer token for user. The tier claim is informational only,
    get_current_user always reads the subscription from the database.
    """
    expires_minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    claims = {
        "sub": user.email,
        "role": user.role,
        "tier": user.subscription_tier,
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(minutes=expires_minutes)
    }
    return pyjwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def set_subscription(db: Session, user_id: int, update: schemas.SubscriptionUpdate) -> Optional[models.User]:
    """
    Change a user's subscription tier and/or status.

    Returns:
        The updated user, or None if there is no such user
    """
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if user is None:
        return None

    if update.subscription_tier is not None:
        user.subscription_tier = update.subscription_tier.value
    if update.subscription_status is not None:
        user.subscription_status = update.subscription_status.value
    db.commit()
    db.refresh(user)

    logger.info(
        f"User {user_id} subscription set to {user.subscription_tier}/{user.subscription_status} (pro={user.is_pro})"
    )
    return user

async def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> models.User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        email = pyjwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]).get("sub")
    except pyjwt.PyJWTError:
        raise unauthorized
    if not email:
        raise unauthorized

    user = get_user_by_email(db, email)
    if user is None:
        raise unauthorized
    return user

async def get_current_admin_user(current_user: models.User = Depends(get_current_user)) -> models.User:
    if current_user.role != models.UserRole.ACCOUNT_MANAGER.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
    return current_user

"""
Модуль аутентификации для Habit Tracker API
JWT-аутентификация, пользователь видит только свои привычки и отметки
"""

import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from habit_tracker import config
from habit_tracker.config import AUTH_JWT_ALGORITHM, AUTH_JWT_EXPIRATION_MINUTES
from habit_tracker.database import get_db
from habit_tracker.models import User

logger = logging.getLogger(__name__)

# Хеширование паролей (Argon2)
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# auto_error=False делает токен опциональным (нужно при AUTH_ENABLED=false)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)

# Пользователь, от имени которого работает API при отключенной аутентификации
ANONYMOUS_USERNAME = "local_user"

SECRET_KEY = os.getenv("AUTH_JWT_SECRET_KEY")
if not SECRET_KEY:
    SECRET_KEY = secrets.token_urlsafe(32)
    logger.warning("Using generated JWT secret key. Set AUTH_JWT_SECRET_KEY in production!")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Создание JWT токена

    Args:
        data: Данные для включения в токен
        expires_delta: Время жизни токена

    Returns:
        JWT токен
    """
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=AUTH_JWT_EXPIRATION_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=AUTH_JWT_ALGORITHM)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Получить пользователя по username"""
    return db.query(User).filter(User.username == username).first()


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    """
    Аутентификация пользователя

    Returns:
        User если логин и пароль верны, иначе None
    """
    user = get_user_by_username(db, username)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def create_user(db: Session, username: str, password: str) -> User:
    """Создание нового пользователя"""
    db_user = User(
        username=username, hashed_password=get_password_hash(password), is_active=True
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def _anonymous_user(db: Session) -> User:
    user = get_user_by_username(db, ANONYMOUS_USERNAME)
    if user is None:
        user = create_user(db, ANONYMOUS_USERNAME, secrets.token_urlsafe(16))
    return user


async def get_current_user(
    db: Session = Depends(get_db),  # noqa: B008
    token: Optional[str] = Depends(oauth2_scheme),  # noqa: B008
) -> Optional[User]:
    """
    Dependency для получения текущего пользователя из JWT токена

    Returns:
        User или None, если токен не передан

    Raises:
        HTTPException: Если токен невалиден или пользователь не найден
    """
    if token is None:
        return None

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[AUTH_JWT_ALGORITHM])
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
    except JWTError as e:
        raise credentials_exception from e

    user = get_user_by_username(db, username=username)
    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
    db: Session = Depends(get_db),  # noqa: B008
    current_user: Optional[User] = Depends(get_current_user),  # noqa: B008
) -> User:
    """
    Dependency для получения активного пользователя

    При AUTH_ENABLED=false все запросы выполняются от имени локального пользователя.

    Raises:
        HTTPException: 401 без токена, 403 для неактивного пользователя
    """
    if not config.AUTH_ENABLED:
        return current_user or _anonymous_user(db)

    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return current_user

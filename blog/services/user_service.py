"""User service: sign-up, lookups and password checks"""

import enum
import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blog.core.clock import utcnow
from blog.core.database import storage_guard
from blog.core.errors import AuthError, NotFoundError, ValidationError
from blog.models.user import User, DEFAULT_ROLE
from blog.schemas.user import UserRecord

logger = logging.getLogger(__name__)

# same message whatever went wrong
AUTH_FAILED = "invalid credentials"


class UserCreateStatus(enum.Enum):
    CREATED = "created"
    CONFLICT = "conflict"


class UserCreateResult:
    def __init__(self, status: UserCreateStatus, user: Optional[UserRecord] = None):
        self.status = status
        self.user = user

    @property
    def created(self) -> bool:
        return self.status is UserCreateStatus.CREATED


def create_user(db: Session, username: str, password: str, role: str = DEFAULT_ROLE) -> UserCreateResult:
    if not username or not password:
        raise ValidationError("username and password are required")

    with storage_guard(db, "create user"):
        if db.query(User).filter(User.username == username).first():
            logger.info(f"Username {username!r} already taken")
            return UserCreateResult(UserCreateStatus.CONFLICT)

        now = utcnow()
        user = User(id=uuid.uuid4(), username=username, role=role, created_at=now, updated_at=now)
        user.set_password(password)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(f"Username {username!r} taken concurrently")
            return UserCreateResult(UserCreateStatus.CONFLICT)
        db.refresh(user)

    logger.info(f"Created user {user.id}")
    return UserCreateResult(UserCreateStatus.CREATED, UserRecord.model_validate(user))


def find_user(db: Session, user_id: uuid.UUID) -> UserRecord:
    with storage_guard(db, "find user"):
        user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"user {user_id} not found")
    return UserRecord.model_validate(user)


def find_user_by_username(db: Session, username: str) -> UserRecord:
    with storage_guard(db, "find user"):
        user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise NotFoundError(f"user {username!r} not found")
    return UserRecord.model_validate(user)


def authenticate_user(db: Session, user_id: uuid.UUID, password: str) -> None:
    """Raise AuthError unless password matches the stored hash"""
    if not password:
        raise AuthError(AUTH_FAILED)

    with storage_guard(db, "authenticate user"):
        user = db.get(User, user_id)

    if user is None or not user.verify_password(password):
        raise AuthError(AUTH_FAILED)


def login(db: Session, username: str, password: str) -> UserRecord:
    if not username or not password:
        raise AuthError(AUTH_FAILED)
    try:
        user = find_user_by_username(db, username)
    except NotFoundError:
        raise AuthError(AUTH_FAILED)
    authenticate_user(db, user.id, password)
    return user
